"""
Test suite for the reports module
Tests: period and trend helpers, dashboard KPIs, report endpoints, exports and text formatting
"""
import io
from datetime import date
from django.test import TestCase
from openpyxl import load_workbook
from rest_framework import status
from rest_framework.exceptions import ValidationError
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.reports.formatting import format_date, format_money, format_quantity, number_to_words
from tradebook.reports.views import period_range, trend_buckets


class PeriodHelperTests(TestCase):

    def test_period_ranges(self):
        today = date(2024, 3, 15)
        self.assertEqual(period_range('this_month', today), (date(2024, 3, 1), date(2024, 3, 31)))
        self.assertEqual(period_range('last_month', today), (date(2024, 2, 1), date(2024, 2, 29)))
        self.assertEqual(period_range('last_year', today), (date(2023, 1, 1), date(2023, 12, 31)))

    def test_last_month_across_year(self):
        self.assertEqual(period_range('last_month', date(2024, 1, 9)), (date(2023, 12, 1), date(2023, 12, 31)))

    def test_unknown_period(self):
        with self.assertRaises(ValidationError):
            period_range('forever')

    def test_weekly_buckets_cover_month(self):
        buckets = trend_buckets('weekly', date(2024, 2, 10))
        self.assertEqual(len(buckets), 5)
        self.assertEqual(buckets[0], ('Week 1', date(2024, 2, 1), date(2024, 2, 7)))
        self.assertEqual(buckets[-1], ('Week 5', date(2024, 2, 29), date(2024, 2, 29)))

    def test_monthly_buckets(self):
        buckets = trend_buckets('monthly', date(2024, 2, 10))
        self.assertEqual([name for name, _, _ in buckets][0], 'Sep 2023')
        self.assertEqual(buckets[-1], ('Feb 2024', date(2024, 2, 1), date(2024, 2, 29)))

    def test_yearly_buckets(self):
        self.assertEqual([name for name, _, _ in trend_buckets('yearly', date(2024, 6, 1))],
                         ['2020', '2021', '2022', '2023', '2024'])


class FormattingTests(TestCase):

    def test_number_to_words(self):
        self.assertEqual(number_to_words(1250), 'ONE THOUSAND TWO HUNDRED FIFTY ONLY')
        self.assertEqual(number_to_words(Decimal('2000000')), 'TWO MILLION ONLY')
        self.assertEqual(number_to_words(0), 'ZERO ONLY')

    def test_money_quantity_and_dates(self):
        self.assertEqual(format_money(1234.5), '1,234.50')
        self.assertEqual(format_quantity(Decimal('2.500')), '2.5')
        self.assertEqual(format_quantity(Decimal('10.000')), '10')
        self.assertEqual(format_date(date(2024, 3, 5)), '05-03-2024')
        self.assertEqual(format_date('2024-03-05', '/'), '05/03/2024')
        self.assertEqual(format_date(None), '-')


class DashboardTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        TestDataFactory.create_sales_invoice()
        TestDataFactory.create_purchase_order(post=True)
        TestDataFactory.create_purchase_order()
        TestDataFactory.create_expense(amount=Decimal('500.00'))
        TestDataFactory.create_product(name='Nearly gone', current_stock=Decimal('2'))

    def test_kpis(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        kpis = response.data['kpis']
        self.assertEqual(kpis['total_sales'], 236.0)
        self.assertEqual(kpis['total_purchases'], 800.0)
        self.assertEqual(kpis['total_expenses'], 500.0)
        self.assertEqual(kpis['net_profit'], -1064.0)
        self.assertEqual(kpis['total_receivables'], 236.0)
        self.assertEqual(kpis['total_payables'], 800.0)
        self.assertEqual(kpis['low_stock_count'], 1)

    def test_lists(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['recent_sales'][0]['invoice_no'], 'INV-0001')
        self.assertEqual(response.data['low_stock_items'][0]['name'], 'Nearly gone')
        self.assertEqual(sum(week['purchases'] for week in response.data['purchases_vs_expenses']), 800.0)
        self.assertEqual(response.data['customer_distribution']['new_30_days'], 1)

    def test_last_year_is_empty(self):
        response = self.client.get('/api/v1/reports/dashboard/', {'period': 'last_year'})
        self.assertEqual(response.data['kpis']['total_sales'], 0.0)

    def test_invalid_period(self):
        response = self.client.get('/api/v1/reports/dashboard/', {'period': 'decade'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sales_trend(self):
        response = self.client.get('/api/v1/reports/sales-trend/', {'view': 'monthly'})
        self.assertEqual(len(response.data['data']), 6)
        self.assertEqual(response.data['data'][-1]['sales'], 236.0)


class ReportEndpointTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.customer = TestDataFactory.create_customer()
        self.invoice = TestDataFactory.create_sales_invoice(customer=self.customer)
        TestDataFactory.create_sales_invoice(gst_percentage=Decimal('0'))

    def test_sale_report(self):
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totals'], {'count': 2, 'total_amount': Decimal('436.00')})
        self.assertEqual(response.data['columns'][0], 'Invoice #')

    def test_sale_report_for_customer(self):
        response = self.client.get('/api/v1/reports/sales/', {'customer': self.customer.id})
        self.assertEqual(len(response.data['rows']), 1)
        self.assertEqual(response.data['rows'][0][0], self.invoice.invoice_no)

    def test_sale_report_outside_range(self):
        response = self.client.get('/api/v1/reports/sales/', {'date_from': '2000-01-01', 'date_to': '2000-12-31'})
        self.assertEqual(response.data['totals']['count'], 0)

    def test_gst_report_only_taxed_invoices(self):
        response = self.client.get('/api/v1/reports/gst/')
        totals = response.data['totals']
        self.assertEqual(totals['count'], 1)
        self.assertEqual(totals['total_gst'], Decimal('36.00'))
        self.assertEqual(totals['total_subtotal'], Decimal('200.00'))

    def test_purchase_report_excludes_drafts(self):
        TestDataFactory.create_purchase_order()
        TestDataFactory.create_purchase_order(post=True)
        response = self.client.get('/api/v1/reports/purchases/')
        self.assertEqual(response.data['totals']['count'], 1)

    def test_customer_ledger_report(self):
        response = self.client.get('/api/v1/reports/customer-ledger/', {'customer': self.customer.id})
        self.assertEqual(response.data['totals']['total_debit'], Decimal('236.00'))
        self.assertEqual(response.data['totals']['outstanding'], Decimal('236.00'))

    def test_stock_report(self):
        response = self.client.get('/api/v1/reports/stock/')
        self.assertEqual(response.data['totals']['total_items'], 2)

    def test_excel_export(self):
        response = self.client.get('/api/v1/reports/sales/', {'export': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        workbook = load_workbook(io.BytesIO(response.content))
        self.assertEqual(workbook.active.title, 'Sale Report')

    def test_pdf_export(self):
        response = self.client.get('/api/v1/reports/gst/', {'export': 'pdf'})
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('gst_report_', response['Content-Disposition'])

    def test_reports_need_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['sales_invoice_view']))
        self.assertEqual(client.get('/api/v1/reports/sales/').status_code, status.HTTP_403_FORBIDDEN)
