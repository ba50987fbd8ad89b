"""
Test suite for the parties module
Tests: customers, suppliers, opening balances, ledger posting and reversal, ledger endpoints and exports
"""
import io
from datetime import timedelta
from django.core.management import call_command
from django.test import TestCase
from openpyxl import load_workbook
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.parties.models import Customer, CustomerLedger, Supplier, SupplierLedger
from tradebook.parties.services import (
    post_customer_entry, post_supplier_entry, reverse_customer_entries, reverse_supplier_entries
)


class LedgerServiceTests(TestCase):
    """Balance and running ledger balance bookkeeping"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer()
        self.supplier = TestDataFactory.create_supplier()
        self.today = timezone.localdate()

    def test_customer_debit_and_credit(self):
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, self.today, debit=Decimal('1000'),
                            reference_id=1, reference_no='SO-0001')
        entry = post_customer_entry(self.customer, CustomerLedger.TYPE_PAYMENT, self.today, credit=Decimal('400'),
                                    reference_id=1, reference_no='PI-0001')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('600.00'))
        self.assertEqual(entry.balance, Decimal('600.00'))

    def test_supplier_credit_raises_payable(self):
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, self.today, credit=Decimal('750'),
                            reference_id=3, reference_no='PO-0003')
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PAYMENT, self.today, debit=Decimal('250'),
                            reference_id=3, reference_no='PO-PAY-0003')
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('500.00'))

    def test_reverse_restores_balance_and_removes_rows(self):
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, self.today, debit=Decimal('300'), reference_id=9)
        deleted = reverse_customer_entries(self.customer, CustomerLedger.TYPE_SALE_ORDER, 9)
        self.customer.refresh_from_db()
        self.assertEqual(deleted, 1)
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))
        self.assertFalse(CustomerLedger.objects.filter(reference_id=9).exists())

    def test_reverse_supplier_entries(self):
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, self.today, credit=Decimal('90'), reference_id=4)
        reverse_supplier_entries(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, 4)
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('0.00'))

    def test_reversal_restates_later_rows(self):
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, self.today, debit=Decimal('100'), reference_id=1)
        post_customer_entry(self.customer, CustomerLedger.TYPE_PAYMENT, self.today, credit=Decimal('30'), reference_id=2)
        reverse_customer_entries(self.customer, CustomerLedger.TYPE_SALE_ORDER, 1)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('-30.00'))
        self.assertEqual(list(CustomerLedger.objects.values_list('transaction_type', 'balance')),
                         [(CustomerLedger.TYPE_PAYMENT, Decimal('-30.00'))])

    def test_backdated_entry_gets_balance_at_its_date(self):
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, self.today, debit=Decimal('100'), reference_id=1)
        entry = post_customer_entry(self.customer, CustomerLedger.TYPE_PAYMENT, self.today - timedelta(days=5),
                                    credit=Decimal('30'), reference_id=2)
        self.assertEqual(entry.balance, Decimal('-30.00'))
        self.assertEqual(
            list(CustomerLedger.objects.values_list('debit', 'credit', 'balance')),
            [(Decimal('0.00'), Decimal('30.00'), Decimal('-30.00')), (Decimal('100.00'), Decimal('0.00'), Decimal('70.00'))]
        )

    def test_reversing_backdated_supplier_row(self):
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, self.today, credit=Decimal('800'), reference_id=5)
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PAYMENT, self.today - timedelta(days=2),
                            debit=Decimal('300'), reference_id=6)
        self.assertEqual(list(SupplierLedger.objects.values_list('balance', flat=True)),
                         [Decimal('-300.00'), Decimal('500.00')])

        reverse_supplier_entries(self.supplier, SupplierLedger.TYPE_PAYMENT, 6)
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('800.00'))
        self.assertEqual(list(SupplierLedger.objects.values_list('balance', flat=True)), [Decimal('800.00')])

    def test_balance_carried_in_without_ledger_rows(self):
        customer = TestDataFactory.create_customer(balance=Decimal('1500.00'))
        entry = post_customer_entry(customer, CustomerLedger.TYPE_PAYMENT, self.today, credit=Decimal('600'), reference_id=7)
        self.assertEqual(entry.balance, Decimal('900.00'))


class CustomerAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_create_with_opening_balance(self):
        data = {'customer_name': 'Ali Traders', 'mobile_no': '03001112233', 'opening_balance': '2500.00'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['current_balance']), Decimal('2500.00'))
        entry = CustomerLedger.objects.get(customer_id=response.data['id'])
        self.assertEqual(entry.transaction_type, CustomerLedger.TYPE_OPENING)
        self.assertEqual(entry.debit, Decimal('2500.00'))

    def test_create_without_opening_balance_has_no_ledger_row(self):
        response = self.client.post('/api/v1/customers/', {'customer_name': 'Walk-in'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(CustomerLedger.objects.exists())

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/customers/', {'customer_name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_balance_not_editable(self):
        customer = TestDataFactory.create_customer(balance=Decimal('10.00'))
        self.client.patch(f'/api/v1/customers/{customer.id}/', {'current_balance': '999.00'}, format='json')
        customer.refresh_from_db()
        self.assertEqual(customer.current_balance, Decimal('10.00'))

    def test_list_totals(self):
        TestDataFactory.create_customer(balance=Decimal('100.00'))
        TestDataFactory.create_customer(balance=Decimal('-40.00'))
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.data['totals']['total_count'], 2)
        self.assertEqual(response.data['totals']['total_outstanding'], Decimal('100.00'))
        self.assertEqual(response.data['totals']['total_advance'], Decimal('40.00'))

    def test_customer_with_orders_cannot_be_deleted(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        response = self.client.delete(f'/api/v1/customers/{order.customer_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Customer.objects.filter(pk=order.customer_id).exists())

    def test_export_excel(self):
        TestDataFactory.create_customer(name='Export Me')
        response = self.client.get('/api/v1/customers/export/', {'export': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')

    def test_export_unknown_format(self):
        response = self.client.get('/api/v1/customers/export/', {'export': 'csv'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SupplierAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_opening_balance_is_a_credit(self):
        response = self.client.post('/api/v1/suppliers/', {'supplier_name': 'Paper Mills', 'opening_balance': '800'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        entry = SupplierLedger.objects.get(supplier_id=response.data['id'])
        self.assertEqual(entry.credit, Decimal('800.00'))
        self.assertEqual(entry.debit, Decimal('0.00'))

    def test_export_pdf(self):
        TestDataFactory.create_supplier()
        response = self.client.get('/api/v1/suppliers/export/', {'export': 'pdf'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))


class LedgerAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.customer = TestDataFactory.create_customer()
        today = timezone.localdate()
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, today, debit=Decimal('1000'), reference_id=1, reference_no='SO-0001')
        post_customer_entry(self.customer, CustomerLedger.TYPE_PAYMENT, today, credit=Decimal('300'), reference_id=2, reference_no='PI-0001')

    def test_customer_ledger_stats(self):
        response = self.client.get('/api/v1/ledgers/customers/', {'customer': self.customer.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        stats = response.data['stats']
        self.assertEqual(stats['total_invoices'], 1)
        self.assertEqual(stats['total_sales'], Decimal('1000.00'))
        self.assertEqual(stats['total_payments'], Decimal('300.00'))
        self.assertEqual(stats['outstanding'], Decimal('700.00'))

    def test_filter_by_type(self):
        response = self.client.get('/api/v1/ledgers/customers/', {'transaction_type': 'payment'})
        self.assertEqual(response.data['count'], 1)

    def test_invalid_date_filter(self):
        response = self.client.get('/api/v1/ledgers/customers/', {'date_from': '31-12-2024'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ledger_export(self):
        response = self.client.get(f'/api/v1/ledgers/customers/{self.customer.id}/export/', {'export': 'pdf'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('attachment;', response['Content-Disposition'])

    def test_staff_needs_ledger_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['customers_view']))
        response = client.get('/api/v1/ledgers/customers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_balances_after_deleting_sale_order(self):
        customer = TestDataFactory.create_customer()
        order = TestDataFactory.create_sale_order(customer=customer, finalize=True)
        post_customer_entry(customer, CustomerLedger.TYPE_PAYMENT, timezone.localdate(), credit=Decimal('36'),
                            reference_id=99, reference_no='PI-0099')

        self.assertEqual(self.client.delete(f'/api/v1/sale-orders/{order.id}/').status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get('/api/v1/ledgers/customers/', {'customer': customer.id})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(Decimal(response.data['results'][0]['balance']), Decimal('-36.00'))


class SupplierLedgerAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.supplier = TestDataFactory.create_supplier()
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, timezone.localdate(),
                            credit=Decimal('800'), reference_id=1, reference_no='PO-0001')

    def test_outstanding_is_the_payable(self):
        response = self.client.get('/api/v1/ledgers/suppliers/', {'supplier': self.supplier.id})
        self.assertEqual(response.data['stats']['outstanding'], Decimal('800.00'))
        self.assertEqual(response.data['stats']['total_purchases'], Decimal('800.00'))

    def test_export_outstanding_matches_list(self):
        response = self.client.get(f'/api/v1/ledgers/suppliers/{self.supplier.id}/export/', {'export': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sheet = load_workbook(io.BytesIO(response.content)).active
        totals = {}
        for row in sheet.iter_rows(values_only=True):
            for label, value in zip(row, row[1:]):
                if label in ('Total Debit', 'Total Credit', 'Outstanding'):
                    totals[label] = value
        self.assertEqual(totals['Outstanding'], '800.00')
        self.assertEqual(totals['Total Credit'], '800.00')


class RepairBalancesCommandTests(TestCase):
    """repair_party_balances management command"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer()
        self.supplier = TestDataFactory.create_supplier()
        today = timezone.localdate()
        post_customer_entry(self.customer, CustomerLedger.TYPE_SALE_ORDER, today, debit=Decimal('500'), reference_id=1)
        post_supplier_entry(self.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, today, credit=Decimal('300'), reference_id=1)
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal('999.00'))
        Supplier.objects.filter(pk=self.supplier.pk).update(current_balance=Decimal('0.00'))

    def test_repairs_balances(self):
        call_command('repair_party_balances', stdout=io.StringIO())
        self.customer.refresh_from_db()
        self.supplier.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('500.00'))
        self.assertEqual(self.supplier.current_balance, Decimal('300.00'))

    def test_dry_run_changes_nothing(self):
        out = io.StringIO()
        call_command('repair_party_balances', '--dry-run', '--party', 'customers', stdout=out)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('999.00'))
        self.assertIn('999.00 -> 500.00', out.getvalue())
