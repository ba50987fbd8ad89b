"""
Test suite for the sales module
Tests: sale order drafts and finalization, ledger and stock effects, invoice conversion and documents
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.inventory.models import StockOut
from tradebook.parties.models import CustomerLedger
from tradebook.sales.models import SaleOrder, SalesInvoice


class SaleOrderAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(unit_price=Decimal('100.00'), current_stock=Decimal('50'),
                                                      weight=Decimal('1.5'))

    def _payload(self, **overrides):
        data = {
            'customer': self.customer.id,
            'gst_percentage': '18',
            'bill_situation': 'credit',
            'items': [{'product': self.product.id, 'quantity': '2', 'unit_price': '100.00'}],
        }
        data.update(overrides)
        return data

    def test_create_draft(self):
        response = self.client.post('/api/v1/sale-orders/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], SaleOrder.STATUS_DRAFT)
        self.assertIsNone(response.data['order_no'])
        self.assertEqual(Decimal(response.data['subtotal']), Decimal('200.00'))
        self.assertEqual(Decimal(response.data['gst_amount']), Decimal('36.00'))
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('236.00'))
        self.assertEqual(Decimal(response.data['items'][0]['net_weight']), Decimal('3.000'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))
        self.assertFalse(StockOut.objects.exists())

    def test_create_without_items(self):
        response = self.client.post('/api/v1/sale-orders/', self._payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_finalized(self):
        response = self.client.post('/api/v1/sale-orders/', self._payload(status='finalized'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order_no'], 'SO-0001')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('236.00'))

    def test_finalize_books_balance_ledger_and_stock(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, product=self.product, unit_price=Decimal('120.00'))
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], SaleOrder.STATUS_FINALIZED)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('283.20'))
        self.assertEqual(self.customer.last_order_date, order.order_date)

        entry = CustomerLedger.objects.get(customer=self.customer)
        self.assertEqual(entry.transaction_type, CustomerLedger.TYPE_SALE_ORDER)
        self.assertEqual(entry.debit, Decimal('283.20'))
        self.assertEqual(entry.reference_no, 'SO-0001')

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('48'))
        self.assertEqual(self.product.unit_price, Decimal('120.00'))
        self.assertEqual(StockOut.objects.get().reference_type, StockOut.REFERENCE_SALE_ORDER)

    def test_finalize_twice(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cash_order_posts_zero_debit(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, bill_situation='cash', finalize=True)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))
        entry = CustomerLedger.objects.get(reference_id=order.id)
        self.assertEqual(entry.debit, Decimal('0.00'))
        self.assertIn('(Cash)', entry.description)

    def test_finalize_rolls_back_when_stock_restricted(self):
        TestDataFactory.update_settings(restrict_negative_stock=True)
        order = TestDataFactory.create_sale_order(customer=self.customer, product=self.product, quantity=Decimal('80'))
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        order.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(order.status, SaleOrder.STATUS_DRAFT)
        self.assertIsNone(order.order_no)
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))
        self.assertFalse(CustomerLedger.objects.exists())

    def test_edit_draft_replaces_items(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, product=self.product)
        response = self.client.patch(f'/api/v1/sale-orders/{order.id}/', {
            'gst_percentage': '0',
            'items': [{'product': self.product.id, 'quantity': '5', 'unit_price': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('50.00'))

    def test_edit_finalized_rejected(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        response = self.client.patch(f'/api/v1/sale-orders/{order.id}/', {'notes': 'late change'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_finalized_reverses(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, product=self.product, finalize=True)
        response = self.client.delete(f'/api/v1/sale-orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.customer.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('0.00'))
        self.assertEqual(self.product.current_stock, Decimal('50'))
        self.assertFalse(CustomerLedger.objects.exists())

    def test_delete_with_invoice_rejected(self):
        invoice = TestDataFactory.create_sales_invoice()
        response = self.client.delete(f'/api/v1/sale-orders/{invoice.sale_order_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(SaleOrder.objects.filter(pk=invoice.sale_order_id).exists())

    def test_list_filters_by_status(self):
        TestDataFactory.create_sale_order()
        TestDataFactory.create_sale_order(finalize=True)
        response = self.client.get('/api/v1/sale-orders/', {'status': 'draft'})
        self.assertEqual(response.data['count'], 1)

    def test_order_pdf(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        response = self.client.get(f'/api/v1/sale-orders/{order.id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))


class SalesInvoiceTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.customer = TestDataFactory.create_customer(balance=Decimal('100.00'))

    def test_convert_creates_invoice(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, finalize=True)
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/convert/', {'fbr_invoice_no': 'FBR-77'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_no'], 'INV-0001')
        self.assertEqual(response.data['fbr_invoice_no'], 'FBR-77')
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('236.00'))
        self.assertEqual(Decimal(response.data['previous_balance']), Decimal('100.00'))
        self.assertEqual(Decimal(response.data['final_balance']), Decimal('336.00'))
        self.assertEqual(len(response.data['items']), 1)

    def test_convert_does_not_touch_balance(self):
        order = TestDataFactory.create_sale_order(customer=self.customer, finalize=True)
        self.client.post(f'/api/v1/sale-orders/{order.id}/convert/')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('336.00'))
        self.assertEqual(CustomerLedger.objects.filter(customer=self.customer).count(), 1)

    def test_convert_only_once(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        self.client.post(f'/api/v1/sale-orders/{order.id}/convert/')
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/convert/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(SalesInvoice.objects.count(), 1)

    def test_draft_cannot_be_converted(self):
        order = TestDataFactory.create_sale_order()
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/convert/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deleting_invoice_allows_reconversion(self):
        invoice = TestDataFactory.create_sales_invoice()
        order_id = invoice.sale_order_id
        self.assertEqual(self.client.delete(f'/api/v1/sales-invoices/{invoice.id}/').status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.post(f'/api/v1/sale-orders/{order_id}/convert/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice_no'], 'INV-0002')

    def test_update_fbr_number(self):
        invoice = TestDataFactory.create_sales_invoice()
        response = self.client.patch(f'/api/v1/sales-invoices/{invoice.id}/', {'fbr_invoice_no': 'FBR-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        invoice.refresh_from_db()
        self.assertEqual(invoice.fbr_invoice_no, 'FBR-1')

    def test_customer_po_not_editable_on_invoice(self):
        invoice = TestDataFactory.create_sales_invoice()
        response = self.client.patch(f'/api/v1/sales-invoices/{invoice.id}/',
                                     {'customer_po': 'CPO-9', 'box': '12'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        invoice.refresh_from_db()
        self.assertEqual(invoice.customer_po, '')
        self.assertEqual(invoice.box, '12')

    def test_invoice_pdf(self):
        invoice = TestDataFactory.create_sales_invoice()
        response = self.client.get(f'/api/v1/sales-invoices/{invoice.id}/pdf/', {'inline': '1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Disposition'].startswith('inline;'))

    def test_staff_without_convert_permission(self):
        order = TestDataFactory.create_sale_order(finalize=True)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['sales_order_view', 'sales_order_add']))
        response = client.post(f'/api/v1/sale-orders/{order.id}/convert/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
