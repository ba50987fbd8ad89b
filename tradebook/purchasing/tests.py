"""
Test suite for the purchasing module
Tests: purchase order drafts, posting, status changes, cancellation and deletion reversal
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.inventory.models import StockIn
from tradebook.parties.models import SupplierLedger
from tradebook.purchasing.models import PurchaseOrder


class PurchaseOrderAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.supplier = TestDataFactory.create_supplier(balance=Decimal('200.00'))
        self.product = TestDataFactory.create_product(current_stock=Decimal('5'))

    def _payload(self, **overrides):
        data = {
            'supplier': self.supplier.id,
            'is_gst': True,
            'gst_percentage': '10',
            'items': [{'product': self.product.id, 'quantity': '4', 'unit_price': '25.00'}],
        }
        data.update(overrides)
        return data

    def test_create_draft_gets_number(self):
        response = self.client.post('/api/v1/purchase-orders/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['po_no'], 'PO-0001')
        self.assertEqual(response.data['status'], PurchaseOrder.STATUS_DRAFT)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('110.00'))
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('200.00'))

    def test_gst_ignored_when_not_gst_order(self):
        response = self.client.post('/api/v1/purchase-orders/', self._payload(is_gst=False), format='json')
        self.assertEqual(Decimal(response.data['gst_amount']), Decimal('0.00'))
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('100.00'))

    def test_create_posted(self):
        response = self.client.post('/api/v1/purchase-orders/', self._payload(status='received'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], PurchaseOrder.STATUS_RECEIVED)
        self.assertEqual(Decimal(response.data['previous_balance']), Decimal('200.00'))
        self.assertEqual(Decimal(response.data['final_payable']), Decimal('310.00'))

    def test_new_order_cannot_be_cancelled(self):
        response = self.client.post('/api/v1/purchase-orders/', self._payload(status='cancelled'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_post_raises_payable_and_receives_stock(self):
        purchase_order = TestDataFactory.create_purchase_order(supplier=self.supplier, product=self.product)
        response = self.client.post(f'/api/v1/purchase-orders/{purchase_order.id}/post/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], PurchaseOrder.STATUS_PENDING)

        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('1000.00'))
        self.assertEqual(self.supplier.last_purchase_date, purchase_order.po_date)
        entry = SupplierLedger.objects.get(supplier=self.supplier)
        self.assertEqual(entry.credit, Decimal('800.00'))

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('15'))
        stock = StockIn.objects.get(reference_id=purchase_order.id)
        self.assertEqual(stock.reference_type, StockIn.REFERENCE_PURCHASE)
        self.assertEqual(stock.unit_cost, Decimal('80.00'))

    def test_post_twice(self):
        purchase_order = TestDataFactory.create_purchase_order(post=True)
        response = self.client.post(f'/api/v1/purchase-orders/{purchase_order.id}/post/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_posted_order_only_takes_notes_and_dates(self):
        purchase_order = TestDataFactory.create_purchase_order(post=True)
        response = self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'notes': 'Delivered late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'gst_percentage': '5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_to_received(self):
        purchase_order = TestDataFactory.create_purchase_order(supplier=self.supplier, post=True)
        response = self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'status': 'received'}, format='json')
        self.assertEqual(response.data['status'], PurchaseOrder.STATUS_RECEIVED)
        self.assertEqual(SupplierLedger.objects.filter(supplier=self.supplier).count(), 1)

    def test_cancel_posted_reverses(self):
        purchase_order = TestDataFactory.create_purchase_order(supplier=self.supplier, product=self.product, post=True)
        response = self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.supplier.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('200.00'))
        self.assertEqual(self.product.current_stock, Decimal('5'))
        self.assertFalse(StockIn.objects.exists())

    def test_cancelled_order_is_final(self):
        purchase_order = TestDataFactory.create_purchase_order(post=True)
        self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'status': 'cancelled'}, format='json')
        response = self.client.patch(f'/api/v1/purchase-orders/{purchase_order.id}/', {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_posted_reverses(self):
        purchase_order = TestDataFactory.create_purchase_order(supplier=self.supplier, product=self.product, post=True)
        response = self.client.delete(f'/api/v1/purchase-orders/{purchase_order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('200.00'))
        self.assertFalse(SupplierLedger.objects.exists())

    def test_drafts_list(self):
        TestDataFactory.create_purchase_order()
        TestDataFactory.create_purchase_order(post=True)
        response = self.client.get('/api/v1/purchase-orders/drafts/')
        self.assertEqual(len(response.data), 1)

    def test_list_totals_exclude_drafts(self):
        TestDataFactory.create_purchase_order()
        TestDataFactory.create_purchase_order(post=True)
        response = self.client.get('/api/v1/purchase-orders/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['totals']['total_amount'], Decimal('800.00'))

    def test_purchase_order_pdf(self):
        purchase_order = TestDataFactory.create_purchase_order(post=True)
        response = self.client.get(f'/api/v1/purchase-orders/{purchase_order.id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
