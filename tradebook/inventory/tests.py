"""
Test suite for the inventory module
Tests: stock in/out services, negative stock restriction, manual movement endpoints, low stock and availability
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.inventory.models import StockIn, StockOut
from tradebook.inventory.services import record_stock_in, record_stock_out, reverse_document_stock


class StockServiceTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(current_stock=Decimal('10'))
        self.today = timezone.localdate()

    def test_stock_in_adds_quantity(self):
        entry = record_stock_in(self.product, Decimal('5'), self.today, unit_cost=Decimal('12.50'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('15'))
        self.assertEqual(entry.total_cost, Decimal('62.50'))
        self.assertEqual(entry.stock_in_no, 'STK-IN-0001')

    def test_stock_out_subtracts_quantity(self):
        entry = record_stock_out(self.product, Decimal('4'), self.today)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('6'))
        self.assertEqual(entry.stock_out_no, 'STK-OUT-0001')

    def test_negative_stock_allowed_by_default(self):
        record_stock_out(self.product, Decimal('25'), self.today)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('-15'))

    def test_negative_stock_restricted(self):
        TestDataFactory.update_settings(restrict_negative_stock=True)
        with self.assertRaises(ValidationError):
            record_stock_out(self.product, Decimal('11'), self.today)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('10'))
        self.assertFalse(StockOut.objects.exists())

    def test_zero_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            record_stock_in(self.product, Decimal('0'), self.today)

    def test_reverse_document_stock(self):
        for quantity in (Decimal('1'), Decimal('2')):
            record_stock_out(self.product, quantity, self.today, reference_type=StockOut.REFERENCE_SALE_ORDER, reference_id=7)
        self.assertEqual(reverse_document_stock(StockOut, StockOut.REFERENCE_SALE_ORDER, 7), 2)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('10'))


class StockMovementAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.product = TestDataFactory.create_product(current_stock=Decimal('10'))
        self.warehouse = TestDataFactory.create_warehouse()

    def test_manual_stock_in(self):
        data = {'product': self.product.id, 'warehouse': self.warehouse.id, 'quantity': '20', 'unit_cost': '5.00'}
        response = self.client.post('/api/v1/stock-in/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['reference_type'], StockIn.REFERENCE_MANUAL)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('30'))

    def test_manual_stock_out_over_available_when_restricted(self):
        TestDataFactory.update_settings(restrict_negative_stock=True)
        response = self.client.post('/api/v1/stock-out/', {'product': self.product.id, 'quantity': '50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_manual_stock_in_reverses(self):
        entry = record_stock_in(self.product, Decimal('5'), timezone.localdate())
        response = self.client.delete(f'/api/v1/stock-in/{entry.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('10'))

    def test_document_stock_cannot_be_deleted_directly(self):
        order = TestDataFactory.create_sale_order(product=self.product, finalize=True)
        entry = StockOut.objects.get(reference_id=order.id)
        response = self.client.delete(f'/api/v1/stock-out/{entry.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_totals(self):
        record_stock_in(self.product, Decimal('3'), timezone.localdate(), unit_cost=Decimal('2.00'))
        record_stock_in(self.product, Decimal('4'), timezone.localdate(), unit_cost=Decimal('2.00'))
        response = self.client.get('/api/v1/stock-in/')
        self.assertEqual(response.data['totals']['total_quantity'], Decimal('7'))
        self.assertEqual(response.data['totals']['total_cost'], Decimal('14.00'))


class StockLevelAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        TestDataFactory.create_product(name='Empty', current_stock=Decimal('0'))
        TestDataFactory.create_product(name='Low', current_stock=Decimal('4'))
        TestDataFactory.create_product(name='Plenty', current_stock=Decimal('400'), unit_price=Decimal('2.50'))

    def test_low_stock_counts(self):
        response = self.client.get('/api/v1/stock/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['counts'], {'out_of_stock': 1, 'low_stock': 1})

    def test_availability_filter_and_totals(self):
        response = self.client.get('/api/v1/stock/availability/', {'status': 'ok'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['totals']['total_value'], Decimal('1000.00'))

    def test_availability_export(self):
        response = self.client.get('/api/v1/stock/availability/', {'export': 'xlsx'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('stock_availability_', response['Content-Disposition'])
