"""
Test suite for the catalog module
Tests: categories, units, products, filters and the cached product detail and options
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.catalog.models import Product
from tradebook.inventory.services import record_stock_in


class ProductModelTests(TestCase):

    def test_stock_status(self):
        product = TestDataFactory.create_product(current_stock=Decimal('0'), low_stock_threshold=Decimal('5'))
        self.assertEqual(product.stock_status, Product.STOCK_OUT)
        product.current_stock = Decimal('5')
        self.assertEqual(product.stock_status, Product.STOCK_LOW)
        product.current_stock = Decimal('6')
        self.assertEqual(product.stock_status, Product.STOCK_OK)

    def test_stock_value_and_reorder_quantity(self):
        product = TestDataFactory.create_product(unit_price=Decimal('20.00'), current_stock=Decimal('3'),
                                                 low_stock_threshold=Decimal('10'))
        self.assertEqual(product.stock_value, Decimal('60.00'))
        self.assertEqual(product.reorder_quantity, Decimal('7'))


class ProductAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.category = TestDataFactory.create_category('Tapes')
        self.unit = TestDataFactory.create_unit('Roll', 'roll')

    def test_create_product(self):
        data = {'name': 'Packing Tape', 'category': self.category.id, 'unit': self.unit.id,
                'unit_price': '150.00', 'low_stock_threshold': '20'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category_name'], 'Tapes')
        self.assertEqual(Decimal(response.data['current_stock']), Decimal('0'))

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Bad', 'unit_price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_search_and_low_stock(self):
        TestDataFactory.create_product(name='Blue Tape', current_stock=Decimal('2'))
        TestDataFactory.create_product(name='Red Tape', current_stock=Decimal('100'))
        TestDataFactory.create_product(name='Stretch Film', current_stock=Decimal('1'))

        response = self.client.get('/api/v1/products/', {'search': 'tape'})
        self.assertEqual(response.data['count'], 2)
        response = self.client.get('/api/v1/products/', {'search': 'tape', 'low_stock': 'true'})
        self.assertEqual([p['name'] for p in response.data['results']], ['Blue Tape'])

    def test_options_refresh_after_create(self):
        TestDataFactory.create_product(name='First')
        self.assertEqual(len(self.client.get('/api/v1/products/options/').data), 1)
        TestDataFactory.create_product(name='Second')
        self.assertEqual(len(self.client.get('/api/v1/products/options/').data), 2)

    def test_cached_detail_follows_stock_and_edits(self):
        product = TestDataFactory.create_product(current_stock=Decimal('5'))
        url = f'/api/v1/products/{product.id}/'
        self.assertEqual(Decimal(self.client.get(url).data['current_stock']), Decimal('5'))

        record_stock_in(product, Decimal('7'), timezone.localdate())
        self.assertEqual(Decimal(self.client.get(url).data['current_stock']), Decimal('12'))

        self.client.patch(url, {'unit_price': '175.00'}, format='json')
        self.assertEqual(Decimal(self.client.get(url).data['unit_price']), Decimal('175.00'))

    def test_missing_product_detail(self):
        self.assertEqual(self.client.get('/api/v1/products/999999/').status_code, status.HTTP_404_NOT_FOUND)

    def test_product_with_movements_cannot_be_deleted(self):
        product = TestDataFactory.create_product()
        record_stock_in(product, Decimal('5'), timezone.localdate())
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Product.objects.filter(pk=product.pk).exists())

    def test_delete_unused_product(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class CategoryUnitAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_create_category_and_unit(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Films'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/units/', {'name': 'Kilogram', 'symbol': 'kg'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_duplicate_category_rejected(self):
        TestDataFactory.create_category('Films')
        response = self.client.post('/api/v1/categories/', {'name': 'Films'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
