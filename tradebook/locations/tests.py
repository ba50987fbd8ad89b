"""
Test suite for the locations module
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.inventory.services import record_stock_in


class WarehouseAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_create_and_list(self):
        response = self.client.post('/api/v1/warehouses/', {'name': 'Main Godown', 'location': 'Site area'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/warehouses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_warehouse_with_stock_cannot_be_deleted(self):
        warehouse = TestDataFactory.create_warehouse()
        record_stock_in(TestDataFactory.create_product(), Decimal('1'), timezone.localdate(), warehouse=warehouse)
        response = self.client.delete(f'/api/v1/warehouses/{warehouse.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_staff_without_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['warehouses_view']))
        self.assertEqual(client.get('/api/v1/warehouses/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/warehouses/', {'name': 'Second'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
