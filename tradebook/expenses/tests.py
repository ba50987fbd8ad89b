"""
Test suite for the expenses module
Tests: expense categories, expense CRUD, filters, totals and export
"""
from datetime import date
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from tradebook.core.models import AuditLog
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.expenses.models import Expense


class ExpenseCategoryTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_create_category(self):
        response = self.client.post('/api/v1/expense-categories/', {'name': 'Utilities'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['expense_count'], 0)

    def test_duplicate_name_rejected(self):
        TestDataFactory.create_expense_category(name='Rent')
        response = self.client.post('/api/v1/expense-categories/', {'name': 'Rent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deleting_category_keeps_expenses(self):
        category = TestDataFactory.create_expense_category()
        expense = TestDataFactory.create_expense(category=category)
        response = self.client.delete(f'/api/v1/expense-categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        expense.refresh_from_db()
        self.assertIsNone(expense.category)


class ExpenseAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.fuel = TestDataFactory.create_expense_category(name='Fuel')

    def test_create_expense(self):
        data = {'expense_date': '2024-03-05', 'category': self.fuel.id, 'amount': '1250.00', 'description': 'Delivery van'}
        response = self.client.post('/api/v1/expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category_name'], 'Fuel')
        self.assertIsNotNone(Expense.objects.get().created_by)

    def test_amount_must_be_positive(self):
        data = {'expense_date': '2024-03-05', 'amount': '-5', 'description': 'Refund'}
        response = self.client.post('/api/v1/expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filters_and_total(self):
        TestDataFactory.create_expense(amount=Decimal('100.00'), category=self.fuel, expense_date=date(2024, 1, 10))
        TestDataFactory.create_expense(amount=Decimal('40.00'), category=self.fuel, expense_date=date(2024, 2, 10))
        TestDataFactory.create_expense(amount=Decimal('75.00'), expense_date=date(2024, 2, 11), description='Tea')

        response = self.client.get('/api/v1/expenses/', {'category': self.fuel.id})
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_amount'], Decimal('140.00'))

        response = self.client.get('/api/v1/expenses/', {'date_from': '2024-02-01', 'date_to': '2024-02-29'})
        self.assertEqual(response.data['total_amount'], Decimal('115.00'))

        response = self.client.get('/api/v1/expenses/', {'category': 'none'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/expenses/', {'search': 'tea'})
        self.assertEqual(response.data['results'][0]['description'], 'Tea')

    def test_amount_change_is_audited(self):
        expense = TestDataFactory.create_expense(amount=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/expenses/{expense.id}/', {'amount': '12.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='update', model_name='Expense')
        self.assertEqual(log.changes['amount'], {'old': '10.00', 'new': '12.00'})

    def test_delete_expense(self):
        expense = TestDataFactory.create_expense()
        self.assertEqual(self.client.delete(f'/api/v1/expenses/{expense.id}/').status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.exists())

    def test_export_defaults_to_excel(self):
        TestDataFactory.create_expense()
        response = self.client.get('/api/v1/expenses/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('.xlsx', response['Content-Disposition'])

    def test_staff_view_only(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['expenses_view']))
        self.assertEqual(client.get('/api/v1/expenses/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/expenses/', {'expense_date': '2024-03-05', 'amount': '5', 'description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
