"""
Test suite for the core module
Tests: authentication, staff permissions, company settings, document numbering and audit logging
"""
from django.test import TestCase
from rest_framework import status
from tradebook.core.models import AuditLog, CompanySettings
from tradebook.core.numbering import next_document_number, peek_document_number
from tradebook.core.permissions import PERMISSION_KEYS, has_feature, permission_map
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.core.utils import calculate_line, calculate_totals, money
from decimal import Decimal


class AuthenticationTests(TestCase):
    """Login with username or email and the current-user endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='owner')
        self.client = AuthenticatedAPIClient()

    def test_login_with_username(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['username'], 'owner')

    def test_login_with_email(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner@test.com', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_permission_map(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_superadmin'])
        self.assertTrue(all(response.data['permissions'].values()))


class FeaturePermissionTests(TestCase):
    """Feature keys for staff users"""

    def test_superadmin_has_every_key(self):
        owner = TestDataFactory.create_user()
        self.assertTrue(all(permission_map(owner).values()))

    def test_staff_has_only_granted_keys(self):
        staff = TestDataFactory.create_staff(['customers_view'])
        self.assertTrue(has_feature(staff, 'customers_view'))
        self.assertFalse(has_feature(staff, 'customers_add'))

    def test_staff_blocked_from_ungranted_endpoint(self):
        staff = TestDataFactory.create_staff(['customers_view'])
        client = AuthenticatedAPIClient().authenticate_user(staff)
        self.assertEqual(client.get('/api/v1/customers/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/customers/', {'customer_name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_cannot_manage_staff(self):
        staff = TestDataFactory.create_staff(PERMISSION_KEYS)
        client = AuthenticatedAPIClient().authenticate_user(staff)
        self.assertEqual(client.get('/api/v1/staff/').status_code, status.HTTP_403_FORBIDDEN)


class StaffManagementTests(TestCase):
    """Superadmin staff endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_create_staff(self):
        data = {
            'username': 'cashier',
            'email': 'cashier@test.com',
            'password': 'S3cure-pass-123',
            'password_confirm': 'S3cure-pass-123',
            'feature_permissions': ['sales_order_view', 'sales_order_add'],
        }
        response = self.client.post('/api/v1/staff/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'staff')
        self.assertTrue(response.data['permissions']['sales_order_add'])
        self.assertFalse(response.data['permissions']['customers_view'])

    def test_replace_permissions_writes_audit_log(self):
        staff = TestDataFactory.create_staff(['customers_view'])
        response = self.client.put(f'/api/v1/staff/{staff.id}/permissions/',
                                   {'feature_permissions': ['expenses_view']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        staff.refresh_from_db()
        self.assertEqual(staff.feature_permissions, ['expenses_view'])
        self.assertTrue(AuditLog.objects.filter(action='permission_change', object_id=str(staff.id)).exists())

    def test_unknown_permission_key_rejected(self):
        staff = TestDataFactory.create_staff()
        response = self.client.put(f'/api/v1/staff/{staff.id}/permissions/',
                                   {'feature_permissions': ['launch_rockets']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_active(self):
        staff = TestDataFactory.create_staff()
        response = self.client.post(f'/api/v1/staff/{staff.id}/toggle-active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        staff.refresh_from_db()
        self.assertFalse(staff.is_active)


class DocumentNumberingTests(TestCase):
    """Prefix + zero padded counter per document kind"""

    def test_numbers_are_sequential(self):
        self.assertEqual(next_document_number('sale_order'), 'SO-0001')
        self.assertEqual(next_document_number('sale_order'), 'SO-0002')
        self.assertEqual(next_document_number('sale_invoice'), 'INV-0001')

    def test_peek_does_not_consume(self):
        self.assertEqual(peek_document_number('purchase_order'), 'PO-0001')
        self.assertEqual(peek_document_number('purchase_order'), 'PO-0001')

    def test_custom_prefix_and_start(self):
        TestDataFactory.update_settings(payment_in_prefix='RCV', payment_in_next_number=42)
        self.assertEqual(next_document_number('payment_in'), 'RCV-0042')

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            next_document_number('quotation')

    def test_preview_endpoint(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/settings/next-number/stock_in/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['next_number'], 'STK-IN-0001')
        self.assertEqual(client.get('/api/v1/settings/next-number/nope/').status_code, status.HTTP_404_NOT_FOUND)


class CompanySettingsTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    def test_single_row(self):
        CompanySettings.load()
        CompanySettings.load()
        self.assertEqual(CompanySettings.objects.count(), 1)

    def test_update_settings(self):
        response = self.client.patch('/api/v1/settings/company/',
                                     {'company_name': 'Acme Traders', 'restrict_negative_stock': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        settings_obj = CompanySettings.load()
        self.assertEqual(settings_obj.company_name, 'Acme Traders')
        self.assertTrue(settings_obj.restrict_negative_stock)
        self.assertTrue(AuditLog.objects.filter(action='settings_change').exists())


class CalculationTests(TestCase):
    """Money rounding and document totals"""

    def test_money_rounds_half_up(self):
        self.assertEqual(money('10.005'), Decimal('10.01'))
        self.assertEqual(money(None), Decimal('0.00'))

    def test_line_total_and_net_weight(self):
        line = calculate_line(Decimal('3'), Decimal('19.99'), Decimal('1.5'))
        self.assertEqual(line['total_price'], Decimal('59.97'))
        self.assertEqual(line['net_weight'], Decimal('4.500'))

    def test_totals_with_gst(self):
        subtotal, gst_amount, total = calculate_totals([Decimal('100.00'), Decimal('50.00')], Decimal('18'))
        self.assertEqual(subtotal, Decimal('150.00'))
        self.assertEqual(gst_amount, Decimal('27.00'))
        self.assertEqual(total, Decimal('177.00'))

    def test_totals_without_gst(self):
        self.assertEqual(calculate_totals([Decimal('10.00')], 0), (Decimal('10.00'), Decimal('0.00'), Decimal('10.00')))
