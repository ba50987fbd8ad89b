"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from tradebook.catalog.models import Category, Unit, Product
from tradebook.core.models import CompanySettings
from tradebook.expenses.models import ExpenseCategory, Expense
from tradebook.locations.models import Warehouse
from tradebook.parties.models import Customer, Supplier
from tradebook.purchasing.models import PurchaseOrder
from tradebook.purchasing.services import create_purchase_order, post_purchase_order
from tradebook.sales.models import SaleOrder
from tradebook.sales.services import create_sale_order, finalize_sale_order, convert_to_invoice
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, password='testpass123', role=User.ROLE_SUPERADMIN, feature_permissions=None):
        """Create a test user; superadmin unless a staff role is requested"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        return User.objects.create_user(
            username=username,
            email=f'{username}@test.com',
            password=password,
            role=role,
            feature_permissions=feature_permissions or [],
        )

    @staticmethod
    def create_staff(feature_permissions=None, username=None):
        """Create a staff user holding only the given feature keys"""
        return TestDataFactory.create_user(username=username, role=User.ROLE_STAFF, feature_permissions=feature_permissions)

    @staticmethod
    def update_settings(**fields):
        """Change company settings for a test"""
        settings_obj = CompanySettings.load()
        for field, value in fields.items():
            setattr(settings_obj, field, value)
        settings_obj.save()
        return settings_obj

    @staticmethod
    def create_category(name=None):
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name)

    @staticmethod
    def create_unit(name=None, symbol='pcs'):
        if not name:
            name = f'Unit_{TestDataFactory.random_string(6)}'
        return Unit.objects.create(name=name, symbol=symbol)

    @staticmethod
    def create_product(name=None, unit_price=Decimal('100.00'), current_stock=Decimal('50'),
                       low_stock_threshold=Decimal('10'), weight=Decimal('0'), category=None, unit=None):
        """Create a test product with stock on hand"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            category=category,
            unit=unit,
            unit_price=unit_price,
            current_stock=current_stock,
            low_stock_threshold=low_stock_threshold,
            weight=weight,
        )

    @staticmethod
    def create_warehouse(name=None):
        if not name:
            name = f'Warehouse_{TestDataFactory.random_string(6)}'
        return Warehouse.objects.create(name=name, location='Test location')

    @staticmethod
    def create_customer(name=None, mobile_no='03001234567', whatsapp_no='', balance=Decimal('0.00')):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return Customer.objects.create(customer_name=name, mobile_no=mobile_no, whatsapp_no=whatsapp_no,
                                       current_balance=balance)

    @staticmethod
    def create_supplier(name=None, mobile_no='03111234567', whatsapp_no='', balance=Decimal('0.00')):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(supplier_name=name, mobile_no=mobile_no, whatsapp_no=whatsapp_no,
                                       current_balance=balance)

    @staticmethod
    def create_sale_order(customer=None, product=None, quantity=Decimal('2'), unit_price=Decimal('100.00'),
                          gst_percentage=Decimal('18'), bill_situation='credit', finalize=False, user=None):
        """Create a one-line sale order, optionally finalized"""
        customer = customer or TestDataFactory.create_customer()
        product = product or TestDataFactory.create_product()
        data = {
            'customer': customer,
            'order_date': timezone.localdate(),
            'gst_percentage': gst_percentage,
            'bill_situation': bill_situation,
        }
        items = [{'product': product, 'quantity': quantity, 'unit_price': unit_price}]
        with transaction.atomic():
            order = create_sale_order(data, items, user=user)
            if finalize:
                order = finalize_sale_order(order, user=user)
        return SaleOrder.objects.get(pk=order.pk)

    @staticmethod
    def create_sales_invoice(order=None, user=None, **order_kwargs):
        """Finalize and convert a sale order into an invoice"""
        order = order or TestDataFactory.create_sale_order(finalize=True, user=user, **order_kwargs)
        with transaction.atomic():
            return convert_to_invoice(order, user=user)

    @staticmethod
    def create_purchase_order(supplier=None, product=None, quantity=Decimal('10'), unit_price=Decimal('80.00'),
                              is_gst=False, gst_percentage=Decimal('18'), post=False, user=None):
        """Create a one-line purchase order, optionally posted"""
        supplier = supplier or TestDataFactory.create_supplier()
        product = product or TestDataFactory.create_product()
        data = {
            'supplier': supplier,
            'po_date': timezone.localdate(),
            'is_gst': is_gst,
            'gst_percentage': gst_percentage,
        }
        items = [{'product': product, 'quantity': quantity, 'unit_price': unit_price}]
        with transaction.atomic():
            purchase_order = create_purchase_order(data, items, user=user)
            if post:
                purchase_order = post_purchase_order(purchase_order, user=user)
        return PurchaseOrder.objects.get(pk=purchase_order.pk)

    @staticmethod
    def create_expense(amount=Decimal('500.00'), category=None, expense_date=None, description='Office supplies'):
        return Expense.objects.create(
            expense_date=expense_date or timezone.localdate(),
            category=category,
            amount=amount,
            description=description,
        )

    @staticmethod
    def create_expense_category(name=None):
        if not name:
            name = f'Expense_{TestDataFactory.random_string(6)}'
        return ExpenseCategory.objects.create(name=name)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
