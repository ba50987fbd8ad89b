"""
Test suite for the payments module
Tests: payments received and made, cash denominations, payment history, edits, deletion and receipts
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.parties.models import CustomerLedger, SupplierLedger
from tradebook.payments.models import PaymentIn, PaymentOut


class PaymentInTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.customer = TestDataFactory.create_customer(balance=Decimal('1500.00'))

    def test_payment_lowers_customer_balance(self):
        data = {'customer': self.customer.id, 'amount': '600.00', 'payment_method': 'cash'}
        response = self.client.post('/api/v1/payments/in/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['receipt_no'], 'PI-0001')
        self.assertEqual(Decimal(response.data['customer_balance']), Decimal('900.00'))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('900.00'))
        entry = CustomerLedger.objects.get(customer=self.customer)
        self.assertEqual(entry.credit, Decimal('600.00'))
        self.assertEqual(entry.description, 'Payment received - cash')

    def test_overpayment_leaves_advance(self):
        self.client.post('/api/v1/payments/in/', {'customer': self.customer.id, 'amount': '2000.00'}, format='json')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('-500.00'))

    def test_zero_amount_rejected(self):
        response = self.client.post('/api/v1/payments/in/', {'customer': self.customer.id, 'amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_denominations_must_match_amount(self):
        data = {'customer': self.customer.id, 'amount': '1500.00', 'payment_method': 'cash',
                'denomination_1000': 1, 'denomination_100': 2}
        response = self.client.post('/api/v1/payments/in/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('denominations', response.data)

    def test_denominations_matching_amount(self):
        data = {'customer': self.customer.id, 'amount': '1500.00', 'payment_method': 'cash',
                'denomination_1000': 1, 'denomination_500': 1}
        response = self.client.post('/api/v1/payments/in/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PaymentIn.objects.get().denomination_total(), Decimal('1500'))

    def test_reference_dropped_for_cash(self):
        data = {'customer': self.customer.id, 'amount': '10.00', 'payment_method': 'cash', 'online_reference': 'TX-1'}
        response = self.client.post('/api/v1/payments/in/', data, format='json')
        self.assertEqual(response.data['online_reference'], '')

    def test_list_total(self):
        self.client.post('/api/v1/payments/in/', {'customer': self.customer.id, 'amount': '100.00'}, format='json')
        self.client.post('/api/v1/payments/in/', {'customer': self.customer.id, 'amount': '50.00',
                                                   'payment_method': 'online', 'online_reference': 'TX-9'}, format='json')
        response = self.client.get('/api/v1/payments/in/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_amount'], Decimal('150.00'))
        response = self.client.get('/api/v1/payments/in/', {'search': 'TX-9'})
        self.assertEqual(response.data['count'], 1)


class PaymentOutTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.supplier = TestDataFactory.create_supplier(balance=Decimal('800.00'))

    def test_payment_lowers_payable(self):
        data = {'supplier': self.supplier.id, 'amount': '300.00', 'payment_method': 'cheque'}
        response = self.client.post('/api/v1/payments/out/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['receipt_no'], 'PO-PAY-0001')
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('500.00'))
        entry = SupplierLedger.objects.get(supplier=self.supplier)
        self.assertEqual(entry.debit, Decimal('300.00'))


class PaymentHistoryTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.customer = TestDataFactory.create_customer(balance=Decimal('1000.00'))
        self.supplier = TestDataFactory.create_supplier(balance=Decimal('1000.00'))
        self.client.post('/api/v1/payments/in/', {'customer': self.customer.id, 'amount': '400.00'}, format='json')
        self.client.post('/api/v1/payments/out/', {'supplier': self.supplier.id, 'amount': '250.00'}, format='json')
        self.payment_in = PaymentIn.objects.get()
        self.payment_out = PaymentOut.objects.get()

    def test_history_combines_both_kinds(self):
        response = self.client.get('/api/v1/payments/history/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['totals'], {'total_in': Decimal('400.00'), 'total_out': Decimal('250.00')})
        self.assertEqual({row['kind'] for row in response.data['results']}, {'in', 'out'})

    def test_history_by_kind(self):
        response = self.client.get('/api/v1/payments/history/', {'kind': 'out'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['party_name'], self.supplier.supplier_name)

    def test_edit_method_updates_ledger_description(self):
        response = self.client.patch(f'/api/v1/payments/history/in/{self.payment_in.id}/',
                                     {'payment_method': 'bank_transfer', 'online_reference': 'BT-55'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['online_reference'], 'BT-55')
        entry = CustomerLedger.objects.get(reference_id=self.payment_in.id)
        self.assertEqual(entry.description, 'Payment received - bank_transfer')

    def test_delete_restores_balance(self):
        response = self.client.delete(f'/api/v1/payments/history/in/{self.payment_in.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal('1000.00'))
        self.assertFalse(CustomerLedger.objects.exists())

    def test_delete_payment_out_restores_payable(self):
        self.client.delete(f'/api/v1/payments/history/out/{self.payment_out.id}/')
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal('1000.00'))

    def test_unknown_kind(self):
        response = self.client.get(f'/api/v1/payments/history/refund/{self.payment_in.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_receipt_pdf(self):
        response = self.client.get(f'/api/v1/payments/history/in/{self.payment_in.id}/receipt/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))
