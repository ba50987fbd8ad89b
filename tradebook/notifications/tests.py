"""
Test suite for the notifications module
Tests: phone formatting, message templates, gateway client, document sending, auto-send and message logs
"""
from datetime import date
from unittest import mock

import requests
from django.test import TestCase, override_settings
from rest_framework import status
from decimal import Decimal
from tradebook.core.models import AuditLog
from tradebook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tradebook.notifications.models import WhatsAppMessageLog
from tradebook.notifications.services import build_message, send_document
from tradebook.notifications.whatsapp import (
    WhatsAppGateway, WhatsAppGatewayError, format_amount, format_phone_number, render_template
)

GATEWAY_SETTINGS = {'WHATSAPP_GATEWAY_URL': 'http://gateway.test/', 'WHATSAPP_GATEWAY_TOKEN': 'secret'}


def gateway_reply(status_code=200, **body):
    response = mock.Mock(status_code=status_code)
    response.json.return_value = body
    return response


class PhoneNumberTests(TestCase):

    def test_local_number_gets_country_code(self):
        self.assertEqual(format_phone_number('0300-1234567'), '923001234567')

    def test_number_with_country_code(self):
        self.assertEqual(format_phone_number('+92 300 1234567'), '923001234567')

    def test_bare_number_gets_country_code(self):
        self.assertEqual(format_phone_number('3001234567'), '923001234567')

    def test_foreign_number_kept(self):
        self.assertEqual(format_phone_number('+44 7911 123456'), '447911123456')

    def test_too_short(self):
        self.assertIsNone(format_phone_number('12345'))
        self.assertIsNone(format_phone_number(''))

    @override_settings(DEFAULT_COUNTRY_CODE='971')
    def test_configured_country_code(self):
        self.assertEqual(format_phone_number('0501234567'), '971501234567')


class MessageTemplateTests(TestCase):

    def test_format_amount(self):
        self.assertEqual(format_amount(Decimal('1500.50')), '1,500.5')
        self.assertEqual(format_amount(2000), '2,000')
        self.assertEqual(format_amount(Decimal('0')), '0')

    def test_render_template_defaults(self):
        message = render_template('{Party_Name} owes {Party_Balance} to {Company_Name}', {'party_name': 'Ali'})
        self.assertEqual(message, 'Ali owes 0 to ')

    def test_sale_order_message(self):
        TestDataFactory.update_settings(company_name='Acme Traders', contact_detail_1='042-111')
        customer = TestDataFactory.create_customer(name='Bilal Stores')
        order = TestDataFactory.create_sale_order(customer=customer, finalize=True)
        order.order_date = date(2024, 5, 7)
        message = build_message('sale_order', order)
        self.assertIn('07/05/2024', message)
        self.assertIn('Bilal Stores', message)
        self.assertIn('Order #  SO-0001', message)
        self.assertIn('Amount  236 /-', message)
        self.assertIn('Current Total Balance= 236', message)
        self.assertTrue(message.endswith('Acme Traders\n042-111'))

    def test_company_template_overrides_default(self):
        TestDataFactory.update_settings(whatsapp_purchase_message_template='PO {PO_No} for {PO_Amount}')
        purchase_order = TestDataFactory.create_purchase_order(post=True)
        self.assertEqual(build_message('purchase_invoice', purchase_order), 'PO PO-0001 for 800')


@override_settings(**GATEWAY_SETTINGS)
class GatewayClientTests(TestCase):

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_send_posts_message_and_attachment(self, post):
        post.return_value = gateway_reply(success=True, messageId='m-1')
        message_id = WhatsAppGateway().send('923001234567', 'Hello', attachment=b'%PDF-1.4', filename='INV-0001.pdf')
        self.assertEqual(message_id, 'm-1')
        url = post.call_args[0][0]
        payload = post.call_args[1]['json']
        self.assertEqual(url, 'http://gateway.test/send')
        self.assertEqual(post.call_args[1]['headers']['Authorization'], 'Bearer secret')
        self.assertEqual(payload['attachment']['filename'], 'INV-0001.pdf')
        self.assertEqual(payload['attachment']['data'], 'JVBERi0xLjQ=')

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_rejected_message(self, post):
        post.return_value = gateway_reply(status_code=500, error='Session closed')
        with self.assertRaisesMessage(WhatsAppGatewayError, 'Session closed'):
            WhatsAppGateway().send('923001234567', 'Hello')

    @mock.patch('tradebook.notifications.whatsapp.requests.post', side_effect=requests.exceptions.Timeout)
    def test_timeout(self, post):
        with self.assertRaisesMessage(WhatsAppGatewayError, 'timed out'):
            WhatsAppGateway().send('923001234567', 'Hello')

    @override_settings(WHATSAPP_GATEWAY_URL='')
    def test_unconfigured(self):
        gateway = WhatsAppGateway()
        self.assertFalse(gateway.is_configured)
        with self.assertRaises(WhatsAppGatewayError):
            gateway.send('923001234567', 'Hello')
        self.assertEqual(gateway.get_status()['configured'], False)

    @mock.patch('tradebook.notifications.whatsapp.requests.get', side_effect=requests.exceptions.ConnectionError('refused'))
    def test_status_never_raises(self, get):
        result = WhatsAppGateway().get_status()
        self.assertFalse(result['is_ready'])
        self.assertIn('refused', result['error'])


@override_settings(**GATEWAY_SETTINGS)
class SendDocumentTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(mobile_no='0300-1234567', whatsapp_no='0333-7654321')

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_send_invoice(self, post):
        post.return_value = gateway_reply(success=True)
        invoice = TestDataFactory.create_sales_invoice(customer=self.customer)
        response = self.client.post('/api/v1/whatsapp/send/', {'transaction_type': 'sales_invoice', 'transaction_id': invoice.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])

        log = WhatsAppMessageLog.objects.get()
        self.assertEqual(log.status, WhatsAppMessageLog.STATUS_SENT)
        self.assertEqual(log.recipient_phone, '923337654321')
        self.assertTrue(log.attachment_sent)
        self.assertIsNotNone(log.sent_at)
        invoice.refresh_from_db()
        self.assertTrue(invoice.whatsapp_sent)
        self.assertTrue(AuditLog.objects.filter(action='whatsapp_send', object_reference=invoice.invoice_no).exists())

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_text_only_when_attachment_disabled(self, post):
        post.return_value = gateway_reply(success=True)
        TestDataFactory.update_settings(whatsapp_attach_invoice_image=False)
        order = TestDataFactory.create_sale_order(customer=self.customer, finalize=True)
        log = send_document('sale_order', order, user=self.user)
        self.assertFalse(log.attachment_sent)
        self.assertNotIn('attachment', post.call_args[1]['json'])

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_gateway_failure_returns_502(self, post):
        post.return_value = gateway_reply(status_code=503, error='Client not ready')
        order = TestDataFactory.create_sale_order(customer=self.customer, finalize=True)
        response = self.client.post('/api/v1/whatsapp/send/', {'transaction_type': 'sale_order', 'transaction_id': order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Client not ready')
        self.assertEqual(WhatsAppMessageLog.objects.get().status, WhatsAppMessageLog.STATUS_FAILED)
        order.refresh_from_db()
        self.assertFalse(order.whatsapp_sent)

    def test_party_without_phone(self):
        supplier = TestDataFactory.create_supplier(mobile_no='123')
        purchase_order = TestDataFactory.create_purchase_order(supplier=supplier, post=True)
        response = self.client.post('/api/v1/whatsapp/send/', {'transaction_type': 'purchase_invoice', 'transaction_id': purchase_order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(WhatsAppMessageLog.objects.exists())

    def test_unknown_document(self):
        response = self.client.post('/api/v1/whatsapp/send/', {'transaction_type': 'sale_order', 'transaction_id': 999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_needs_document_permission(self):
        invoice = TestDataFactory.create_sales_invoice(customer=self.customer)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['sales_order_view']))
        response = client.post('/api/v1/whatsapp/send/', {'transaction_type': 'sales_invoice', 'transaction_id': invoice.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(**GATEWAY_SETTINGS)
class AutoSendTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_no_send_when_disabled(self, post):
        order = TestDataFactory.create_sale_order()
        self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        post.assert_not_called()
        self.assertFalse(WhatsAppMessageLog.objects.exists())

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_finalize_sends_sale_order(self, post):
        post.return_value = gateway_reply(success=True)
        TestDataFactory.update_settings(whatsapp_auto_send_sales=True)
        order = TestDataFactory.create_sale_order()
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = WhatsAppMessageLog.objects.get()
        self.assertEqual(log.transaction_type, WhatsAppMessageLog.TYPE_SALE_ORDER)
        self.assertEqual(log.transaction_id, order.id)

    @mock.patch('tradebook.notifications.whatsapp.requests.post', side_effect=requests.exceptions.ConnectionError('down'))
    def test_gateway_down_does_not_block_posting(self, post):
        TestDataFactory.update_settings(whatsapp_auto_send_purchase=True)
        purchase_order = TestDataFactory.create_purchase_order()
        response = self.client.post(f'/api/v1/purchase-orders/{purchase_order.id}/post/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(WhatsAppMessageLog.objects.get().status, WhatsAppMessageLog.STATUS_FAILED)

    def test_missing_phone_is_skipped(self):
        TestDataFactory.update_settings(whatsapp_auto_send_sales=True)
        customer = TestDataFactory.create_customer(mobile_no='')
        order = TestDataFactory.create_sale_order(customer=customer)
        response = self.client.post(f'/api/v1/sale-orders/{order.id}/finalize/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(WhatsAppMessageLog.objects.exists())


@override_settings(**GATEWAY_SETTINGS)
class MessageLogTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.failed = WhatsAppMessageLog.objects.create(
            transaction_type=WhatsAppMessageLog.TYPE_SALES_INVOICE, transaction_id=1, recipient_phone='923001234567',
            recipient_name='Ali Traders', message_content='Invoice INV-0001', status=WhatsAppMessageLog.STATUS_FAILED,
            error_message='Client not ready',
        )
        WhatsAppMessageLog.objects.create(
            transaction_type=WhatsAppMessageLog.TYPE_PURCHASE_INVOICE, transaction_id=2, recipient_phone='923111234567',
            recipient_name='Paper Mills', message_content='PO PO-0001', status=WhatsAppMessageLog.STATUS_SENT,
        )

    def test_list_with_stats(self):
        response = self.client.get('/api/v1/whatsapp/logs/', {'status': 'failed'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['stats'], {'total': 2, 'sent': 1, 'failed': 1, 'pending': 0})

    def test_search(self):
        response = self.client.get('/api/v1/whatsapp/logs/', {'search': 'paper'})
        self.assertEqual(response.data['count'], 1)

    @mock.patch('tradebook.notifications.whatsapp.requests.post')
    def test_resend(self, post):
        post.return_value = gateway_reply(success=True)
        response = self.client.post(f'/api/v1/whatsapp/logs/{self.failed.id}/resend/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.failed.refresh_from_db()
        self.assertEqual(self.failed.status, WhatsAppMessageLog.STATUS_SENT)
        self.assertIsNone(self.failed.error_message)
        self.assertEqual(post.call_args[1]['json']['message'], 'Invoice INV-0001')

    def test_clear_logs(self):
        response = self.client.delete('/api/v1/whatsapp/logs/')
        self.assertEqual(response.data['deleted'], 2)
        self.assertFalse(WhatsAppMessageLog.objects.exists())

    def test_logs_need_settings_permission(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_staff(['sales_invoice_view']))
        self.assertEqual(client.get('/api/v1/whatsapp/logs/').status_code, status.HTTP_403_FORBIDDEN)

    @mock.patch('tradebook.notifications.whatsapp.requests.get')
    def test_status(self, get):
        get.return_value = gateway_reply(isReady=True, phone='923001234567')
        response = self.client.get('/api/v1/whatsapp/status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_ready'])
        self.assertTrue(response.data['configured'])
