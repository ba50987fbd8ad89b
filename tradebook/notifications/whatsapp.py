"""
WhatsApp message building and the HTTP gateway client.

Messages are delivered by an external gateway service; this module only
formats numbers, fills message templates and talks to the gateway over HTTP.
"""
import base64
import logging
import re

import requests
from django.conf import settings

from tradebook.core.utils import money

logger = logging.getLogger(__name__)

COMMON_COUNTRY_CODES = ['1', '44', '91', '971', '966', '974', '973', '968', '965', '962', '961', '86', '81']
MIN_PHONE_DIGITS = 9

DEFAULT_INVOICE_TEMPLATE = """Dear Sir, Aslam-o-Alaikam!
Please see the new Invoice.
{Transaction_Date}
{Party_Name}

Invoice #  {Invoice_No}
Inv. Amount  {Invoice_Amount} /-
Current Total Balance= {Party_Balance}
========================
Thanks
{Company_Name}
{Company_Phone}"""

DEFAULT_PURCHASE_TEMPLATE = """Dear Sir, Aslam-o-Alaikam!
Please see the new Purchase Order.
{Transaction_Date}
{Party_Name}

PO #  {PO_No}
Amount  {PO_Amount} /-
Current Total Balance= {Party_Balance}
========================
Thanks
{Company_Name}
{Company_Phone}"""

DEFAULT_SALE_ORDER_TEMPLATE = """Dear Sir, Aslam-o-Alaikam!
Please see the new Sale Order.
{Transaction_Date}
{Party_Name}

Order #  {Invoice_No}
Amount  {Invoice_Amount} /-
Current Total Balance= {Party_Balance}
========================
Thanks
{Company_Name}
{Company_Phone}"""

# placeholder -> context key; missing values render as the default
PLACEHOLDERS = {
    '{Transaction_Date}': ('transaction_date', ''),
    '{Party_Name}': ('party_name', ''),
    '{Invoice_No}': ('invoice_no', ''),
    '{Invoice_Amount}': ('invoice_amount', ''),
    '{PO_No}': ('po_no', ''),
    '{PO_Amount}': ('po_amount', ''),
    '{Party_Balance}': ('party_balance', '0'),
    '{Company_Name}': ('company_name', ''),
    '{Company_Phone}': ('company_phone', ''),
}


class WhatsAppGatewayError(Exception):
    """Raised when the gateway is unreachable, unconfigured or rejects a message"""


def format_phone_number(phone):
    """
    Normalize a phone number to country code + number, digits only.

    Returns None when fewer than nine digits remain. Local numbers with a
    leading 0 and bare numbers get the default country code (92).
    """
    if not phone:
        return None
    digits = re.sub(r'[^0-9]', '', str(phone).strip())
    if len(digits) < MIN_PHONE_DIGITS:
        return None

    country_code = getattr(settings, 'DEFAULT_COUNTRY_CODE', '92')
    if digits.startswith(country_code):
        return digits
    if digits.startswith('0'):
        return country_code + digits[1:]
    for code in COMMON_COUNTRY_CODES:
        if digits.startswith(code) and len(digits) >= len(code) + MIN_PHONE_DIGITS:
            return digits
    return country_code + digits


def format_amount(value):
    """Thousands-separated amount without trailing zero decimals, e.g. 1,500.5"""
    text = f"{money(value):,.2f}"
    return text.rstrip('0').rstrip('.')


def format_message_date(value):
    return value.strftime('%d/%m/%Y') if value else ''


def render_template(template, context):
    """Fill the {Placeholder} tokens of a message template"""
    if not template:
        return ''
    message = template
    for placeholder, (key, default) in PLACEHOLDERS.items():
        value = context.get(key)
        message = message.replace(placeholder, str(value) if value not in (None, '') else default)
    return message


class WhatsAppGateway:
    """Thin requests client for the WhatsApp gateway service"""

    def __init__(self, base_url=None, token=None, timeout=None):
        self.base_url = (base_url if base_url is not None else settings.WHATSAPP_GATEWAY_URL).rstrip('/')
        self.token = token if token is not None else settings.WHATSAPP_GATEWAY_TOKEN
        self.timeout = timeout or settings.WHATSAPP_GATEWAY_TIMEOUT

    @property
    def is_configured(self):
        return bool(self.base_url)

    def _headers(self):
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def get_status(self):
        """Connection state reported by the gateway; never raises"""
        if not self.is_configured:
            return {'configured': False, 'is_ready': False, 'error': 'WhatsApp gateway is not configured'}
        try:
            response = requests.get(f"{self.base_url}/status", headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"WhatsApp gateway status check failed: {str(e)}")
            return {'configured': True, 'is_ready': False, 'error': str(e)}
        return {'configured': True, 'is_ready': bool(data.get('isReady', data.get('is_ready'))), 'details': data}

    def send(self, phone, message, attachment=None, filename=None):
        """
        Send a text message, optionally with a PDF attachment (bytes).

        Returns the gateway's message id when it reports one.
        """
        if not self.is_configured:
            raise WhatsAppGatewayError('WhatsApp gateway is not configured')

        payload = {'phone': phone, 'message': message}
        if attachment:
            payload['attachment'] = {
                'filename': filename or 'document.pdf',
                'mimetype': 'application/pdf',
                'data': base64.b64encode(attachment).decode('ascii'),
            }

        try:
            response = requests.post(f"{self.base_url}/send", json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.warning(f"WhatsApp gateway timed out sending to {phone}")
            raise WhatsAppGatewayError('WhatsApp gateway timed out')
        except requests.exceptions.RequestException as e:
            logger.warning(f"WhatsApp gateway unreachable: {str(e)}")
            raise WhatsAppGatewayError(f'WhatsApp gateway unreachable: {str(e)}')

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code >= 400 or data.get('success') is False:
            error = data.get('error') or f'Gateway returned HTTP {response.status_code}'
            logger.warning(f"WhatsApp message to {phone} rejected: {error}")
            raise WhatsAppGatewayError(error)

        logger.info(f"WhatsApp message sent to {phone}{' with attachment' if attachment else ''}")
        return data.get('messageId') or data.get('message_id')
