"""Send business documents to their party over WhatsApp and keep the message log"""
import logging
from collections import namedtuple
from typing import Optional

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from tradebook.core.models import CompanySettings
from tradebook.core.utils import create_audit_log
from tradebook.purchasing.models import PurchaseOrder
from tradebook.reports.documents import purchase_order_pdf, sale_order_pdf, sales_invoice_pdf
from tradebook.sales.models import SaleOrder, SalesInvoice
from .models import WhatsAppMessageLog
from .whatsapp import (
    DEFAULT_INVOICE_TEMPLATE, DEFAULT_PURCHASE_TEMPLATE, DEFAULT_SALE_ORDER_TEMPLATE,
    WhatsAppGateway, WhatsAppGatewayError, format_amount, format_message_date, format_phone_number,
    render_template
)

logger = logging.getLogger(__name__)


DocumentKind = namedtuple('DocumentKind', ['model', 'template_field', 'default_template', 'auto_send_flag',
                                           'render_pdf', 'party_label'])


DOCUMENT_KINDS = {
    WhatsAppMessageLog.TYPE_SALES_INVOICE: DocumentKind(
        SalesInvoice, 'whatsapp_sales_message_template', DEFAULT_INVOICE_TEMPLATE,
        'whatsapp_auto_send_sales', sales_invoice_pdf, 'Customer'),
    WhatsAppMessageLog.TYPE_SALE_ORDER: DocumentKind(
        SaleOrder, 'whatsapp_sales_message_template', DEFAULT_SALE_ORDER_TEMPLATE,
        'whatsapp_auto_send_sales', sale_order_pdf, 'Customer'),
    WhatsAppMessageLog.TYPE_PURCHASE_INVOICE: DocumentKind(
        PurchaseOrder, 'whatsapp_purchase_message_template', DEFAULT_PURCHASE_TEMPLATE,
        'whatsapp_auto_send_purchase', purchase_order_pdf, 'Supplier'),
}


def get_document(transaction_type, transaction_id):
    """Load the document a message refers to, or raise a 400"""
    kind = DOCUMENT_KINDS.get(transaction_type)
    if kind is None:
        raise ValidationError({'transaction_type': f"Unknown transaction type '{transaction_type}'."})
    try:
        return kind.model.objects.get(pk=transaction_id)
    except kind.model.DoesNotExist:
        raise ValidationError({'transaction_id': f"{kind.model.__name__} {transaction_id} does not exist."})


def _party(document):
    return document.supplier if isinstance(document, PurchaseOrder) else document.customer


def _party_name(party):
    return getattr(party, 'supplier_name', None) or getattr(party, 'customer_name', '')


def _document_number(document):
    if isinstance(document, SalesInvoice):
        return document.invoice_no
    if isinstance(document, SaleOrder):
        return document.order_no
    return document.po_no


def _document_date(document):
    if isinstance(document, SalesInvoice):
        return document.invoice_date
    if isinstance(document, SaleOrder):
        return document.order_date
    return document.po_date


def build_message(transaction_type, document, company=None):
    """Message text for a document; company templates override the defaults"""
    kind = DOCUMENT_KINDS[transaction_type]
    company = company or CompanySettings.load()
    party = _party(document)
    number = _document_number(document) or ''
    amount = format_amount(document.total_amount)

    context = {
        'transaction_date': format_message_date(_document_date(document)),
        'party_name': _party_name(party),
        'party_balance': format_amount(party.current_balance),
        'company_name': company.company_name,
        'company_phone': company.primary_phone,
    }
    if transaction_type == WhatsAppMessageLog.TYPE_PURCHASE_INVOICE:
        context.update(po_no=number, po_amount=amount)
    else:
        context.update(invoice_no=number, invoice_amount=amount)

    template = getattr(company, kind.template_field) or kind.default_template
    return render_template(template, context)


def send_document(transaction_type, document, user=None, gateway=None):
    """
    Send a document to its party and record the attempt.

    Gateway failures are recorded on the returned log with status 'failed';
    a party without a usable phone number raises a 400.
    """
    kind = DOCUMENT_KINDS[transaction_type]
    company = CompanySettings.load()
    party = _party(document)
    phone = format_phone_number(party.notification_phone)
    if not phone:
        raise ValidationError({'phone': f"{kind.party_label} does not have a valid phone number."})

    message = build_message(transaction_type, document, company)
    number = _document_number(document) or str(document.pk)
    attachment = kind.render_pdf(document) if company.whatsapp_attach_invoice_image else None

    log = WhatsAppMessageLog.objects.create(
        transaction_type=transaction_type,
        transaction_id=document.pk,
        recipient_phone=phone,
        recipient_name=_party_name(party),
        message_content=message,
        attachment_sent=attachment is not None,
        created_by=user if user and user.is_authenticated else None,
    )

    gateway = gateway or WhatsAppGateway()
    try:
        gateway.send(phone, message, attachment=attachment, filename=f"{number}.pdf")
    except WhatsAppGatewayError as e:
        log.status = WhatsAppMessageLog.STATUS_FAILED
        log.error_message = str(e)
        log.save(update_fields=['status', 'error_message'])
        logger.error(f"WhatsApp send failed for {transaction_type} {number}: {str(e)}")
        return log

    log.status = WhatsAppMessageLog.STATUS_SENT
    log.sent_at = timezone.now()
    log.save(update_fields=['status', 'sent_at'])

    document.whatsapp_sent = True
    document.save(update_fields=['whatsapp_sent'])

    create_audit_log(action='whatsapp_send', model_name=kind.model.__name__, object_id=document.pk,
                     user=user, object_name=_party_name(party), object_reference=number,
                     changes={'recipient_phone': phone, 'attachment_sent': log.attachment_sent})
    return log


def resend_log(log, gateway=None):
    """Send a logged message's text again to the same number"""
    gateway = gateway or WhatsAppGateway()
    try:
        gateway.send(log.recipient_phone, log.message_content)
    except WhatsAppGatewayError as e:
        log.status = WhatsAppMessageLog.STATUS_FAILED
        log.error_message = str(e)
        log.save(update_fields=['status', 'error_message'])
        return log

    log.status = WhatsAppMessageLog.STATUS_SENT
    log.sent_at = timezone.now()
    log.error_message = None
    log.save(update_fields=['status', 'sent_at', 'error_message'])
    return log


def auto_send_document(transaction_type, document, user=None) -> Optional[WhatsAppMessageLog]:
    """Send after finalize/post when the company's auto-send flag is on; never raises"""
    company = CompanySettings.load()
    if not getattr(company, DOCUMENT_KINDS[transaction_type].auto_send_flag):
        return None
    try:
        return send_document(transaction_type, document, user=user)
    except Exception as e:
        logger.warning(f"Auto-send skipped for {transaction_type} {document.pk}: {str(e)}")
        return None
