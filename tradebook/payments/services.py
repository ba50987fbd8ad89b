"""
Payments received and made. Callers hold the ``transaction.atomic()`` block.

A payment lowers the party balance through a ``payment`` ledger row: a
credit on the customer ledger, a debit on the supplier ledger.
"""
import logging

from tradebook.core.numbering import next_document_number
from tradebook.parties.models import CustomerLedger, SupplierLedger
from tradebook.parties.services import (
    post_customer_entry, post_supplier_entry, reverse_customer_entries, reverse_supplier_entries
)
from .models import DENOMINATION_FIELDS, Payment, PaymentIn, PaymentOut

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ['payment_method', 'online_reference', 'notes']


def _method_label(method):
    return dict(Payment.METHOD_CHOICES).get(method, method)


def _clean_method_fields(data):
    """Drop the online reference unless it applies; denominations only count for cash"""
    data = dict(data)
    if data.get('payment_method') not in Payment.REFERENCE_METHODS:
        data['online_reference'] = ''
    if data.get('payment_method') != Payment.METHOD_CASH:
        for field in DENOMINATION_FIELDS:
            data[field] = 0
    return data


def record_payment_in(data, user=None):
    """Receive a payment from a customer"""
    data = _clean_method_fields(data)
    customer = data['customer']
    payment = PaymentIn.objects.create(
        receipt_no=next_document_number('payment_in'),
        created_by=user if user and user.is_authenticated else None,
        **data
    )
    post_customer_entry(
        customer,
        CustomerLedger.TYPE_PAYMENT,
        payment.payment_date,
        credit=payment.amount,
        reference_id=payment.id,
        reference_no=payment.receipt_no,
        description=f"Payment received - {payment.payment_method}",
        user=user,
    )
    payment.customer_balance = customer.current_balance
    payment.save(update_fields=['customer_balance'])
    logger.info(f"Payment in {payment.receipt_no}: {payment.amount} from {customer.customer_name} ({payment.payment_method})")
    return payment


def record_payment_out(data, user=None):
    """Pay a supplier"""
    data = _clean_method_fields(data)
    supplier = data['supplier']
    payment = PaymentOut.objects.create(
        receipt_no=next_document_number('payment_out'),
        created_by=user if user and user.is_authenticated else None,
        **data
    )
    post_supplier_entry(
        supplier,
        SupplierLedger.TYPE_PAYMENT,
        payment.payment_date,
        debit=payment.amount,
        reference_id=payment.id,
        reference_no=payment.receipt_no,
        description=f"Payment made - {payment.payment_method}",
        user=user,
    )
    payment.supplier_balance = supplier.current_balance
    payment.save(update_fields=['supplier_balance'])
    logger.info(f"Payment out {payment.receipt_no}: {payment.amount} to {supplier.supplier_name} ({payment.payment_method})")
    return payment


def _ledger_entries(payment):
    if isinstance(payment, PaymentIn):
        return CustomerLedger.objects.filter(customer=payment.customer, transaction_type=CustomerLedger.TYPE_PAYMENT, reference_id=payment.id)
    return SupplierLedger.objects.filter(supplier=payment.supplier, transaction_type=SupplierLedger.TYPE_PAYMENT, reference_id=payment.id)


def update_payment(payment, data):
    """Change method, reference or notes; the ledger description follows the method"""
    merged = {field: data.get(field, getattr(payment, field)) for field in EDITABLE_FIELDS}
    merged = _clean_method_fields(merged)
    for field in EDITABLE_FIELDS:
        setattr(payment, field, merged[field])
    if payment.payment_method != Payment.METHOD_CASH:
        for field in DENOMINATION_FIELDS:
            setattr(payment, field, 0)
    payment.save()

    verb = 'received' if isinstance(payment, PaymentIn) else 'made'
    _ledger_entries(payment).update(description=f"Payment {verb} - {payment.payment_method}")
    logger.info(f"Updated payment {payment.receipt_no} ({_method_label(payment.payment_method)})")
    return payment


def delete_payment(payment):
    """Delete a payment and restore the party balance"""
    if isinstance(payment, PaymentIn):
        reverse_customer_entries(payment.customer, CustomerLedger.TYPE_PAYMENT, payment.id)
    else:
        reverse_supplier_entries(payment.supplier, SupplierLedger.TYPE_PAYMENT, payment.id)
    logger.info(f"Deleted payment {payment.receipt_no}: {payment.amount} for {payment.party_name}")
    payment.delete()
