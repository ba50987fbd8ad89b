"""
Sale order and sales invoice workflows.

Every function here must run inside the caller's ``transaction.atomic()``
block: finalizing an order allocates its number, posts the customer ledger,
issues stock and updates product prices, and any failure rolls all of it back.
"""
import logging
from decimal import Decimal

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from tradebook.catalog.models import Product
from tradebook.core.model_cache import invalidate_product_cache
from tradebook.core.numbering import next_document_number
from tradebook.core.utils import calculate_line, calculate_totals, money
from tradebook.inventory.models import StockOut
from tradebook.inventory.services import record_stock_out, reverse_document_stock
from tradebook.parties.models import Customer, CustomerLedger
from tradebook.parties.services import post_customer_entry, reverse_customer_entries
from .models import BILL_CASH, BILL_CREDIT, SaleOrder, SaleOrderItem, SalesInvoice, SalesInvoiceItem

logger = logging.getLogger(__name__)

ORDER_FIELDS = ['customer', 'customer_po', 'order_date', 'delivery_date', 'gst_percentage',
                'bill_situation', 'box', 'notes']
LINE_FIELDS = ['product_id', 'product_name', 'quantity', 'weight', 'net_weight', 'unit_price', 'total_price']


def _write_order_items(order, items):
    if not items:
        raise ValidationError({'items': 'Please add at least one product.'})
    order.items.all().delete()
    lines = []
    for item in items:
        product = item['product']
        weight = item.get('weight')
        if weight is None:
            weight = product.weight
        lines.append(SaleOrderItem(
            order=order,
            product=product,
            product_name=item.get('product_name') or product.name,
            quantity=item['quantity'],
            weight=weight,
            unit_price=money(item['unit_price']),
            **calculate_line(item['quantity'], item['unit_price'], weight),
        ))
    SaleOrderItem.objects.bulk_create(lines)
    order.subtotal, order.gst_amount, order.total_amount = calculate_totals(
        [line.total_price for line in lines], order.gst_percentage
    )
    order.save(update_fields=['subtotal', 'gst_amount', 'total_amount', 'updated_at'])


def create_sale_order(data, items, user=None):
    """Create a draft order with its items"""
    order = SaleOrder.objects.create(
        status=SaleOrder.STATUS_DRAFT,
        created_by=user if user and user.is_authenticated else None,
        **{field: data[field] for field in ORDER_FIELDS if field in data}
    )
    _write_order_items(order, items)
    return order


def update_sale_order(order, data, items=None):
    """Edit a draft order; items are replaced when given"""
    if order.is_finalized:
        raise ValidationError({'status': 'A finalized sale order cannot be edited.'})
    for field in ORDER_FIELDS:
        if field in data:
            setattr(order, field, data[field])
    order.save()
    if items is not None:
        _write_order_items(order, items)
    else:
        order.subtotal, order.gst_amount, order.total_amount = calculate_totals(
            order.items.values_list('total_price', flat=True), order.gst_percentage
        )
        order.save(update_fields=['subtotal', 'gst_amount', 'total_amount', 'updated_at'])
    return order


def finalize_sale_order(order, user=None):
    """
    Finalize a draft order.

    Allocates the order number, raises the customer balance for credit
    orders, records the order in the customer ledger (zero debit for cash),
    issues stock for every item and carries changed item prices back to the
    products.
    """
    order = SaleOrder.objects.select_for_update().select_related('customer').get(pk=order.pk)
    if order.is_finalized:
        raise ValidationError({'status': f'Sale order {order.order_no} is already finalized.'})
    items = list(order.items.select_related('product'))
    if not items:
        raise ValidationError({'items': 'Please add at least one product.'})

    order.order_no = next_document_number('sale_order')
    order.status = SaleOrder.STATUS_FINALIZED
    order.save(update_fields=['order_no', 'status', 'updated_at'])

    customer = order.customer
    is_credit = order.bill_situation == BILL_CREDIT
    post_customer_entry(
        customer,
        CustomerLedger.TYPE_SALE_ORDER,
        order.order_date,
        debit=order.total_amount if is_credit else Decimal('0'),
        reference_id=order.id,
        reference_no=order.order_no,
        description=f"Sale Order {order.order_no}{' (Cash)' if order.bill_situation == BILL_CASH else ''}",
        user=user,
    )
    Customer.objects.filter(pk=customer.pk).update(last_order_date=order.order_date)
    customer.last_order_date = order.order_date

    for item in items:
        record_stock_out(
            item.product,
            item.quantity,
            order.order_date,
            customer=customer,
            reference_type=StockOut.REFERENCE_SALE_ORDER,
            reference_id=order.id,
            reference_no=order.order_no,
            notes=f"Auto-generated from Sale Order {order.order_no}",
            user=user,
        )
        if item.unit_price != item.product.unit_price:
            Product.objects.filter(pk=item.product_id).update(unit_price=item.unit_price)
            invalidate_product_cache(item.product_id)

    logger.info(f"Finalized sale order {order.order_no} for {customer.customer_name}: {order.total_amount} ({order.bill_situation})")
    return order


def delete_sale_order(order):
    """Delete a draft, or a finalized order without an invoice after reversing its effects"""
    if order.has_invoice:
        raise ValidationError({'sale_order': f'Sale order {order.order_no} has an invoice. Delete the invoice first.'})
    if order.is_finalized:
        reversed_rows = reverse_document_stock(StockOut, StockOut.REFERENCE_SALE_ORDER, order.id)
        reverse_customer_entries(order.customer, CustomerLedger.TYPE_SALE_ORDER, order.id)
        logger.info(f"Reversed sale order {order.order_no}: {reversed_rows} stock rows, ledger and balance")
    order.delete()


def _copy_items_to_invoice(invoice, order):
    invoice.items.all().delete()
    SalesInvoiceItem.objects.bulk_create([
        SalesInvoiceItem(invoice=invoice, **{field: getattr(item, field) for field in LINE_FIELDS})
        for item in order.items.all()
    ])


def convert_to_invoice(order, user=None, fbr_invoice_no='', invoice_date=None):
    """Create the sales invoice for a finalized order; an order converts once"""
    order = SaleOrder.objects.select_for_update().select_related('customer').get(pk=order.pk)
    if not order.is_finalized:
        raise ValidationError({'status': 'Only finalized sale orders can be converted to an invoice.'})
    if order.has_invoice:
        raise ValidationError({'sale_order': f'Sale order {order.order_no} has already been converted to an invoice.'})

    customer_balance = Customer.objects.get(pk=order.customer_id).current_balance
    booked = order.total_amount if order.bill_situation == BILL_CREDIT else Decimal('0.00')
    invoice = SalesInvoice.objects.create(
        invoice_no=next_document_number('sale_invoice'),
        customer=order.customer,
        sale_order=order,
        invoice_date=invoice_date or timezone.localdate(),
        delivery_date=order.delivery_date,
        fbr_invoice_no=fbr_invoice_no or '',
        customer_po=order.customer_po,
        gst_percentage=order.gst_percentage,
        subtotal=order.subtotal,
        gst_amount=order.gst_amount,
        total_amount=order.total_amount,
        previous_balance=money(customer_balance - booked),
        final_balance=customer_balance,
        bill_situation=order.bill_situation,
        box=order.box,
        notes=order.notes,
        status=SalesInvoice.STATUS_FINALIZED,
        created_by=user if user and user.is_authenticated else None,
    )
    _copy_items_to_invoice(invoice, order)
    logger.info(f"Converted sale order {order.order_no} to invoice {invoice.invoice_no}")
    return invoice


def resync_invoice(invoice):
    """Copy items and totals from the invoice's sale order again"""
    order = invoice.sale_order
    if order is None:
        raise ValidationError({'sale_order': 'This invoice is not linked to a sale order.'})
    _copy_items_to_invoice(invoice, order)
    invoice.gst_percentage = order.gst_percentage
    invoice.subtotal = order.subtotal
    invoice.gst_amount = order.gst_amount
    invoice.total_amount = order.total_amount
    invoice.final_balance = money(invoice.previous_balance + (order.total_amount if order.bill_situation == BILL_CREDIT else 0))
    invoice.save()
    logger.info(f"Resynced invoice {invoice.invoice_no} from sale order {order.order_no}")
    return invoice
