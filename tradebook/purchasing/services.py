"""
Purchase order workflows; callers hold the ``transaction.atomic()`` block.

A purchase order receives its number when it is first saved, drafts
included. Posting it (status pending or received) raises the supplier
payable, writes the supplier ledger and receives the items into stock.
"""
import logging
from decimal import Decimal

from rest_framework.exceptions import ValidationError

from tradebook.core.numbering import next_document_number
from tradebook.core.utils import calculate_line, calculate_totals, money
from tradebook.inventory.models import StockIn
from tradebook.inventory.services import record_stock_in, reverse_document_stock
from tradebook.parties.models import Supplier, SupplierLedger
from tradebook.parties.services import post_supplier_entry, reverse_supplier_entries
from .models import PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger(__name__)

PO_FIELDS = ['supplier', 'po_date', 'receiving_date', 'currency_code', 'is_gst', 'gst_percentage', 'notes']


def _recalculate(purchase_order, line_totals):
    gst_percentage = purchase_order.gst_percentage if purchase_order.is_gst else Decimal('0')
    purchase_order.subtotal, purchase_order.gst_amount, purchase_order.total_amount = calculate_totals(line_totals, gst_percentage)
    purchase_order.save(update_fields=['subtotal', 'gst_amount', 'total_amount', 'updated_at'])


def _write_items(purchase_order, items):
    if not items:
        raise ValidationError({'items': 'Please add at least one product.'})
    purchase_order.items.all().delete()
    lines = []
    for item in items:
        product = item['product']
        weight = item.get('weight')
        if weight is None:
            weight = product.weight
        lines.append(PurchaseOrderItem(
            purchase_order=purchase_order,
            product=product,
            product_name=item.get('product_name') or product.name,
            quantity=item['quantity'],
            weight=weight,
            unit_price=money(item['unit_price']),
            **calculate_line(item['quantity'], item['unit_price'], weight),
        ))
    PurchaseOrderItem.objects.bulk_create(lines)
    _recalculate(purchase_order, [line.total_price for line in lines])


def create_purchase_order(data, items, user=None):
    """Create a draft purchase order; the PO number is allocated now"""
    purchase_order = PurchaseOrder.objects.create(
        po_no=next_document_number('purchase_order'),
        status=PurchaseOrder.STATUS_DRAFT,
        created_by=user if user and user.is_authenticated else None,
        **{field: data[field] for field in PO_FIELDS if field in data}
    )
    _write_items(purchase_order, items)
    return purchase_order


def update_purchase_order(purchase_order, data, items=None):
    """Edit a draft; a posted order only takes receiving date and notes"""
    if purchase_order.status != PurchaseOrder.STATUS_DRAFT:
        blocked = [field for field in data if field not in ('receiving_date', 'notes')]
        if blocked or items is not None:
            raise ValidationError({'status': f'Purchase order {purchase_order.po_no} is {purchase_order.status}; only receiving date and notes can be changed.'})
    for field in PO_FIELDS:
        if field in data:
            setattr(purchase_order, field, data[field])
    purchase_order.save()
    if items is not None:
        _write_items(purchase_order, items)
    elif purchase_order.status == PurchaseOrder.STATUS_DRAFT:
        _recalculate(purchase_order, purchase_order.items.values_list('total_price', flat=True))
    return purchase_order


def post_purchase_order(purchase_order, user=None, status=PurchaseOrder.STATUS_PENDING):
    """
    Post a draft: previous balance and final payable are captured on the
    order, the supplier ledger gets a credit for the total and every item is
    received into stock at its unit price.
    """
    if status not in PurchaseOrder.POSTED_STATUSES:
        raise ValidationError({'status': f"A purchase order can only be posted as {' or '.join(PurchaseOrder.POSTED_STATUSES)}."})
    purchase_order = PurchaseOrder.objects.select_for_update().select_related('supplier').get(pk=purchase_order.pk)
    if purchase_order.status != PurchaseOrder.STATUS_DRAFT:
        raise ValidationError({'status': f'Purchase order {purchase_order.po_no} is already {purchase_order.status}.'})
    items = list(purchase_order.items.select_related('product'))
    if not items:
        raise ValidationError({'items': 'Please add at least one product.'})

    supplier = purchase_order.supplier
    previous_balance = Supplier.objects.get(pk=supplier.pk).current_balance
    post_supplier_entry(
        supplier,
        SupplierLedger.TYPE_PURCHASE_ORDER,
        purchase_order.po_date,
        credit=purchase_order.total_amount,
        reference_id=purchase_order.id,
        reference_no=purchase_order.po_no,
        description=f"Purchase Order {purchase_order.po_no}",
        user=user,
    )
    Supplier.objects.filter(pk=supplier.pk).update(last_purchase_date=purchase_order.po_date)
    supplier.last_purchase_date = purchase_order.po_date

    purchase_order.previous_balance = previous_balance
    purchase_order.final_payable = money(previous_balance + purchase_order.total_amount)
    purchase_order.status = status
    purchase_order.save(update_fields=['previous_balance', 'final_payable', 'status', 'updated_at'])

    stock_date = purchase_order.receiving_date or purchase_order.po_date
    for item in items:
        record_stock_in(
            item.product,
            item.quantity,
            stock_date,
            unit_cost=item.unit_price,
            supplier=supplier,
            reference_type=StockIn.REFERENCE_PURCHASE,
            reference_id=purchase_order.id,
            reference_no=purchase_order.po_no,
            notes=f"Auto-generated from Purchase Order {purchase_order.po_no}",
            user=user,
        )

    logger.info(f"Posted purchase order {purchase_order.po_no} for {supplier.supplier_name}: {purchase_order.total_amount}, payable {purchase_order.final_payable}")
    return purchase_order


def _reverse_posting(purchase_order):
    reversed_rows = reverse_document_stock(StockIn, StockIn.REFERENCE_PURCHASE, purchase_order.id)
    reverse_supplier_entries(purchase_order.supplier, SupplierLedger.TYPE_PURCHASE_ORDER, purchase_order.id)
    logger.info(f"Reversed purchase order {purchase_order.po_no}: {reversed_rows} stock rows, ledger and payable")


def change_status(purchase_order, new_status, user=None):
    """Move between pending and received, post a draft, or cancel (reversing a posted order)"""
    if new_status == purchase_order.status:
        return purchase_order
    if purchase_order.status == PurchaseOrder.STATUS_CANCELLED:
        raise ValidationError({'status': f'Purchase order {purchase_order.po_no} is cancelled.'})
    if new_status == PurchaseOrder.STATUS_CANCELLED:
        if purchase_order.is_posted:
            _reverse_posting(purchase_order)
        purchase_order.status = new_status
        purchase_order.save(update_fields=['status', 'updated_at'])
        return purchase_order
    if purchase_order.status == PurchaseOrder.STATUS_DRAFT:
        return post_purchase_order(purchase_order, user=user, status=new_status)
    if new_status == PurchaseOrder.STATUS_DRAFT:
        raise ValidationError({'status': 'A posted purchase order cannot go back to draft.'})
    purchase_order.status = new_status
    purchase_order.save(update_fields=['status', 'updated_at'])
    return purchase_order


def delete_purchase_order(purchase_order):
    """Delete a purchase order, reversing stock, payable and ledger if it was posted"""
    if purchase_order.is_posted:
        _reverse_posting(purchase_order)
    purchase_order.delete()
