"""
Stock movements.

Each movement keeps ``Product.current_stock`` in step through an ``F()``
update issued in the caller's transaction; reversing a movement deletes the
row and applies the opposite adjustment.
"""
import logging
from decimal import Decimal

from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from tradebook.catalog.models import Product
from tradebook.core.model_cache import invalidate_product_cache
from tradebook.core.models import CompanySettings
from tradebook.core.numbering import next_document_number
from tradebook.core.utils import money
from .models import StockIn, StockOut

logger = logging.getLogger(__name__)


def _adjust_stock(product, delta):
    Product.objects.filter(pk=product.pk).update(current_stock=F('current_stock') + delta, updated_at=timezone.now())
    product.refresh_from_db(fields=['current_stock'])
    invalidate_product_cache(product.pk)


def _check_quantity(quantity):
    quantity = Decimal(str(quantity))
    if quantity <= 0:
        raise ValidationError({'quantity': 'Quantity must be greater than zero.'})
    return quantity


def record_stock_in(product, quantity, date, warehouse=None, unit_cost=Decimal('0'), supplier=None,
                    reference_type=StockIn.REFERENCE_MANUAL, reference_id=None, reference_no='', notes='', user=None):
    """Create a stock in row and add its quantity to the product"""
    quantity = _check_quantity(quantity)
    unit_cost = money(unit_cost)
    entry = StockIn.objects.create(
        stock_in_no=next_document_number('stock_in'),
        date=date,
        product=product,
        warehouse=warehouse,
        quantity=quantity,
        unit_cost=unit_cost,
        total_cost=money(quantity * unit_cost),
        reference_type=reference_type,
        reference_id=reference_id,
        reference_no=reference_no or '',
        supplier=supplier,
        notes=notes or '',
        created_by=user if user and user.is_authenticated else None,
    )
    _adjust_stock(product, quantity)
    logger.info(f"Stock in {entry.stock_in_no}: +{quantity} {product.name} (now {product.current_stock})")
    return entry


def record_stock_out(product, quantity, date, warehouse=None, customer=None,
                     reference_type=StockOut.REFERENCE_MANUAL, reference_id=None, reference_no='', notes='', user=None):
    """
    Create a stock out row and subtract its quantity from the product.

    When the company restricts negative stock the product row is locked and
    a quantity above the available stock is rejected.
    """
    quantity = _check_quantity(quantity)
    if CompanySettings.load().restrict_negative_stock:
        available = Product.objects.select_for_update().get(pk=product.pk).current_stock
        if quantity > available:
            raise ValidationError({
                'quantity': f"Insufficient stock for {product.name}: available {available}, requested {quantity}."
            })

    entry = StockOut.objects.create(
        stock_out_no=next_document_number('stock_out'),
        date=date,
        product=product,
        warehouse=warehouse,
        quantity=quantity,
        reference_type=reference_type,
        reference_id=reference_id,
        reference_no=reference_no or '',
        customer=customer,
        notes=notes or '',
        created_by=user if user and user.is_authenticated else None,
    )
    _adjust_stock(product, -quantity)
    logger.info(f"Stock out {entry.stock_out_no}: -{quantity} {product.name} (now {product.current_stock})")
    return entry


def reverse_stock_in(entry):
    _adjust_stock(entry.product, -entry.quantity)
    logger.info(f"Reversed stock in {entry.stock_in_no}: -{entry.quantity} {entry.product.name}")
    entry.delete()


def reverse_stock_out(entry):
    _adjust_stock(entry.product, entry.quantity)
    logger.info(f"Reversed stock out {entry.stock_out_no}: +{entry.quantity} {entry.product.name}")
    entry.delete()


def reverse_document_stock(model, reference_type, reference_id):
    """Reverse every movement a document created; returns the number reversed"""
    reverse = reverse_stock_in if model is StockIn else reverse_stock_out
    entries = list(model.objects.select_related('product').filter(reference_type=reference_type, reference_id=reference_id))
    for entry in entries:
        reverse(entry)
    return len(entries)
