"""
Balance and ledger bookkeeping for customers and suppliers.

Every helper locks the party row and must be called inside the caller's
``transaction.atomic()`` block so the balance change and the ledger row are
committed together with the document that caused them.

Ledger rows carry the running balance in ledger order (transaction date,
then entry time). A row posted or removed at an earlier date shifts the
balance of every later row, so those rows are restated walking back from
the party's current balance.
"""
import logging
from decimal import Decimal

from tradebook.core.utils import money
from .models import Customer, Supplier, CustomerLedger, SupplierLedger

logger = logging.getLogger(__name__)

# Sign of (debit - credit) in the party balance
CUSTOMER_SIGN = Decimal('1')
SUPPLIER_SIGN = Decimal('-1')


def restate_running_balances(entries, closing_balance, sign, from_date):
    """
    Rewrite ``balance`` on the rows dated ``from_date`` or later.

    The newest row ends at ``closing_balance``; each older row is the balance
    before the row that follows it. Rows before ``from_date`` are unaffected
    by a change on or after that date.
    """
    running = money(closing_balance)
    restated = 0
    for entry in entries.filter(transaction_date__gte=from_date).order_by('-transaction_date', '-created_at', '-id'):
        if entry.balance != running:
            entry.balance = running
            entry.save(update_fields=['balance'])
            restated += 1
        running = money(running - sign * (entry.debit - entry.credit))
    return restated


def _post_entry(model, party_model, party, party_field, sign, transaction_type, transaction_date, debit, credit,
                reference_id, reference_no, description, user):
    locked = party_model.objects.select_for_update().get(pk=party.pk)
    debit, credit = money(debit), money(credit)
    locked.current_balance = money(locked.current_balance + sign * (debit - credit))
    locked.save(update_fields=['current_balance', 'updated_at'])
    party.current_balance = locked.current_balance

    entry = model.objects.create(
        transaction_type=transaction_type,
        transaction_date=transaction_date,
        reference_id=reference_id,
        reference_no=reference_no or '',
        debit=debit,
        credit=credit,
        balance=locked.current_balance,
        description=description,
        created_by=user if user and user.is_authenticated else None,
        **{party_field: locked}
    )
    if restate_running_balances(locked.ledger_entries.all(), locked.current_balance, sign, transaction_date):
        entry.refresh_from_db(fields=['balance'])
    logger.debug(f"{party_model.__name__} ledger {transaction_type} {reference_no}: debit={debit} credit={credit} balance={locked.current_balance}")
    return entry


def post_customer_entry(customer, transaction_type, transaction_date, debit=Decimal('0'), credit=Decimal('0'),
                        reference_id=None, reference_no='', description='', user=None):
    """Apply debit/credit to the customer balance and append a ledger row carrying the running balance"""
    return _post_entry(CustomerLedger, Customer, customer, 'customer', CUSTOMER_SIGN, transaction_type,
                       transaction_date, debit, credit, reference_id, reference_no, description, user)


def post_supplier_entry(supplier, transaction_type, transaction_date, debit=Decimal('0'), credit=Decimal('0'),
                        reference_id=None, reference_no='', description='', user=None):
    """Apply credit/debit to the supplier payable and append a ledger row carrying the running balance"""
    return _post_entry(SupplierLedger, Supplier, supplier, 'supplier', SUPPLIER_SIGN, transaction_type,
                       transaction_date, debit, credit, reference_id, reference_no, description, user)


def _reverse_entries(party_model, party, sign, transaction_type, reference_id):
    locked = party_model.objects.select_for_update().get(pk=party.pk)
    entries = list(locked.ledger_entries.filter(transaction_type=transaction_type, reference_id=reference_id))
    if not entries:
        return 0

    delta = sum((sign * (entry.debit - entry.credit) for entry in entries), Decimal('0'))
    earliest = min(entry.transaction_date for entry in entries)
    locked.ledger_entries.filter(pk__in=[entry.pk for entry in entries]).delete()
    locked.current_balance = money(locked.current_balance - delta)
    locked.save(update_fields=['current_balance', 'updated_at'])
    party.current_balance = locked.current_balance

    restate_running_balances(locked.ledger_entries.all(), locked.current_balance, sign, earliest)
    logger.debug(f"Reversed {len(entries)} {party_model.__name__} ledger rows for {transaction_type} #{reference_id}")
    return len(entries)


def reverse_customer_entries(customer, transaction_type, reference_id):
    """Undo the balance effect of a document's ledger rows and remove them"""
    return _reverse_entries(Customer, customer, CUSTOMER_SIGN, transaction_type, reference_id)


def reverse_supplier_entries(supplier, transaction_type, reference_id):
    """Undo the payable effect of a document's ledger rows and remove them"""
    return _reverse_entries(Supplier, supplier, SUPPLIER_SIGN, transaction_type, reference_id)


def record_opening_balance(party, amount, transaction_date, user=None):
    """Ledger row for the balance a party is created with (the balance itself is already set)"""
    amount = money(amount)
    if not amount:
        return None
    if isinstance(party, Customer):
        return CustomerLedger.objects.create(
            customer=party,
            transaction_type=CustomerLedger.TYPE_OPENING,
            transaction_date=transaction_date,
            debit=amount if amount > 0 else Decimal('0.00'),
            credit=abs(amount) if amount < 0 else Decimal('0.00'),
            balance=amount,
            description='Opening Balance',
            created_by=user if user and user.is_authenticated else None,
        )
    return SupplierLedger.objects.create(
        supplier=party,
        transaction_type=SupplierLedger.TYPE_OPENING,
        transaction_date=transaction_date,
        credit=amount if amount > 0 else Decimal('0.00'),
        debit=abs(amount) if amount < 0 else Decimal('0.00'),
        balance=amount,
        description='Opening Balance',
        created_by=user if user and user.is_authenticated else None,
    )
