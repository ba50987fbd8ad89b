from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal
from tradebook.parties.models import Customer, Supplier


class Command(BaseCommand):
    help = 'Recomputes customer and supplier balances and running ledger balances from the ledgers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report differences without saving changes',
        )
        parser.add_argument(
            '--party',
            choices=['customers', 'suppliers', 'all'],
            default='all',
            help='Which ledgers to repair (default: all)',
        )

    def _repair(self, parties, name_field, sign, dry_run):
        """sign is +1 when debit raises the balance (customers), -1 when credit does (suppliers)"""
        repaired = 0
        for party in parties:
            running = Decimal('0.00')
            stale_rows = 0
            for entry in party.ledger_entries.order_by('transaction_date', 'created_at', 'id'):
                running += sign * (entry.debit - entry.credit)
                if entry.balance != running:
                    stale_rows += 1
                    if not dry_run:
                        entry.balance = running
                        entry.save(update_fields=['balance'])

            name = getattr(party, name_field)
            if party.current_balance != running or stale_rows:
                repaired += 1
                self.stdout.write(self.style.NOTICE(
                    f"  - {name} (ID: {party.id}): balance {party.current_balance} -> {running}, {stale_rows} ledger rows fixed"
                ))
                if not dry_run and party.current_balance != running:
                    party.current_balance = running
                    party.save(update_fields=['current_balance'])
        return repaired

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        which = options['party']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        with transaction.atomic():
            if which in ('customers', 'all'):
                customers = Customer.objects.select_for_update().order_by('id')
                self.stdout.write(f"Checking {customers.count()} customers...")
                count = self._repair(customers, 'customer_name', Decimal('1'), dry_run)
                self.stdout.write(f"Customers needing repair: {count}")
            if which in ('suppliers', 'all'):
                suppliers = Supplier.objects.select_for_update().order_by('id')
                self.stdout.write(f"Checking {suppliers.count()} suppliers...")
                count = self._repair(suppliers, 'supplier_name', Decimal('-1'), dry_run)
                self.stdout.write(f"Suppliers needing repair: {count}")

        if dry_run:
            self.stdout.write(self.style.WARNING("\nDry run complete."))
        else:
            self.stdout.write(self.style.SUCCESS("\nBalance repair complete."))
