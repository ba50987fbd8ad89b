# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


LEDGER_TYPE_CHOICES = [
    ('sale_order', 'Sale Order'),
    ('invoice', 'Invoice'),
    ('purchase_order', 'Purchase Order'),
    ('payment', 'Payment'),
    ('opening', 'Opening Balance'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_name', models.CharField(max_length=255)),
                ('contact_person', models.CharField(blank=True, max_length=200)),
                ('mobile_no', models.CharField(blank=True, max_length=20)),
                ('whatsapp_no', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('address', models.TextField(blank=True)),
                ('ntn', models.CharField(blank=True, max_length=50)),
                ('str_no', models.CharField(blank=True, max_length=50)),
                ('notes', models.TextField(blank=True)),
                ('current_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('last_order_date', models.DateField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'customers',
                'ordering': ['customer_name'],
                'indexes': [models.Index(fields=['customer_name'], name='idx_customer_name'), models.Index(fields=['mobile_no'], name='idx_customer_mobile')],
            },
        ),
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('supplier_name', models.CharField(max_length=255)),
                ('contact_person', models.CharField(blank=True, max_length=200)),
                ('mobile_no', models.CharField(blank=True, max_length=20)),
                ('whatsapp_no', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('address', models.TextField(blank=True)),
                ('ntn', models.CharField(blank=True, max_length=50)),
                ('str_no', models.CharField(blank=True, max_length=50)),
                ('notes', models.TextField(blank=True)),
                ('current_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('last_purchase_date', models.DateField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'suppliers',
                'ordering': ['supplier_name'],
                'indexes': [models.Index(fields=['supplier_name'], name='idx_supplier_name')],
            },
        ),
        migrations.CreateModel(
            name='CustomerLedger',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transaction_type', models.CharField(choices=LEDGER_TYPE_CHOICES, max_length=30)),
                ('transaction_date', models.DateField()),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('debit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('credit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ledger_entries', to='parties.customer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_ledger_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'customer_ledger',
                'ordering': ['transaction_date', 'created_at', 'id'],
                'abstract': False,
                'indexes': [models.Index(fields=['customer', 'transaction_date'], name='idx_cust_ledger_date'), models.Index(fields=['transaction_type', 'reference_id'], name='idx_cust_ledger_ref')],
            },
        ),
        migrations.CreateModel(
            name='SupplierLedger',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transaction_type', models.CharField(choices=LEDGER_TYPE_CHOICES, max_length=30)),
                ('transaction_date', models.DateField()),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('debit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('credit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ledger_entries', to='parties.supplier')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='supplier_ledger_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'supplier_ledger',
                'ordering': ['transaction_date', 'created_at', 'id'],
                'abstract': False,
                'indexes': [models.Index(fields=['supplier', 'transaction_date'], name='idx_supp_ledger_date'), models.Index(fields=['transaction_type', 'reference_id'], name='idx_supp_ledger_ref')],
            },
        ),
    ]
