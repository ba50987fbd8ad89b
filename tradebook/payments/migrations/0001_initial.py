# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


METHOD_CHOICES = [('cash', 'Cash'), ('online', 'Online'), ('bank_transfer', 'Bank Transfer'), ('cheque', 'Cheque')]


def payment_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('receipt_no', models.CharField(max_length=50, unique=True)),
        ('payment_date', models.DateField()),
        ('payment_method', models.CharField(choices=METHOD_CHOICES, default='cash', max_length=20)),
        ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
        ('online_reference', models.CharField(blank=True, max_length=100)),
        ('denomination_5000', models.PositiveIntegerField(default=0)),
        ('denomination_1000', models.PositiveIntegerField(default=0)),
        ('denomination_500', models.PositiveIntegerField(default=0)),
        ('denomination_100', models.PositiveIntegerField(default=0)),
        ('denomination_50', models.PositiveIntegerField(default=0)),
        ('denomination_20', models.PositiveIntegerField(default=0)),
        ('denomination_10', models.PositiveIntegerField(default=0)),
        ('notes', models.TextField(blank=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentIn',
            fields=payment_fields() + [
                ('customer_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Customer balance after this payment', max_digits=14)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments_in', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments_in', to='parties.customer')),
            ],
            options={
                'db_table': 'payments_in',
                'ordering': ['-payment_date', '-id'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['customer', 'payment_date'], name='idx_payment_in_customer_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PaymentOut',
            fields=payment_fields() + [
                ('supplier_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Supplier payable after this payment', max_digits=14)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments_out', to=settings.AUTH_USER_MODEL)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments_out', to='parties.supplier')),
            ],
            options={
                'db_table': 'payments_out',
                'ordering': ['-payment_date', '-id'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['supplier', 'payment_date'], name='idx_payment_out_supplier_date'),
                ],
            },
        ),
    ]
