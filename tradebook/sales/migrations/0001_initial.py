# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


BILL_SITUATION_CHOICES = [('credit', 'Credit'), ('cash', 'Cash')]


def line_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('product_name', models.CharField(max_length=255)),
        ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
        ('weight', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
        ('net_weight', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=14)),
        ('unit_price', models.DecimalField(decimal_places=2, max_digits=12)),
        ('total_price', models.DecimalField(decimal_places=2, max_digits=14)),
        ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='catalog.product')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SaleOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_no', models.CharField(blank=True, max_length=50, null=True, unique=True)),
                ('customer_po', models.CharField(blank=True, max_length=100)),
                ('order_date', models.DateField()),
                ('delivery_date', models.DateField(blank=True, null=True)),
                ('gst_percentage', models.DecimalField(decimal_places=2, default=Decimal('18.00'), max_digits=5)),
                ('bill_situation', models.CharField(choices=BILL_SITUATION_CHOICES, default='credit', max_length=10)),
                ('box', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('gst_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('finalized', 'Finalized')], default='draft', max_length=20)),
                ('whatsapp_sent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sale_orders', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sale_orders', to='parties.customer')),
            ],
            options={
                'db_table': 'sale_orders',
                'ordering': ['-order_date', '-id'],
                'indexes': [
                    models.Index(fields=['customer', 'order_date'], name='idx_sale_order_customer_date'),
                    models.Index(fields=['status', 'order_date'], name='idx_sale_order_status_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SaleOrderItem',
            fields=line_fields() + [
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='sales.saleorder')),
            ],
            options={
                'db_table': 'sale_order_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='SalesInvoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('invoice_no', models.CharField(max_length=50, unique=True)),
                ('invoice_date', models.DateField()),
                ('delivery_date', models.DateField(blank=True, null=True)),
                ('fbr_invoice_no', models.CharField(blank=True, max_length=100)),
                ('customer_po', models.CharField(blank=True, max_length=100)),
                ('gst_percentage', models.DecimalField(decimal_places=2, default=Decimal('18.00'), max_digits=5)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('gst_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('previous_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('final_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('bill_situation', models.CharField(choices=BILL_SITUATION_CHOICES, default='credit', max_length=10)),
                ('box', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('finalized', 'Finalized')], default='finalized', max_length=20)),
                ('whatsapp_sent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales_invoices', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales_invoices', to='parties.customer')),
                ('sale_order', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invoice', to='sales.saleorder')),
            ],
            options={
                'db_table': 'sales_invoices',
                'ordering': ['-invoice_date', '-id'],
                'indexes': [
                    models.Index(fields=['customer', 'invoice_date'], name='idx_invoice_customer_date'),
                    models.Index(fields=['invoice_date'], name='idx_invoice_date'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SalesInvoiceItem',
            fields=line_fields() + [
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='sales.salesinvoice')),
            ],
            options={
                'db_table': 'sales_invoice_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
    ]
