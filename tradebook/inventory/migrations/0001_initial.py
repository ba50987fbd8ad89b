# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='StockIn',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stock_in_no', models.CharField(max_length=50, unique=True)),
                ('date', models.DateField()),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('reference_type', models.CharField(choices=[('manual', 'Manual'), ('purchase', 'Purchase Order')], default='manual', max_length=20)),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_ins', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_ins', to='catalog.product')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_ins', to='parties.supplier')),
                ('warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_ins', to='locations.warehouse')),
            ],
            options={
                'db_table': 'stock_in',
                'ordering': ['-date', '-id'],
                'indexes': [
                    models.Index(fields=['product', 'date'], name='idx_stock_in_product_date'),
                    models.Index(fields=['reference_type', 'reference_id'], name='idx_stock_in_reference'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockOut',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stock_out_no', models.CharField(max_length=50, unique=True)),
                ('date', models.DateField()),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('reference_type', models.CharField(choices=[('manual', 'Manual'), ('sale_order', 'Sale Order')], default='manual', max_length=20)),
                ('reference_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_outs', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_outs', to='parties.customer')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_outs', to='catalog.product')),
                ('warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_outs', to='locations.warehouse')),
            ],
            options={
                'db_table': 'stock_out',
                'ordering': ['-date', '-id'],
                'indexes': [
                    models.Index(fields=['product', 'date'], name='idx_stock_out_product_date'),
                    models.Index(fields=['reference_type', 'reference_id'], name='idx_stock_out_reference'),
                ],
            },
        ),
    ]
