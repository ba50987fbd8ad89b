# Generated manually
import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('role', models.CharField(choices=[('superadmin', 'Super Admin'), ('staff', 'Staff')], default='staff', max_length=20)),
                ('feature_permissions', models.JSONField(blank=True, default=list, help_text='Feature keys granted to a staff user')),
                ('other_details', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'db_table': 'users',
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='CompanySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(blank=True, max_length=255)),
                ('company_address', models.TextField(blank=True)),
                ('contact_detail_1', models.CharField(blank=True, max_length=50)),
                ('contact_detail_2', models.CharField(blank=True, max_length=50)),
                ('contact_detail_3', models.CharField(blank=True, max_length=50)),
                ('email_1', models.EmailField(blank=True, max_length=254)),
                ('email_2', models.EmailField(blank=True, max_length=254)),
                ('ntn', models.CharField(blank=True, max_length=50)),
                ('str_no', models.CharField(blank=True, help_text='Sales tax registration number', max_length=50)),
                ('logo', models.ImageField(blank=True, null=True, upload_to='company/')),
                ('signature', models.ImageField(blank=True, null=True, upload_to='company/')),
                ('qr_code', models.ImageField(blank=True, null=True, upload_to='company/')),
                ('currency_code', models.CharField(default='PKR', max_length=10)),
                ('default_gst_percentage', models.DecimalField(decimal_places=2, default=Decimal('18.00'), max_digits=5)),
                ('sale_order_prefix', models.CharField(default='SO', max_length=20)),
                ('sale_order_next_number', models.PositiveIntegerField(default=1)),
                ('sale_invoice_prefix', models.CharField(default='INV', max_length=20)),
                ('sale_invoice_next_number', models.PositiveIntegerField(default=1)),
                ('purchase_order_prefix', models.CharField(default='PO', max_length=20)),
                ('purchase_order_next_number', models.PositiveIntegerField(default=1)),
                ('payment_in_prefix', models.CharField(default='PI', max_length=20)),
                ('payment_in_next_number', models.PositiveIntegerField(default=1)),
                ('payment_out_prefix', models.CharField(default='PO-PAY', max_length=20)),
                ('payment_out_next_number', models.PositiveIntegerField(default=1)),
                ('stock_in_prefix', models.CharField(default='STK-IN', max_length=20)),
                ('stock_in_next_number', models.PositiveIntegerField(default=1)),
                ('stock_out_prefix', models.CharField(default='STK-OUT', max_length=20)),
                ('stock_out_next_number', models.PositiveIntegerField(default=1)),
                ('restrict_negative_stock', models.BooleanField(default=False)),
                ('whatsapp_sales_message_template', models.TextField(blank=True)),
                ('whatsapp_purchase_message_template', models.TextField(blank=True)),
                ('whatsapp_auto_send_sales', models.BooleanField(default=False)),
                ('whatsapp_auto_send_purchase', models.BooleanField(default=False)),
                ('whatsapp_attach_invoice_image', models.BooleanField(default=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'company_settings',
                'verbose_name_plural': 'Company settings',
            },
        ),
        migrations.CreateModel(
            name='Currency',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=10, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('symbol', models.CharField(blank=True, max_length=10)),
                ('is_default', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'currencies',
                'ordering': ['code'],
                'verbose_name_plural': 'Currencies',
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('finalize', 'Finalize'), ('convert', 'Convert to Invoice'), ('post', 'Post Purchase Order'), ('payment_in', 'Payment Received'), ('payment_out', 'Payment Made'), ('stock_in', 'Stock In'), ('stock_out', 'Stock Out'), ('settings_change', 'Settings Changed'), ('permission_change', 'Permissions Changed'), ('whatsapp_send', 'WhatsApp Sent')], max_length=50)),
                ('model_name', models.CharField(max_length=100)),
                ('object_id', models.CharField(max_length=100)),
                ('object_name', models.CharField(blank=True, help_text='Human-readable name of the object (e.g., customer name, invoice number)', max_length=255, null=True)),
                ('object_reference', models.CharField(blank=True, help_text='Reference identifier (e.g., order or receipt number)', max_length=255, null=True)),
                ('changes', models.JSONField(blank=True, default=dict)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['-created_at'], name='idx_audit_created'), models.Index(fields=['action'], name='idx_audit_action'), models.Index(fields=['model_name'], name='idx_audit_model'), models.Index(fields=['object_reference'], name='idx_audit_reference')],
            },
        ),
    ]
