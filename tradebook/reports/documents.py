"""
Column layouts and PDF builders for business documents and report tables.

Table builders return ``(columns, rows, totals)`` for ``export_response``;
document builders return rendered PDF bytes.
"""
from decimal import Decimal

from tradebook.core.utils import money
from .exports import col
from .formatting import format_date, format_money, number_to_words
from .pdf import build_document_pdf

ITEM_COLUMNS = [
    col('S.N', 5, 'number'),
    col('Item Name', 34),
    col('Qty', 9, 'quantity'),
    col('Unit', 8),
    col('Price', 12, 'money'),
    col('Tax', 11, 'money'),
    col('Amount', 14, 'money'),
]


def _party_lines(name, address='', mobile='', ntn='', str_no=''):
    lines = [(name or 'CUSTOMER').upper()]
    if address:
        lines.append(address)
    if mobile:
        lines.append(f"Call. {mobile}")
    tax = '   '.join(part for part in [f"NTN # {ntn}" if ntn else '', f"STR # {str_no}" if str_no else ''] if part)
    if tax:
        lines.append(tax)
    return lines


def _item_rows(items, gst_percentage):
    rows = []
    for index, item in enumerate(items, start=1):
        tax = money(item.total_price * Decimal(str(gst_percentage or 0)) / Decimal('100'))
        unit = item.product.unit.symbol if item.product_id and item.product.unit_id else ''
        rows.append([index, item.product_name, item.quantity, unit, item.unit_price, tax, item.total_price + tax])
    return rows


def _tax_summary(amount_label, total, gst_amount, gst_percentage):
    return [
        (amount_label, format_money(total)),
        ('TAXABLE AMOUNT', format_money(total - gst_amount)),
        ('RATE', f"{gst_percentage or 0}%"),
        ('TAX AMOUNT', format_money(gst_amount)),
    ]


# ==================== DOCUMENT PDFS ====================

def sales_invoice_pdf(invoice):
    customer = invoice.customer
    info_lines = [invoice.invoice_no or '-']
    if invoice.fbr_invoice_no:
        info_lines.append(f"FBR Invoice # {invoice.fbr_invoice_no}")
    if invoice.customer_po:
        info_lines.append(f"Customer PO # {invoice.customer_po}")
    info_lines += [
        f"Date: {format_date(invoice.invoice_date)}",
        f"Payment Mode: {(invoice.bill_situation or 'credit').upper()}",
    ]
    if invoice.box:
        info_lines.append(f"Box: {invoice.box}")
    return build_document_pdf(
        'SALE INVOICE',
        'BILL TO,',
        _party_lines(customer.customer_name, customer.address, customer.mobile_no, customer.ntn, customer.str_no),
        info_lines,
        ITEM_COLUMNS,
        _item_rows(invoice.items.select_related('product__unit'), invoice.gst_percentage),
        summary=_tax_summary('INV. AMOUNT', invoice.total_amount, invoice.gst_amount, invoice.gst_percentage),
        amount_in_words=number_to_words(invoice.total_amount),
        words_label='INVOICE AMOUNT IN WORDS',
        notes=invoice.notes,
    )


def sale_order_pdf(order):
    customer = order.customer
    info_lines = [
        'Sale Order #',
        order.order_no or 'DRAFT',
        f"Customer PO # {order.customer_po or '-'}",
        f"PO Date: {format_date(order.order_date)}",
        f"Bill Situation: {(order.bill_situation or 'pending').upper()}",
    ]
    if order.delivery_date:
        info_lines.append(f"Delivery: {format_date(order.delivery_date)}")
    return build_document_pdf(
        'SALES ORDER REPORT',
        'ORDER TO,',
        _party_lines(customer.customer_name, customer.address, customer.mobile_no, customer.ntn, customer.str_no),
        info_lines,
        ITEM_COLUMNS,
        _item_rows(order.items.select_related('product__unit'), order.gst_percentage),
        summary=_tax_summary('ORDER AMOUNT', order.total_amount, order.gst_amount, order.gst_percentage),
        amount_in_words=number_to_words(order.total_amount),
        words_label='ORDER AMOUNT IN WORDS',
        notes=order.notes,
    )


def purchase_order_pdf(purchase_order):
    supplier = purchase_order.supplier
    gst_percentage = purchase_order.gst_percentage if purchase_order.is_gst else 0
    info_lines = [
        'Purchase Order #',
        purchase_order.po_no or '-',
        f"PO Date: {format_date(purchase_order.po_date)}",
        f"Receiving Date: {format_date(purchase_order.receiving_date)}",
        f"Currency: {purchase_order.currency_code}",
        f"Status: {purchase_order.get_status_display().upper()}",
    ]
    summary = _tax_summary('PO AMOUNT', purchase_order.total_amount, purchase_order.gst_amount, gst_percentage)
    summary.append(('PAYABLE', format_money(purchase_order.final_payable)))
    return build_document_pdf(
        'PURCHASE ORDER',
        'SUPPLIER,',
        _party_lines(supplier.supplier_name, supplier.address, supplier.mobile_no, supplier.ntn, supplier.str_no),
        info_lines,
        ITEM_COLUMNS,
        _item_rows(purchase_order.items.select_related('product__unit'), gst_percentage),
        summary=summary,
        amount_in_words=number_to_words(purchase_order.total_amount),
        words_label='PO AMOUNT IN WORDS',
        notes=purchase_order.notes,
    )


def payment_receipt_pdf(payment, party, balance_after, received=True):
    """Receipt for a payment in (from a customer) or out (to a supplier)"""
    name = getattr(party, 'customer_name', None) or getattr(party, 'supplier_name', '')
    columns = [col('Description', 40), col('Method', 14), col('Reference', 18), col('Amount', 14, 'money')]
    rows = [[
        'Payment received' if received else 'Payment made',
        payment.get_payment_method_display(),
        payment.online_reference or '-',
        payment.amount,
    ]]
    for value, count in payment.denomination_breakdown():
        rows.append([f"Cash note {value} x {count}", '', '', Decimal(value) * count])
    return build_document_pdf(
        'PAYMENT RECEIPT' if received else 'PAYMENT VOUCHER',
        'RECEIVED FROM,' if received else 'PAID TO,',
        _party_lines(name, party.address, party.mobile_no, party.ntn, party.str_no),
        [payment.receipt_no, f"Date: {format_date(payment.payment_date)}"],
        columns,
        rows,
        summary=[('AMOUNT', format_money(payment.amount)), ('BALANCE AFTER', format_money(balance_after))],
        amount_in_words=number_to_words(payment.amount),
        notes=payment.notes,
    )


# ==================== TABLE LAYOUTS ====================

def party_list_table(queryset, kind):
    """Customer or supplier list in the export column layout"""
    name_field = 'customer_name' if kind == 'customer' else 'supplier_name'
    date_field = 'last_order_date' if kind == 'customer' else 'last_purchase_date'
    columns = [
        col('#', 5, 'number'),
        col('Customer Name' if kind == 'customer' else 'Supplier Name', 30),
        col('Contact Person', 20),
        col('Mobile Number', 15),
        col('WhatsApp', 15),
        col('Email', 25),
        col('Address', 35),
        col('NTN', 15),
        col('STR', 15),
        col('Current Balance', 15, 'money'),
        col('Last Order Date' if kind == 'customer' else 'Last Purchase Date', 15, 'date'),
        col('Status', 10),
        col('Created Date', 15, 'date'),
    ]
    rows = []
    total_balance = Decimal('0.00')
    for index, party in enumerate(queryset, start=1):
        total_balance += party.current_balance
        rows.append([
            index, getattr(party, name_field), party.contact_person, party.mobile_no, party.whatsapp_no,
            party.email, party.address, party.ntn, party.str_no, party.current_balance,
            getattr(party, date_field), 'Active' if party.is_active else 'Inactive', party.created_at,
        ])
    label = 'Total Customers' if kind == 'customer' else 'Total Suppliers'
    totals = [(label, len(rows)), ('Total Balance', format_money(total_balance))]
    return columns, rows, totals


def ledger_export_table(queryset, stats):
    columns = [
        col('Date', 12, 'date'),
        col('Type', 14),
        col('Reference', 14),
        col('Description', 34),
        col('Debit', 13, 'money'),
        col('Credit', 13, 'money'),
        col('Balance', 14, 'money'),
    ]
    rows = [
        [entry.transaction_date, entry.get_transaction_type_display(), entry.reference_no, entry.description,
         entry.debit, entry.credit, entry.balance]
        for entry in queryset
    ]
    totals = [
        ('Total Debit', format_money(stats['total_debit'])),
        ('Total Credit', format_money(stats['total_credit'])),
        ('Outstanding', format_money(stats['outstanding'])),
    ]
    return columns, rows, totals


def sales_report_table(invoices, totals):
    columns = [
        col('Invoice #', 14), col('Date', 12, 'date'), col('Customer', 28), col('Bill', 8),
        col('Subtotal', 14, 'money'), col('GST', 12, 'money'), col('Amount', 14, 'money'),
    ]
    rows = [
        [inv.invoice_no, inv.invoice_date, inv.customer.customer_name, inv.bill_situation.upper(),
         inv.subtotal, inv.gst_amount, inv.total_amount]
        for inv in invoices
    ]
    return columns, rows, [
        ('Total Sales', totals['count']),
        ('Total Amount', format_money(totals['total_amount'])),
    ]


def purchase_report_table(purchase_orders, totals):
    columns = [
        col('PO #', 14), col('Date', 12, 'date'), col('Supplier', 28), col('Status', 10),
        col('Subtotal', 14, 'money'), col('GST', 12, 'money'), col('Amount', 14, 'money'),
    ]
    rows = [
        [po.po_no, po.po_date, po.supplier.supplier_name, po.get_status_display(),
         po.subtotal, po.gst_amount, po.total_amount]
        for po in purchase_orders
    ]
    return columns, rows, [
        ('Total Purchases', totals['count']),
        ('Total Amount', format_money(totals['total_amount'])),
    ]


def gst_report_table(invoices, totals):
    columns = [
        col('Invoice #', 14), col('FBR #', 14), col('Date', 12, 'date'), col('Customer', 26), col('NTN', 12),
        col('Subtotal', 13, 'money'), col('GST %', 8, 'number'), col('GST', 12, 'money'), col('Amount', 13, 'money'),
    ]
    rows = [
        [inv.invoice_no, inv.fbr_invoice_no, inv.invoice_date, inv.customer.customer_name, inv.customer.ntn,
         inv.total_amount - inv.gst_amount, inv.gst_percentage, inv.gst_amount, inv.total_amount]
        for inv in invoices
    ]
    return columns, rows, [
        ('Total Subtotal', format_money(totals['total_subtotal'])),
        ('Total GST', format_money(totals['total_gst'])),
        ('Total Amount', format_money(totals['total_amount'])),
    ]


def stock_table(products, totals):
    columns = [
        col('#', 5, 'number'), col('Product', 30), col('Category', 16), col('Unit', 8),
        col('Stock', 10, 'quantity'), col('Unit Price', 12, 'money'), col('Stock Value', 14, 'money'), col('Status', 8),
    ]
    rows = [
        [index, product.name, product.category.name if product.category_id else '-',
         product.unit.symbol if product.unit_id else '-', product.current_stock, product.unit_price,
         product.stock_value, product.stock_status.upper()]
        for index, product in enumerate(products, start=1)
    ]
    return columns, rows, [
        ('Total Items', totals['total_items']),
        ('Total Units', totals['total_units']),
        ('Total Value', format_money(totals['total_value'])),
    ]


def low_stock_table(products):
    columns = [
        col('#', 5, 'number'), col('Product', 30), col('Category', 16), col('Stock', 10, 'quantity'),
        col('Threshold', 10, 'quantity'), col('Reorder Qty', 12, 'quantity'), col('Status', 8),
    ]
    rows = [
        [index, product.name, product.category.name if product.category_id else '-', product.current_stock,
         product.low_stock_threshold, product.reorder_quantity, product.stock_status.upper()]
        for index, product in enumerate(products, start=1)
    ]
    return columns, rows, [('Products Below Threshold', len(rows))]


def expense_table(expenses, total_amount):
    columns = [
        col('Date', 12, 'date'), col('Category', 18), col('Description', 34), col('Notes', 24), col('Amount', 14, 'money'),
    ]
    rows = [
        [expense.expense_date, expense.category.name if expense.category_id else '-', expense.description,
         expense.notes, expense.amount]
        for expense in expenses
    ]
    return columns, rows, [('Total Expenses', len(rows)), ('Total Amount', format_money(total_amount))]
