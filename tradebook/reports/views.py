import calendar
import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from datetime import date, timedelta
from decimal import Decimal

from tradebook.catalog.models import Product
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import get_date_range
from tradebook.expenses.models import Expense
from tradebook.inventory.views import availability_queryset, availability_totals
from tradebook.parties.models import Customer, Supplier, CustomerLedger
from tradebook.parties.views import filter_ledger, ledger_stats
from tradebook.purchasing.models import PurchaseOrder
from tradebook.sales.models import SalesInvoice
from .documents import (
    gst_report_table, ledger_export_table, purchase_report_table, sales_report_table, stock_table
)
from .exports import export_response, get_export_format
from .formatting import format_date

logger = logging.getLogger('tradebook.reports')

PERIODS = ('this_month', 'last_month', 'last_year')
TREND_VIEWS = ('weekly', 'monthly', 'yearly')
DASHBOARD_LIST_SIZE = 5


def _month_end(day):
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _shift_months(day, months):
    """First day of the month ``months`` away from ``day``'s month"""
    index = day.year * 12 + day.month - 1 + months
    return date(index // 12, index % 12 + 1, 1)


def period_range(period, today=None):
    """(first, last) day of a dashboard period"""
    today = today or timezone.localdate()
    if period == 'this_month':
        first = today.replace(day=1)
        return first, _month_end(first)
    if period == 'last_month':
        first = _shift_months(today, -1)
        return first, _month_end(first)
    if period == 'last_year':
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    raise ValidationError({'period': f"Unknown period '{period}'. Use one of: {', '.join(PERIODS)}."})


def trend_buckets(view, today=None):
    """Labelled (name, start, end) date buckets for a sales trend view"""
    today = today or timezone.localdate()
    if view == 'weekly':
        month_start = today.replace(day=1)
        month_end = _month_end(month_start)
        buckets, start, number = [], month_start, 1
        while start <= month_end:
            end = min(start + timedelta(days=6), month_end)
            buckets.append((f"Week {number}", start, end))
            start, number = end + timedelta(days=1), number + 1
        return buckets
    if view == 'monthly':
        buckets = []
        for offset in range(-5, 1):
            start = _shift_months(today, offset)
            buckets.append((start.strftime('%b %Y'), start, _month_end(start)))
        return buckets
    if view == 'yearly':
        return [(str(year), date(year, 1, 1), date(year, 12, 31)) for year in range(today.year - 4, today.year + 1)]
    raise ValidationError({'view': f"Unknown view '{view}'. Use one of: {', '.join(TREND_VIEWS)}."})


def _bucket_sums(buckets, dated_amounts):
    sums = [Decimal('0.00')] * len(buckets)
    for day, amount in dated_amounts:
        for index, (_, start, end) in enumerate(buckets):
            if start <= day <= end:
                sums[index] += amount or Decimal('0.00')
                break
    return sums


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field))['total'] or Decimal('0.00')


def _purchases():
    return PurchaseOrder.objects.filter(status__in=PurchaseOrder.POSTED_STATUSES)


def _low_stock_products():
    return Product.objects.filter(is_active=True, current_stock__lte=F('low_stock_threshold'))


def _period_payload(date_from, date_to):
    return {'from': date_from.isoformat(), 'to': date_to.isoformat()}


def _period_label(date_from, date_to):
    return f"Period: {format_date(date_from, '/')} to {format_date(date_to, '/')}"


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def dashboard(request):
    """
    Dashboard KPIs for a period (this_month, last_month or last_year).

    Purchases count posted purchase orders only. Receivables and payables are
    the sums of positive customer and supplier balances.
    """
    period = request.query_params.get('period', 'this_month')
    date_from, date_to = period_range(period)

    invoices = SalesInvoice.objects.filter(invoice_date__range=(date_from, date_to))
    purchases = _purchases().filter(po_date__range=(date_from, date_to))
    expenses = Expense.objects.filter(expense_date__range=(date_from, date_to))

    total_sales = _sum(invoices, 'total_amount')
    total_purchases = _sum(purchases, 'total_amount')
    total_expenses = _sum(expenses, 'amount')
    receivables = _sum(Customer.objects.filter(current_balance__gt=0), 'current_balance')
    payables = _sum(Supplier.objects.filter(current_balance__gt=0), 'current_balance')

    # Weekly purchases vs expenses for the current month
    weeks = trend_buckets('weekly')
    month_start, month_end = weeks[0][1], weeks[-1][2]
    week_purchases = _bucket_sums(weeks, _purchases().filter(po_date__range=(month_start, month_end)).values_list('po_date', 'total_amount'))
    week_expenses = _bucket_sums(weeks, Expense.objects.filter(expense_date__range=(month_start, month_end)).values_list('expense_date', 'amount'))

    customer_counts = Customer.objects.aggregate(
        active=Count('id', filter=Q(is_active=True)),
        inactive=Count('id', filter=Q(is_active=False)),
        new=Count('id', filter=Q(is_active=True, created_at__gte=timezone.now() - timedelta(days=30))),
    )

    top_customers = Customer.objects.filter(current_balance__gt=0).order_by('-current_balance')[:DASHBOARD_LIST_SIZE]
    top_suppliers = Supplier.objects.filter(current_balance__gt=0).order_by('-current_balance')[:DASHBOARD_LIST_SIZE]
    recent_sales = SalesInvoice.objects.select_related('customer').order_by('-created_at')[:DASHBOARD_LIST_SIZE]
    recent_purchases = PurchaseOrder.objects.select_related('supplier').order_by('-created_at')[:DASHBOARD_LIST_SIZE]
    low_stock_items = _low_stock_products().select_related('unit').order_by('current_stock', 'name')[:DASHBOARD_LIST_SIZE]

    logger.debug(f"Dashboard computed for {period} ({date_from} to {date_to})")

    return Response({
        'period': dict(_period_payload(date_from, date_to), key=period),
        'kpis': {
            'total_sales': float(total_sales),
            'total_purchases': float(total_purchases),
            'total_expenses': float(total_expenses),
            'net_profit': float(total_sales - total_purchases - total_expenses),
            'total_receivables': float(receivables),
            'total_payables': float(payables),
            'low_stock_count': _low_stock_products().count(),
            'active_products': Product.objects.filter(is_active=True).count(),
            'active_customers': customer_counts['active'],
            'active_suppliers': Supplier.objects.filter(is_active=True).count(),
        },
        'top_customers': [
            {'id': c.id, 'name': c.customer_name, 'balance': float(c.current_balance)} for c in top_customers
        ],
        'top_suppliers': [
            {'id': s.id, 'name': s.supplier_name, 'balance': float(s.current_balance)} for s in top_suppliers
        ],
        'recent_sales': [
            {'id': inv.id, 'invoice_no': inv.invoice_no, 'invoice_date': inv.invoice_date,
             'customer_name': inv.customer.customer_name, 'total_amount': float(inv.total_amount)}
            for inv in recent_sales
        ],
        'recent_purchases': [
            {'id': po.id, 'po_no': po.po_no, 'po_date': po.po_date, 'status': po.status,
             'supplier_name': po.supplier.supplier_name, 'total_amount': float(po.total_amount)}
            for po in recent_purchases
        ],
        'low_stock_items': [
            {'id': p.id, 'name': p.name, 'current_stock': float(p.current_stock),
             'unit': p.unit.symbol if p.unit_id else ''}
            for p in low_stock_items
        ],
        'purchases_vs_expenses': [
            {'name': name, 'purchases': float(purchases_total), 'expenses': float(expenses_total)}
            for (name, _, _), purchases_total, expenses_total in zip(weeks, week_purchases, week_expenses)
        ],
        'customer_distribution': {
            'active': max(0, customer_counts['active'] - customer_counts['new']),
            'new_30_days': customer_counts['new'],
            'inactive': customer_counts['inactive'],
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def sales_trend(request):
    """Invoice totals bucketed by week of this month, last 6 months or last 5 years"""
    view = request.query_params.get('view', 'weekly')
    buckets = trend_buckets(view)
    invoices = SalesInvoice.objects.filter(invoice_date__range=(buckets[0][1], buckets[-1][2]))
    sums = _bucket_sums(buckets, invoices.values_list('invoice_date', 'total_amount'))
    return Response({
        'view': view,
        'data': [
            {'name': name, 'start': start, 'end': end, 'sales': float(total)}
            for (name, start, end), total in zip(buckets, sums)
        ],
    })


def _report_response(request, title, filename, table, date_from, date_to, totals, landscape=False):
    """JSON rows for the report screen, or the same table as a PDF/Excel file"""
    columns, rows, export_totals = table
    if 'export' in request.query_params:
        return export_response(get_export_format(request), title, columns, rows, filename, totals=export_totals,
                               period=_period_label(date_from, date_to), sheet_name=title[:31], landscape=landscape)
    return Response({
        'period': _period_payload(date_from, date_to),
        'columns': [column.header for column in columns],
        'rows': list(rows),
        'totals': totals,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def sale_report(request):
    """Sales invoices in a date range (default: this month), optionally for one customer"""
    date_from, date_to = get_date_range(request)
    invoices = SalesInvoice.objects.select_related('customer').filter(
        invoice_date__range=(date_from, date_to)
    ).order_by('invoice_date', 'id')
    customer = request.query_params.get('customer')
    if customer:
        invoices = invoices.filter(customer_id=customer)

    totals = {'count': invoices.count(), 'total_amount': _sum(invoices, 'total_amount')}
    return _report_response(request, 'Sale Report', 'sale_report', sales_report_table(invoices, totals),
                            date_from, date_to, totals)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def purchase_report(request):
    """Posted purchase orders in a date range, optionally for one supplier"""
    date_from, date_to = get_date_range(request)
    purchase_orders = _purchases().select_related('supplier').filter(
        po_date__range=(date_from, date_to)
    ).order_by('po_date', 'id')
    supplier = request.query_params.get('supplier')
    if supplier:
        purchase_orders = purchase_orders.filter(supplier_id=supplier)

    totals = {'count': purchase_orders.count(), 'total_amount': _sum(purchase_orders, 'total_amount')}
    return _report_response(request, 'Purchase Report', 'purchase_report',
                            purchase_report_table(purchase_orders, totals), date_from, date_to, totals)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def customer_ledger_report(request):
    """Customer ledger movements in a date range with debit, credit and outstanding totals"""
    date_from, date_to = get_date_range(request)
    entries = filter_ledger(request, CustomerLedger.objects.select_related('customer'), 'customer').filter(
        transaction_date__range=(date_from, date_to)
    ).order_by('transaction_date', 'id')
    stats = ledger_stats(entries)
    return _report_response(request, 'Customer Ledger Report', 'customer_ledger_report',
                            ledger_export_table(entries, stats), date_from, date_to, stats)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def gst_report(request):
    """Invoices that charged GST; subtotal is amount less GST"""
    date_from, date_to = get_date_range(request)
    invoices = SalesInvoice.objects.select_related('customer').filter(
        invoice_date__range=(date_from, date_to), gst_amount__gt=0
    ).order_by('invoice_date', 'id')
    customer = request.query_params.get('customer')
    if customer:
        invoices = invoices.filter(customer_id=customer)

    total_gst = _sum(invoices, 'gst_amount')
    total_amount = _sum(invoices, 'total_amount')
    totals = {'count': invoices.count(), 'total_subtotal': total_amount - total_gst, 'total_gst': total_gst,
              'total_amount': total_amount}
    return _report_response(request, 'GST Report', 'gst_report', gst_report_table(invoices, totals),
                            date_from, date_to, totals, landscape=True)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='reports_view')])
def stock_report(request):
    """Current stock of active products with value totals"""
    products = availability_queryset(request)
    totals = availability_totals(products)
    today = timezone.localdate()
    return _report_response(request, 'Stock Report', 'stock_report', stock_table(products, totals),
                            today, today, totals, landscape=True)
