import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from decimal import Decimal
from tradebook.core.permissions import feature_permission
from tradebook.core.utils import create_audit_log, paginated_response, parse_date
from tradebook.reports.documents import expense_table
from tradebook.reports.exports import export_response, get_export_format
from .models import ExpenseCategory, Expense
from .serializers import ExpenseCategorySerializer, ExpenseSerializer

logger = logging.getLogger(__name__)


def _filter_expenses(request, queryset):
    params = request.query_params
    category = params.get('category')
    if category == 'none':
        queryset = queryset.filter(category__isnull=True)
    elif category:
        queryset = queryset.filter(category_id=category)
    date_from = parse_date(params.get('date_from'), 'date_from')
    date_to = parse_date(params.get('date_to'), 'date_to')
    if date_from:
        queryset = queryset.filter(expense_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(expense_date__lte=date_to)
    search = params.get('search')
    if search:
        queryset = queryset.filter(Q(description__icontains=search) | Q(notes__icontains=search) | Q(category__name__icontains=search))
    return queryset


def _total_amount(queryset):
    return queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')


# Expense category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('expenses')])
def expense_category_list_create(request):
    """List all expense categories or create a new one"""
    if request.method == 'GET':
        return Response(ExpenseCategorySerializer(ExpenseCategory.objects.all(), many=True).data)
    else:
        serializer = ExpenseCategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('expenses')])
def expense_category_detail(request, pk):
    """Retrieve, update or delete an expense category"""
    category = get_object_or_404(ExpenseCategory, pk=pk)

    if request.method == 'GET':
        return Response(ExpenseCategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseCategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Expense views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, feature_permission('expenses')])
def expense_list_create(request):
    """List expenses (filtered, paginated, with total) or record a new expense"""
    if request.method == 'GET':
        queryset = _filter_expenses(request, Expense.objects.select_related('category'))
        return paginated_response(request, queryset, ExpenseSerializer, extra={'total_amount': _total_amount(queryset)})
    else:
        serializer = ExpenseSerializer(data=request.data)
        if serializer.is_valid():
            expense = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='Expense', object_id=expense.id,
                             object_name=expense.description, changes={'amount': str(expense.amount)})
            return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, feature_permission('expenses')])
def expense_detail(request, pk):
    """Retrieve, update or delete an expense"""
    expense = get_object_or_404(Expense.objects.select_related('category'), pk=pk)

    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        old_amount = expense.amount
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            if expense.amount != old_amount:
                create_audit_log(request=request, action='update', model_name='Expense', object_id=expense.id,
                                 object_name=expense.description,
                                 changes={'amount': {'old': str(old_amount), 'new': str(expense.amount)}})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        expense_id, description = expense.id, expense.description
        expense.delete()
        create_audit_log(request=request, action='delete', model_name='Expense', object_id=expense_id, object_name=description)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, feature_permission(get='expenses_view')])
def expense_export(request):
    """Expense list as Excel (default) or PDF"""
    export_format = get_export_format(request, default='xlsx')
    queryset = _filter_expenses(request, Expense.objects.select_related('category'))
    columns, rows, totals = expense_table(queryset, _total_amount(queryset))
    date_from, date_to = request.query_params.get('date_from'), request.query_params.get('date_to')
    period = f"Period: {date_from or 'start'} to {date_to or 'today'}" if date_from or date_to else None
    return export_response(export_format, 'Expenses Report', columns, rows, 'expenses', totals=totals,
                           period=period, sheet_name='Expenses')
