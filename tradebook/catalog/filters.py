import django_filters
from django.db.models import F, Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    unit = django_filters.NumberFilter(field_name='unit_id', lookup_expr='exact')
    active = django_filters.CharFilter(method='filter_active', label='Active')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'unit', 'active', 'low_stock', 'out_of_stock']

    @staticmethod
    def is_true(value):
        return str(value).lower() in ('true', '1', 'yes')

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name, category, colour or notes"""
        if not value:
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(category__name__icontains=word) |
                Q(color__icontains=word) |
                Q(notes__icontains=word)
            )
        return queryset

    def filter_active(self, queryset, name, value):
        if value in (None, ''):
            return queryset
        return queryset.filter(is_active=self.is_true(value))

    def filter_low_stock(self, queryset, name, value):
        if not self.is_true(value):
            return queryset
        return queryset.filter(current_stock__lte=F('low_stock_threshold'))

    def filter_out_of_stock(self, queryset, name, value):
        if not self.is_true(value):
            return queryset
        return queryset.filter(current_stock__lte=0)
