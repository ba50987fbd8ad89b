from django.db import models


class Warehouse(models.Model):
    """Warehouses where stock is received and dispatched"""
    name = models.CharField(max_length=200, unique=True)
    location = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'warehouses'
        ordering = ['name']
