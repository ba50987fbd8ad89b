"""Document number allocation from the company settings counters"""
import logging

from django.db import transaction

from .models import CompanySettings

logger = logging.getLogger(__name__)


def format_document_number(prefix, number):
    return f"{prefix}-{int(number):04d}"


def _kind_fields(kind):
    try:
        return CompanySettings.DOCUMENT_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown document kind: {kind}")


def peek_document_number(kind):
    """Return the number the next document of this kind will receive"""
    prefix_field, number_field = _kind_fields(kind)
    settings_obj = CompanySettings.load()
    return format_document_number(getattr(settings_obj, prefix_field), getattr(settings_obj, number_field) or 1)


def next_document_number(kind):
    """
    Allocate the next document number for ``kind`` and advance the counter.

    The settings row is locked for the duration of the surrounding transaction
    so concurrent requests never receive the same number.
    """
    prefix_field, number_field = _kind_fields(kind)
    with transaction.atomic():
        CompanySettings.load()
        settings_obj = CompanySettings.objects.select_for_update().get(pk=CompanySettings.SINGLETON_ID)
        number = getattr(settings_obj, number_field) or 1
        prefix = getattr(settings_obj, prefix_field)
        setattr(settings_obj, number_field, number + 1)
        settings_obj.save(update_fields=[number_field, 'updated_at'])

    document_number = format_document_number(prefix, number)
    logger.debug(f"Allocated {kind} number {document_number}")
    return document_number
