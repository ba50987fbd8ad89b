"""File export responses shared by list, ledger and report endpoints"""
import logging
from collections import namedtuple

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from .excel import build_workbook
from .pdf import build_report_pdf

logger = logging.getLogger(__name__)

# width is in Excel character units; PDF tables scale the same numbers to the page
Column = namedtuple('Column', ['header', 'width', 'kind'])

EXPORT_PDF = 'pdf'
EXPORT_XLSX = 'xlsx'
EXPORT_FORMATS = (EXPORT_PDF, EXPORT_XLSX)

CONTENT_TYPES = {
    EXPORT_PDF: 'application/pdf',
    EXPORT_XLSX: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


def col(header, width, kind='text'):
    return Column(header, width, kind)


def get_export_format(request, default=EXPORT_PDF):
    """Read the ?export= query parameter"""
    export_format = (request.query_params.get('export') or default).lower()
    if export_format not in EXPORT_FORMATS:
        raise ValidationError({'export': f"Unsupported export format '{export_format}'. Use one of: {', '.join(EXPORT_FORMATS)}."})
    return export_format


def file_response(content, filename, export_format, inline=False):
    """Wrap rendered bytes in a download response"""
    response = HttpResponse(content, content_type=CONTENT_TYPES[export_format])
    disposition = 'inline' if inline else 'attachment'
    response['Content-Disposition'] = f'{disposition}; filename="{filename}.{export_format}"'
    response['Cache-Control'] = 'no-store'
    return response


def export_response(export_format, title, columns, rows, filename, totals=None, period=None,
                    sheet_name='Report', landscape=False):
    """Render a tabular export as PDF or Excel and return it as a download"""
    rows = list(rows)
    if export_format == EXPORT_XLSX:
        content = build_workbook(title, columns, rows, totals=totals, period=period, sheet_name=sheet_name)
    else:
        content = build_report_pdf(title, columns, rows, totals=totals, period=period, landscape=landscape)
    stamped_name = f"{filename}_{timezone.localdate().isoformat()}"
    logger.info(f"Exported '{title}' as {export_format} ({len(rows)} rows)")
    return file_response(content, stamped_name, export_format)
