"""Excel (xlsx) rendering with openpyxl"""
import io
import logging
from datetime import date, datetime
from decimal import Decimal

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from tradebook.core.model_cache import get_company_profile
from .formatting import today_label
from .pdf import company_contact_line, company_tax_line

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color='2563EB', end_color='2563EB', fill_type='solid')
HEADER_FONT = Font(bold=True, color='FFFFFF')
THIN_BORDER = Border(bottom=Side(style='thin', color='E5E7EB'))
MONEY_FORMAT = '#,##0.00'
QUANTITY_FORMAT = '#,##0.###'
DATE_FORMAT = 'DD/MM/YYYY'


def _cell_value(value, kind):
    """Native Excel value for a raw cell; numbers stay numeric so sheets can sum them"""
    if value is None or value == '':
        return '-' if kind == 'text' else None
    if kind in ('money', 'quantity', 'number'):
        if isinstance(value, (int, float, Decimal)):
            return float(value)
        return value
    if kind == 'date':
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return str(value)
    return str(value)


def build_workbook(title, columns, rows, totals=None, period=None, sheet_name='Report'):
    """
    One-sheet workbook: company header rows, title, generated line, a bold
    header row, the data rows and a totals block underneath.
    """
    profile = get_company_profile()
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name[:31]
    column_count = len(columns)

    header_rows = [
        (profile.get('company_name') or 'COMPANY NAME', Font(bold=True, size=14)),
        (company_contact_line(profile), Font(size=9, color='505050')),
        (company_tax_line(profile), Font(size=9, color='505050')),
        (title, Font(bold=True, size=12)),
    ]
    if period:
        header_rows.append((period, Font(size=9, color='6B7280')))
    header_rows.append((f"Generated: {today_label()}", Font(size=9, color='6B7280')))

    row_index = 1
    for text, font in header_rows:
        if not text:
            continue
        cell = sheet.cell(row=row_index, column=1, value=text)
        cell.font = font
        if column_count > 1:
            sheet.merge_cells(start_row=row_index, start_column=1, end_row=row_index, end_column=column_count)
        cell.alignment = Alignment(horizontal='center')
        row_index += 1

    row_index += 1
    header_row = row_index
    for col_index, column in enumerate(columns, start=1):
        cell = sheet.cell(row=header_row, column=col_index, value=column.header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        sheet.column_dimensions[get_column_letter(col_index)].width = column.width

    for row in rows:
        row_index += 1
        for col_index, (column, value) in enumerate(zip(columns, row), start=1):
            cell = sheet.cell(row=row_index, column=col_index, value=_cell_value(value, column.kind))
            cell.border = THIN_BORDER
            if column.kind == 'money':
                cell.number_format = MONEY_FORMAT
            elif column.kind == 'quantity':
                cell.number_format = QUANTITY_FORMAT
            elif column.kind == 'date':
                cell.number_format = DATE_FORMAT

    sheet.freeze_panes = sheet.cell(row=header_row + 1, column=1)

    if totals:
        row_index += 1
        label_column = max(1, column_count - 1)
        for label, value in totals:
            row_index += 1
            label_cell = sheet.cell(row=row_index, column=label_column, value=label)
            label_cell.font = Font(bold=True)
            label_cell.alignment = Alignment(horizontal='right')
            value_cell = sheet.cell(row=row_index, column=label_column + 1 if column_count > 1 else 2, value=value)
            value_cell.font = Font(bold=True)
            value_cell.alignment = Alignment(horizontal='right')

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug(f"Built workbook '{title}' with {len(rows)} rows")
    return buffer.getvalue()
