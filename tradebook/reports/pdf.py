"""
PDF rendering with reportlab.

Every page gets the company header (name, address and contacts, NTN/STR,
optional logo) and a "page x of y" footer; tables repeat their header row
when they break across pages.
"""
import io
import logging
import os
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape as landscape_size
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from tradebook.core.model_cache import get_company_profile
from .formatting import format_date, format_money, format_quantity, today_label

logger = logging.getLogger(__name__)

ACCENT = HexColor('#2563EB')
GREY = HexColor('#6B7280')
LIGHT_GREY = HexColor('#E5E7EB')
ROW_ALT = HexColor('#F3F4F6')
TAX_RED = HexColor('#DC3545')
TAXABLE_BLUE = HexColor('#007BFF')

MARGIN = 14 * mm
HEADER_HEIGHT = 34 * mm
FOOTER_HEIGHT = 16 * mm

NUMERIC_KINDS = ('money', 'number', 'quantity')

styles = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle('DocTitle', parent=styles['Title'], fontSize=14, leading=18, spaceAfter=2 * mm)
SUBTITLE_STYLE = ParagraphStyle('DocSubtitle', parent=styles['Normal'], fontSize=9, textColor=GREY, alignment=TA_CENTER)
CELL_STYLE = ParagraphStyle('Cell', parent=styles['Normal'], fontSize=8, leading=10)
CELL_RIGHT_STYLE = ParagraphStyle('CellRight', parent=CELL_STYLE, alignment=TA_RIGHT)
HEADER_CELL_STYLE = ParagraphStyle('HeaderCell', parent=CELL_STYLE, textColor=colors.white)
LABEL_STYLE = ParagraphStyle('Label', parent=styles['Normal'], fontSize=8, leading=10, textColor=GREY)
BLOCK_STYLE = ParagraphStyle('Block', parent=styles['Normal'], fontSize=9, leading=12, alignment=TA_LEFT)
BLOCK_RIGHT_STYLE = ParagraphStyle('BlockRight', parent=BLOCK_STYLE, alignment=TA_RIGHT)


class NumberedCanvas(canvas.Canvas):
    """Canvas that writes 'page x of y' once the total page count is known"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(total_pages)
            super().showPage()
        super().save()

    def draw_page_number(self, total_pages):
        width = self._pagesize[0]
        self.saveState()
        self.setFont('Helvetica', 8)
        self.setFillColor(GREY)
        self.drawCentredString(width / 2, 10 * mm, f"page {self._pageNumber} of {total_pages}")
        self.restoreState()


def company_contact_line(profile):
    """'Address. Contact # 0300... . 0321...' as printed under the company name"""
    parts = [
        profile.get('company_address'),
        f"Contact # {profile['contact_detail_1']}" if profile.get('contact_detail_1') else None,
        profile.get('contact_detail_2'),
    ]
    return '. '.join(part for part in parts if part)


def company_tax_line(profile):
    parts = [
        f"NTN # {profile['ntn']}" if profile.get('ntn') else None,
        f"STR # {profile['str_no']}" if profile.get('str_no') else None,
    ]
    return '   '.join(part for part in parts if part)


def draw_company_header(canv, doc, profile):
    """Company block at the top of every page"""
    width, height = doc.pagesize
    top = height - 10 * mm
    canv.saveState()

    logo_path = profile.get('logo_path')
    if logo_path and os.path.exists(logo_path):
        try:
            canv.drawImage(ImageReader(logo_path), MARGIN, top - 20 * mm, width=22 * mm, height=20 * mm,
                           preserveAspectRatio=True, mask='auto')
        except (OSError, ValueError) as e:
            logger.warning(f"Could not draw company logo {logo_path}: {e}")

    canv.setFont('Helvetica-Bold', 18)
    canv.setFillColor(colors.black)
    canv.drawCentredString(width / 2, top - 7 * mm, profile.get('company_name') or 'COMPANY NAME')

    canv.setFont('Helvetica', 9)
    canv.setFillColor(HexColor('#505050'))
    contact = company_contact_line(profile)
    if contact:
        canv.drawCentredString(width / 2, top - 13 * mm, contact)
    tax = company_tax_line(profile)
    if tax:
        canv.drawCentredString(width / 2, top - 18 * mm, tax)

    canv.setStrokeColor(LIGHT_GREY)
    canv.setLineWidth(0.8)
    canv.line(MARGIN, top - 22 * mm, width - MARGIN, top - 22 * mm)
    canv.restoreState()


def _build(story, pagesize):
    """Render a story with the company header on every page"""
    profile = get_company_profile()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=HEADER_HEIGHT,
        bottomMargin=FOOTER_HEIGHT,
        title=profile.get('company_name') or 'Document',
    )

    def on_page(canv, page_doc):
        draw_company_header(canv, page_doc, profile)

    doc.build(story, onFirstPage=on_page, onLaterPages=on_page, canvasmaker=NumberedCanvas)
    return buffer.getvalue()


def format_cell(value, kind):
    """Render a raw value for a PDF table cell"""
    if value is None or value == '':
        return '-'
    if kind == 'money':
        return format_money(value)
    if kind == 'quantity':
        return format_quantity(value)
    if kind == 'date':
        return format_date(value)
    return str(value)


def _column_widths(columns, available):
    total = sum(column.width for column in columns) or 1
    return [available * column.width / total for column in columns]


def data_table(columns, rows, available_width):
    """Striped table with a repeated header row; numeric columns right aligned"""
    header = [Paragraph(f"<b>{escape(column.header)}</b>", HEADER_CELL_STYLE) for column in columns]
    body = []
    for row in rows:
        cells = []
        for column, value in zip(columns, row):
            text = escape(format_cell(value, column.kind))
            cells.append(Paragraph(text, CELL_RIGHT_STYLE if column.kind in NUMERIC_KINDS else CELL_STYLE))
        body.append(cells)

    table = Table([header] + body, colWidths=_column_widths(columns, available_width), repeatRows=1)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), ACCENT),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.25, LIGHT_GREY),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]
    for index in range(1, len(body) + 1):
        if index % 2 == 0:
            style.append(('BACKGROUND', (0, index), (-1, index), ROW_ALT))
    table.setStyle(TableStyle(style))
    return table


def totals_table(totals, available_width):
    """Right-aligned label/value pairs printed under a report table"""
    data = [[Paragraph(escape(label), CELL_RIGHT_STYLE), Paragraph(f"<b>{escape(str(value))}</b>", CELL_RIGHT_STYLE)]
            for label, value in totals]
    table = Table(data, colWidths=[available_width * 0.75, available_width * 0.25])
    table.setStyle(TableStyle([
        ('LINEABOVE', (0, 0), (-1, 0), 0.8, GREY),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    return table


def build_report_pdf(title, columns, rows, totals=None, period=None, landscape=False):
    """Tabular report: title, period, generated date, table and totals footer"""
    pagesize = landscape_size(A4) if landscape else A4
    available_width = pagesize[0] - 2 * MARGIN

    story = [Paragraph(escape(title), TITLE_STYLE)]
    if period:
        story.append(Paragraph(escape(period), SUBTITLE_STYLE))
    story.append(Paragraph(f"Generated: {today_label()}", SUBTITLE_STYLE))
    story.append(Spacer(1, 5 * mm))
    story.append(data_table(columns, rows, available_width))
    if totals:
        story.append(Spacer(1, 4 * mm))
        story.append(KeepTogether(totals_table(totals, available_width)))
    return _build(story, pagesize)


def build_document_pdf(title, party_label, party_lines, info_lines, columns, rows, summary=None,
                       amount_in_words=None, words_label='AMOUNT IN WORDS', notes=None):
    """
    Single business document (invoice, sale order, purchase order, receipt).

    ``party_lines`` and ``info_lines`` are printed side by side under the
    title; ``summary`` is a list of (label, value) pairs shown as one row of
    figures under the items, e.g. amount, taxable amount, rate and tax.
    """
    profile = get_company_profile()
    pagesize = A4
    available_width = pagesize[0] - 2 * MARGIN

    party_block = [Paragraph(f"<b>{escape(party_label)}</b>", LABEL_STYLE)]
    for index, line in enumerate(party_lines):
        text = escape(str(line))
        party_block.append(Paragraph(f"<b>{text}</b>" if index == 0 else text, BLOCK_STYLE))
    info_block = [Paragraph(escape(str(line)), BLOCK_RIGHT_STYLE) for line in info_lines]

    heading = Table([[party_block, info_block]], colWidths=[available_width * 0.55, available_width * 0.45])
    heading.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
    ]))

    story = [
        Paragraph(escape(title), TITLE_STYLE),
        Spacer(1, 2 * mm),
        heading,
        Spacer(1, 5 * mm),
        data_table(columns, rows, available_width),
        Spacer(1, 5 * mm),
    ]

    if amount_in_words:
        story.append(Paragraph(f"<b>{escape(words_label)}</b>", LABEL_STYLE))
        story.append(Paragraph(escape(amount_in_words), BLOCK_STYLE))
        story.append(Spacer(1, 4 * mm))

    if summary:
        labels = [Paragraph(f"<u>{escape(label)}</u>", ParagraphStyle('SummaryLabel', parent=LABEL_STYLE, alignment=TA_CENTER))
                  for label, _ in summary]
        values = []
        for index, (label, value) in enumerate(summary):
            color = TAX_RED if 'TAX AMOUNT' in label else TAXABLE_BLUE if 'TAXABLE' in label else colors.black
            values.append(Paragraph(f"<b>{escape(str(value))}</b>",
                                    ParagraphStyle(f'SummaryValue{index}', parent=BLOCK_STYLE, alignment=TA_CENTER, textColor=color)))
        summary_table = Table([labels, values], colWidths=[available_width / len(summary)] * len(summary))
        story.append(KeepTogether(summary_table))
        story.append(Spacer(1, 4 * mm))

    if notes:
        story.append(Paragraph("<b>Notes</b>", LABEL_STYLE))
        story.append(Paragraph(escape(notes), BLOCK_STYLE))
        story.append(Spacer(1, 4 * mm))

    signature = Table(
        [[Paragraph(f"<b>For, {escape(profile.get('company_name') or 'COMPANY')}</b>", BLOCK_RIGHT_STYLE)],
         [Spacer(1, 14 * mm)],
         [Paragraph("Authorized Authority", BLOCK_RIGHT_STYLE)]],
        colWidths=[available_width]
    )
    story.append(KeepTogether(signature))
    return _build(story, pagesize)
