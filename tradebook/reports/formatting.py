"""Text formatting shared by PDF, Excel and WhatsApp output"""
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

ONES = ['', 'ONE', 'TWO', 'THREE', 'FOUR', 'FIVE', 'SIX', 'SEVEN', 'EIGHT', 'NINE',
        'TEN', 'ELEVEN', 'TWELVE', 'THIRTEEN', 'FOURTEEN', 'FIFTEEN', 'SIXTEEN', 'SEVENTEEN', 'EIGHTEEN', 'NINETEEN']
TENS = ['', '', 'TWENTY', 'THIRTY', 'FORTY', 'FIFTY', 'SIXTY', 'SEVENTY', 'EIGHTY', 'NINETY']
SCALES = ['', 'THOUSAND', 'MILLION', 'BILLION', 'TRILLION']


def format_money(value):
    """1234.5 -> '1,234.50'"""
    return f"{Decimal(str(value or 0)):,.2f}"


def format_quantity(value):
    """Drop trailing zeros from quantities: 10.000 -> '10', 2.500 -> '2.5'"""
    value = Decimal(str(value or 0))
    text = f"{value:,.3f}".rstrip('0').rstrip('.')
    return text or '0'


def format_date(value, separator='-'):
    """date -> 'dd-mm-yyyy' (or with another separator); '-' for empty"""
    if not value:
        return '-'
    if isinstance(value, str):
        value = datetime.strptime(value[:10], '%Y-%m-%d').date()
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(f'%d{separator}%m{separator}%Y')


def _convert_hundreds(n):
    words = []
    if n >= 100:
        words += [ONES[n // 100], 'HUNDRED']
        n %= 100
    if n >= 20:
        words.append(TENS[n // 10])
        n %= 10
    if n > 0:
        words.append(ONES[n])
    return words


def number_to_words(amount):
    """Whole-unit amount in words, e.g. 1250 -> 'ONE THOUSAND TWO HUNDRED FIFTY ONLY'"""
    remaining = int(Decimal(str(amount or 0)).quantize(Decimal('1')))
    if remaining == 0:
        return 'ZERO ONLY'
    negative = remaining < 0
    remaining = abs(remaining)

    chunks = []
    scale_index = 0
    while remaining > 0:
        chunk = remaining % 1000
        if chunk:
            words = _convert_hundreds(chunk)
            if SCALES[scale_index]:
                words.append(SCALES[scale_index])
            chunks.insert(0, ' '.join(words))
        remaining //= 1000
        scale_index += 1

    text = ' '.join(chunks) + ' ONLY'
    return f"MINUS {text}" if negative else text


def today_label():
    return format_date(timezone.localdate(), "/")
