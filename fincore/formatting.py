"""Display helpers for Rupiah amounts and percentages."""


def format_currency(amount: float, symbol: str = "Rp") -> str:
    """Format an amount the id-ID way, without decimals.

    >>> format_currency(1500000)
    'Rp 1.500.000'
    >>> format_currency(-50000)
    '-Rp 50.000'
    """
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,.0f}".replace(",", ".")
    return f"{sign}{symbol} {digits}"


def format_percentage(percentage: float) -> str:
    return f"{percentage:.1f}%"
