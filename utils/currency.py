from decimal import Decimal


def format_currency(amount: Decimal | float, symbol: str = "$") -> str:
    """Format an amount as currency string, e.g. '$1,234.56'."""
    return f"{symbol}{amount:,.2f}"


def format_plain(amount: Decimal | float) -> str:
    """Amount without grouping, as carried in notification payloads."""
    return f"{amount:.2f}"
