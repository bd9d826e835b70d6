# calculon/utils/text_utils.py
import datetime
from typing import Union


def format_currency(amount: float) -> str:
    """Grouped thousands, decimals only when needed.
    Ex: 1200 -> "1,200"
    Ex: 45.5 -> "45.50"
    """
    if float(amount).is_integer():
        return f"{amount:,.0f}"
    return f"{amount:,.2f}"


def format_date(value: Union[str, None]) -> str:
    """Turns an ISO date ("2025-07-10") into "Jul 10, 2025". Other text is returned as is."""
    if not value:
        return ""
    try:
        parsed = datetime.date.fromisoformat(value[:10])
    except ValueError:
        return value
    return parsed.strftime("%b %d, %Y")


def split_amount_and_text(args) -> tuple:
    """Splits command arguments into the first token and the rest joined by spaces.
    Ex: ["200", "new", "phone"] -> ("200", "new phone")
    """
    if not args:
        return "", ""
    return args[0], " ".join(args[1:]).strip()
