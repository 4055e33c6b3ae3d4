"""
Free-text expense parsing: amount and date extraction.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from dateparser.search import search_dates

from expense_api.models.expense import Expense

AMOUNT_PATTERN = re.compile(r"\$?\d+(\.\d{2})?")


@dataclass(frozen=True)
class AmountResult:
    """Outcome of amount extraction; `found` is False when the text holds no amount."""

    found: bool
    value: float = 0.0
    span: Optional[Tuple[int, int]] = None

    @classmethod
    def not_found(cls) -> "AmountResult":
        return cls(found=False)


def extract_amount(text: str) -> AmountResult:
    match = AMOUNT_PATTERN.search(text or "")
    if not match:
        return AmountResult.not_found()
    return AmountResult(found=True, value=float(match.group(0).replace("$", "")), span=match.span())


def extract_date(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Find a date phrase ("yesterday", "on Monday", "March 3") and resolve it
    against `now`, preferring the past. Falls back to `now`.
    """
    now = _utc(now or datetime.now(timezone.utc))
    settings = {
        "PREFER_DATES_FROM": "past",
        "RELATIVE_BASE": now.replace(tzinfo=None),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    found = search_dates(text, languages=["en"], settings=settings) if text else None
    if not found:
        return now
    _, parsed = found[0]
    return parsed.replace(tzinfo=timezone.utc)


def parse_expense(text: str, categorizer, now: Optional[datetime] = None) -> Optional[Expense]:
    """Build an Expense from free text, or None when no amount can be found."""
    amount = extract_amount(text)
    if not amount.found:
        return None

    # Drop the amount before date search so "$20" is not read as the 20th
    start, end = amount.span
    date = extract_date(f"{text[:start]} {text[end:]}", now)

    return Expense(
        amount=amount.value,
        category=categorizer.categorize(text),
        description=text,
        date=date,
    )


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
