"""Interpret short informal date expressions relative to a reference date.

Every matcher in the battery is run on every input, and the results are
only combined afterwards: an expression must be claimed by exactly one
matcher, so "t" (Tuesday or Thursday?) is reported as ambiguous rather than
resolved by whichever matcher happens to come first.

Supported expressions:
    yesterday, today, tomorrow     optionally followed by "week" (+7 days)
    mon, tu, w, thursday, ...      next occurrence strictly after today
    <weekday> week                 that occurrence plus 7 days
    <weekday> last                 latest occurrence strictly before today
    3 mar, mar 3rd, 21st june      must fall after today unless a year is given
    3 mar 2031                     explicit year
    epoch                          1970-01-01
    et, eot, end                   far-future sentinel
    3d, 2w                         N days or N weeks from today
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from loguru import logger

from outline_tools.config import END_OF_TIME_DATE, EPOCH_DATE, NOON
from outline_tools.models.node import (
    DateEntry,
    DateError,
    DateErrorKind,
    DateInterpretation,
    DateRange,
    format_date_label,
)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
_MIN_MONTH_PREFIX = 3

_RELATIVE_OFFSETS = {"yesterday": -1, "today": 0, "tomorrow": 1}
_RELATIVE_RE = re.compile(r"^(yesterday|today|tomorrow)(?: (week))?$")
_WEEKDAY_RE = re.compile(r"^([a-z]+)(?: (week|last))?$")
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})(st|nd|rd|th)? ([a-z]+),?(?: (\d{4}))?$")
_MONTH_FIRST_RE = re.compile(r"^([a-z]+) (\d{1,2})(st|nd|rd|th)?,?(?: (\d{4}))?$")
_OFFSET_RE = re.compile(r"^(\d+)([dw])$")


@dataclass(frozen=True)
class Match:
    """What one matcher made of the input; both fields None means no match."""

    interpretation: DateInterpretation | None = None
    error: DateError | None = None


NO_MATCH = Match()

Matcher = Callable[[str, date], Match]


def today_at_noon(now: datetime | None = None) -> datetime:
    """Return ``now`` (default: the current local time) moved to 12:00."""
    current = now or datetime.now()
    return datetime.combine(current.date(), NOON)


def _as_date(reference: date | datetime) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def describe_offset(day: date, reference: date) -> str:
    """Describe ``day`` relative to ``reference``, e.g. "Tuesday, 3 days away"."""
    delta = (day - reference).days
    if delta == 0:
        relative = "today"
    elif delta == 1:
        relative = "tomorrow"
    elif delta == -1:
        relative = "yesterday"
    elif delta > 0:
        relative = f"{delta} days away"
    else:
        relative = f"{-delta} days ago"
    return f"{WEEKDAYS[day.weekday()].capitalize()}, {relative}"


def _found(day: date, reference: date, *, prefix: str = "") -> Match:
    description = describe_offset(day, reference)
    if prefix:
        description = f"{prefix}: {format_date_label(day)}"
    return Match(
        interpretation=DateInterpretation(
            entry=DateEntry.from_date(day),
            when=datetime.combine(day, NOON),
            description=description,
        )
    )


def _offset(reference: date, days: int) -> date | None:
    try:
        return reference + timedelta(days=days)
    except OverflowError:
        return None


def _out_of_range(text: str) -> Match:
    return Match(error=DateError(DateErrorKind.INVALID_DATE, f"Date out of range: {text!r}"))


# --- Matchers ---


def match_relative(text: str, reference: date) -> Match:
    m = _RELATIVE_RE.match(text)
    if not m:
        return NO_MATCH
    days = _RELATIVE_OFFSETS[m.group(1)] + (7 if m.group(2) else 0)
    target = _offset(reference, days)
    if target is None:
        return _out_of_range(text)
    return _found(target, reference)


def make_weekday_matcher(weekday: int) -> Matcher:
    """Matcher for one weekday (0 = Monday), accepting any prefix of its name."""
    full_name = WEEKDAYS[weekday]

    def match_weekday(text: str, reference: date) -> Match:
        m = _WEEKDAY_RE.match(text)
        if not m or not full_name.startswith(m.group(1)):
            return NO_MATCH
        modifier = m.group(2)
        if modifier == "last":
            days = -((reference.weekday() - weekday) % 7 or 7)
        else:
            # A bare weekday never means today.
            days = (weekday - reference.weekday()) % 7 or 7
            if modifier == "week":
                days += 7
        target = _offset(reference, days)
        if target is None:
            return _out_of_range(text)
        return _found(target, reference)

    match_weekday.__name__ = f"match_{full_name}"
    return match_weekday


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _is_month_word(word: str, month: int) -> bool:
    return len(word) >= _MIN_MONTH_PREFIX and MONTHS[month - 1].startswith(word)


def make_month_day_matcher(month: int) -> Matcher:
    """Matcher for "<day> <month>" and "<month> <day>" within one month (1-12)."""
    full_name = MONTHS[month - 1]

    def match_month_day(text: str, reference: date) -> Match:
        m = _DAY_FIRST_RE.match(text)
        if m:
            day_text, suffix, word, year_text = m.groups()
        else:
            m = _MONTH_FIRST_RE.match(text)
            if not m:
                return NO_MATCH
            word, day_text, suffix, year_text = m.groups()
        if not _is_month_word(word, month):
            return NO_MATCH
        day = int(day_text)
        if suffix and suffix != ordinal_suffix(day):
            return NO_MATCH

        year = int(year_text) if year_text else reference.year
        try:
            candidate = date(year, month, day)
        except ValueError:
            message = f"{full_name.capitalize()} {day} is not a valid date in {year}"
            return Match(error=DateError(DateErrorKind.INVALID_DATE, message))

        if year_text is None and candidate <= reference:
            message = (
                f"{format_date_label(candidate)} is not after {format_date_label(reference)}; "
                f"add the year to pick a date in the past or next year"
            )
            return Match(error=DateError(DateErrorKind.PAST_DATE_WITHOUT_YEAR, message))
        return _found(candidate, reference)

    match_month_day.__name__ = f"match_{full_name}"
    return match_month_day


def match_epoch(text: str, reference: date) -> Match:
    if text != "epoch":
        return NO_MATCH
    return _found(EPOCH_DATE, reference, prefix="epoch")


def make_end_of_time_matcher(end_of_time: date) -> Matcher:
    def match_end_of_time(text: str, reference: date) -> Match:
        if text not in ("et", "eot", "end"):
            return NO_MATCH
        return _found(end_of_time, reference, prefix="end of time")

    return match_end_of_time


def match_offset(text: str, reference: date) -> Match:
    m = _OFFSET_RE.match(text)
    if not m:
        return NO_MATCH
    count = int(m.group(1))
    days = count * 7 if m.group(2) == "w" else count
    target = _offset(reference, days)
    if target is None:
        return _out_of_range(text)
    return _found(target, reference)


def build_matchers(end_of_time: date = END_OF_TIME_DATE) -> tuple[Matcher, ...]:
    """The full, ordered matcher battery."""
    return (
        match_relative,
        *(make_weekday_matcher(i) for i in range(7)),
        *(make_month_day_matcher(m) for m in range(1, 13)),
        match_epoch,
        make_end_of_time_matcher(end_of_time),
        match_offset,
    )


def interpret(
    text: str,
    reference: date | datetime,
    *,
    end_of_time: date = END_OF_TIME_DATE,
) -> DateInterpretation | DateError:
    """Turn ``text`` into exactly one date relative to ``reference``.

    Args:
        text: The expression, e.g. "tue week" or "3 mar".
        reference: The date (or datetime; only its date is used) that
            relative expressions are measured from.
        end_of_time: Date used for the "et"/"eot"/"end" sentinel.

    Returns:
        The interpretation, or a DateError when the expression is not
        recognized, is ambiguous, or names an invalid or past date.
    """
    normalized = " ".join(text.lower().split())
    ref = _as_date(reference)
    if not normalized:
        return DateError(DateErrorKind.NOT_RECOGNIZED, "No date given")

    results = [matcher(normalized, ref) for matcher in build_matchers(end_of_time)]

    errors = [r.error for r in results if r.error is not None]
    if errors:
        logger.debug("Date {!r}: {} matcher error(s), first: {}", text, len(errors), errors[0])
        return errors[0]

    found = [r.interpretation for r in results if r.interpretation is not None]
    if not found:
        return DateError(DateErrorKind.NOT_RECOGNIZED, f"Unrecognized date: {text!r}")
    if len(found) > 1:
        candidates = "; ".join(i.description for i in found)
        return DateError(
            DateErrorKind.AMBIGUOUS,
            f"Ambiguous date {text!r}, could be: {candidates}",
        )

    logger.debug("Date {!r} -> {} ({})", text, found[0].entry.iso, found[0].description)
    return found[0]


def date_range(
    text: str,
    reference: date | datetime,
    *,
    end_of_time: date = END_OF_TIME_DATE,
) -> DateRange | DateError:
    """Interpret "a", "a-", "-b" or "a-b" as a range of dates.

    A bare "a" is the single day a. Each side goes through ``interpret``;
    the first side that fails decides the returned error.
    """
    stripped = text.strip()
    if stripped.count("-") > 1:
        return DateError(DateErrorKind.BAD_RANGE, f"Too many '-' in date range: {text!r}")

    if "-" in stripped:
        start_text, end_text = (part.strip() for part in stripped.split("-"))
    else:
        start_text, end_text = stripped, ""
    if not start_text and not end_text:
        return DateError(DateErrorKind.BAD_RANGE, "Date range needs a start or an end")

    start: DateInterpretation | None = None
    end: DateInterpretation | None = None
    if start_text:
        result = interpret(start_text, reference, end_of_time=end_of_time)
        if isinstance(result, DateError):
            return result
        start = result
    if end_text:
        result = interpret(end_text, reference, end_of_time=end_of_time)
        if isinstance(result, DateError):
            return result
        end = result

    if "-" not in stripped:
        return DateRange(start=start, end=start)
    if start is not None and end is not None and start.when > end.when:
        message = f"Date range starts after it ends: {start.entry.label} - {end.entry.label}"
        return DateError(DateErrorKind.BAD_RANGE, message)
    return DateRange(start=start, end=end)
