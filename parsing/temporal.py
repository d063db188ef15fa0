"""
Temporal Resolver - turn flexible date/time text into a kickoff instant

Resolution order (first hit wins):
1. TBD keywords ("TBD", "postponed", "next week")
2. Numeric date       9/28, 9/28/25, 9/28/2025
3. Textual date       Sept 28th, September 28, 2025
4. Weekday            sunday, sun 28th, today/tonight, tomorrow
5. Default            the division's upcoming week date

Hours need am/pm or an Eastern abbreviation so "sunday 28" is never read
as 28 o'clock. Missing time means 9:00 PM; missing meridiem means PM.
"""

import re
import datetime
from dataclasses import dataclass
from typing import Optional, Tuple

from config import DEFAULT_KICKOFF_HOUR, DEFAULT_KICKOFF_MINUTE
from utils.formatting import format_kickoff
from utils.timestamp import league_instant, to_league

TBD_TEXT = "TBD"
YEAR_ROLLOVER_DAYS = 180

_TBD_RE = re.compile(r"\b(?:tbd|postponed|next\s+week|to\s+be\s+determined)\b", re.IGNORECASE)
_NUMERIC_DATE_RE = re.compile(r"(?<![\d/:])(\d{1,2})/(\d{1,2})(?:/(\d{2}|\d{4}))?(?![\d/])")

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_MONTH_DATE_RE = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?|"
    r"sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?\s+"
    r"(\d{1,2})(?:st|nd|rd|th)?\b(?:,?\s*(\d{4})\b)?",
    re.IGNORECASE
)

WEEKDAYS = {
    "mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6,
}
_WEEKDAY_RE = re.compile(
    r"\b(mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?|"
    r"fri(?:day)?|sat(?:urday)?|sun(?:day)?)\b"
    r"(?:,?\s+(?:the\s+)?(\d{1,2})(st|nd|rd|th)?\b(?!\s*(?::|a\.?m|p\.?m|[ap]\b|et\b|est\b|edt\b|eastern)))?",
    re.IGNORECASE
)
_RELATIVE_DAY_RE = re.compile(r"\b(today|tonight|tomorrow|tmrw|tmr)\b", re.IGNORECASE)

_TIME_RE = re.compile(
    r"(?<![\d/:.])(\d{1,2})(?:[:.]?(\d{2}))?\s*"
    r"(a\.?m\.?|p\.?m\.?|a|p)?(?![a-z0-9])\s*"
    r"(et|est|edt|eastern)?(?![a-z0-9])",
    re.IGNORECASE
)


@dataclass
class WhenResult:
    """Resolved kickoff; TBD results carry no instant"""
    when_text: str
    epoch_seconds: Optional[int] = None
    date: Optional[datetime.date] = None
    hour: int = DEFAULT_KICKOFF_HOUR
    minute: int = DEFAULT_KICKOFF_MINUTE
    time_defaulted: bool = False
    date_defaulted: bool = False
    is_tbd: bool = False

    @classmethod
    def tbd(cls) -> "WhenResult":
        return cls(when_text=TBD_TEXT, is_tbd=True)

    @classmethod
    def build(cls, day: datetime.date, hour: int, minute: int,
              time_defaulted: bool = False, date_defaulted: bool = False) -> "WhenResult":
        moment = league_instant(day, hour, minute)
        return cls(
            when_text=format_kickoff(moment),
            epoch_seconds=int(moment.timestamp()),
            date=day,
            hour=hour,
            minute=minute,
            time_defaulted=time_defaulted,
            date_defaulted=date_defaulted,
        )

    def rebase(self, day: datetime.date) -> "WhenResult":
        """Same wall-clock time on another date (used when the date was only a default)"""
        if self.is_tbd or self.date == day:
            return self
        return WhenResult.build(day, self.hour, self.minute,
                                time_defaulted=self.time_defaulted,
                                date_defaulted=self.date_defaulted)


# ============================================================================
# DATE PARSING
# ============================================================================

def _safe_date(year: int, month: int, day: int) -> Optional[datetime.date]:
    try:
        return datetime.date(year, month, day)
    except ValueError:
        return None


def _infer_year(month: int, day: int, reference: datetime.date) -> Optional[datetime.date]:
    """Year putting the date within YEAR_ROLLOVER_DAYS of the reference"""
    candidate = _safe_date(reference.year, month, day)
    if candidate is None:
        return None
    if (reference - candidate).days > YEAR_ROLLOVER_DAYS:
        return _safe_date(reference.year + 1, month, day)
    if (candidate - reference).days > YEAR_ROLLOVER_DAYS:
        return _safe_date(reference.year - 1, month, day)
    return candidate


def _normalize_year(raw: str) -> int:
    year = int(raw)
    return year + 2000 if year < 100 else year


def parse_numeric_date(text: str, reference: datetime.date) -> Optional[datetime.date]:
    for match in _NUMERIC_DATE_RE.finditer(text):
        month, day = int(match.group(1)), int(match.group(2))
        if not (1 <= month <= 12 and 1 <= day <= 31):
            continue
        if match.group(3):
            found = _safe_date(_normalize_year(match.group(3)), month, day)
        else:
            found = _infer_year(month, day, reference)
        if found:
            return found
    return None


def parse_month_date(text: str, reference: datetime.date) -> Optional[datetime.date]:
    for match in _MONTH_DATE_RE.finditer(text):
        month = MONTHS[match.group(1)[:3].lower()]
        day = int(match.group(2))
        if match.group(3):
            found = _safe_date(int(match.group(3)), month, day)
        else:
            found = _infer_year(month, day, reference)
        if found:
            return found
    return None


def next_weekday(reference: datetime.date, weekday: int) -> datetime.date:
    """Next occurrence of weekday on/after the reference date"""
    return reference + datetime.timedelta(days=(weekday - reference.weekday()) % 7)


def _weekday_with_day(reference: datetime.date, weekday: int, day: int) -> Optional[datetime.date]:
    """The weekday/day-of-month combination in the current or next month"""
    month_starts = [(reference.year, reference.month)]
    if reference.month == 12:
        month_starts.append((reference.year + 1, 1))
    else:
        month_starts.append((reference.year, reference.month + 1))
    for year, month in month_starts:
        candidate = _safe_date(year, month, day)
        if candidate and candidate >= reference and candidate.weekday() == weekday:
            return candidate
    return None


def parse_weekday_date(text: str, reference: datetime.date) -> Optional[datetime.date]:
    match = _WEEKDAY_RE.search(text)
    if match:
        weekday = WEEKDAYS[match.group(1)[:3].lower()]
        if match.group(2):
            day = int(match.group(2))
            if 1 <= day <= 31:
                combined = _weekday_with_day(reference, weekday, day)
                if combined:
                    return combined
        return next_weekday(reference, weekday)

    relative = _RELATIVE_DAY_RE.search(text)
    if relative:
        word = relative.group(1).lower()
        if word in ("today", "tonight"):
            return reference
        return reference + datetime.timedelta(days=1)
    return None


# ============================================================================
# TIME PARSING
# ============================================================================

def parse_time(text: str) -> Optional[Tuple[int, int]]:
    """(hour, minute) in 24h from the first time token carrying am/pm or ET

    Examples:
        "9pm"      -> (21, 0)
        "930 est"  -> (21, 30)
        "10:15am"  -> (10, 15)
        "20:00 ET" -> (20, 0)
    """
    for match in _TIME_RE.finditer(text):
        meridiem = (match.group(3) or "").replace(".", "").lower()
        zone = match.group(4)
        if not meridiem and not zone:
            continue
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if minute > 59:
            continue
        if meridiem:
            if not 1 <= hour <= 12:
                continue
            hour = hour % 12 + (12 if meridiem.startswith("p") else 0)
        elif hour > 23:
            continue
        elif 1 <= hour <= 12:
            # No meridiem: evening league, assume PM
            hour = hour % 12 + 12
        return hour, minute
    return None


# ============================================================================
# RESOLVER
# ============================================================================

def resolve_when(text: str, reference: Optional[datetime.datetime] = None,
                 default_date: Optional[datetime.date] = None) -> WhenResult:
    """Resolve the kickoff mentioned in `text`

    Args:
        text: Cleaned message text
        reference: Instant the message was written (defaults to now); relative
            expressions like weekdays are anchored here
        default_date: Upcoming week date used when no date is mentioned

    Returns:
        WhenResult with epoch_seconds and "h:mm AM/PM ET M/D" text, or a TBD result
    """
    text = text or ""
    if _TBD_RE.search(text):
        return WhenResult.tbd()

    ref_date = to_league(reference).date()
    day = (
        parse_numeric_date(text, ref_date)
        or parse_month_date(text, ref_date)
        or parse_weekday_date(text, ref_date)
    )
    date_defaulted = day is None
    if day is None:
        day = default_date or ref_date

    parsed_time = parse_time(text)
    if parsed_time:
        hour, minute = parsed_time
    else:
        hour, minute = DEFAULT_KICKOFF_HOUR, DEFAULT_KICKOFF_MINUTE

    return WhenResult.build(day, hour, minute,
                            time_defaulted=parsed_time is None,
                            date_defaulted=date_defaulted)
