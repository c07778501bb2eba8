"""
Field extractors: pull structured values out of free-text task strings.

Every function here is total. A missing pattern yields the documented
default (empty string, empty list, caller default, now + 1h), never an error.
"""
import re
from datetime import datetime, timedelta
from typing import List, Optional

### -------------------------- Patterns --------------------------------- ###

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
QUOTED_RE = re.compile(r'"([^"]+)"')
# H[:MM][am|pm], e.g. "2pm", "10:30 am", "14:00", "9"
CLOCK_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\b", re.I)

DAY_KEYWORDS = (
    ("tomorrow", timedelta(days=1)),
    ("next week", timedelta(days=7)),
    ("today", timedelta(0)),
)
DURATION_KEYWORDS = (
    (("hour", "hr"), 60),
    (("30",), 30),
    (("15",), 15),
)
DEFAULT_HOUR = 9
DEFAULT_DURATION = 30
DEFAULT_LEAD = timedelta(hours=1)

### -------------------------- Extractors ------------------------------- ###

def extract_emails(text: str) -> List[str]:
    """All email-shaped substrings, left to right."""
    return EMAIL_RE.findall(text or "")

def _hour24(m: re.Match) -> int:
    hour = int(m.group(1))
    meridiem = (m.group(3) or "").lower()
    if meridiem == "pm" and hour != 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if not 0 <= hour <= 23:
        hour = DEFAULT_HOUR
    return hour

def _clock_hour(text: str) -> Optional[int]:
    """Hour of the first clock-time match, bare numbers included. None when no digits match."""
    m = CLOCK_RE.search(text)
    return _hour24(m) if m else None

def _explicit_clock_hour(text: str) -> Optional[int]:
    """Hour of the first match carrying am/pm or ':MM'; bare numbers ("1 hour") are skipped."""
    for m in CLOCK_RE.finditer(text):
        if m.group(2) or m.group(3):
            return _hour24(m)
    return None

def extract_time(text: str, now: datetime) -> datetime:
    """
    Resolve one start time from keywords, then clock patterns.
    Inputs:
        text: raw task string.
        now: reference time (tz-aware in the service timezone).
    Returns:
        tomorrow / next week / today → now shifted by 1 / 7 / 0 days;
        else first clock time → today at that hour, minutes zeroed;
        else now + 1 hour.
        A day keyword combined with an explicit clock time ("tomorrow at 2pm",
        "today 10:30") lands on that hour of the keyword's day.
    """
    text = text or ""
    lowered = text.lower()
    for keyword, offset in DAY_KEYWORDS:
        if keyword in lowered:
            day = now + offset
            hour = _explicit_clock_hour(text)
            if hour is not None:
                return day.replace(hour=hour, minute=0, second=0, microsecond=0)
            return day
    hour = _clock_hour(text)
    if hour is not None:
        return now.replace(hour=hour, minute=0, second=0, microsecond=0)
    return now + DEFAULT_LEAD

def extract_duration(text: str, default: int = DEFAULT_DURATION) -> int:
    """Meeting length in minutes: hour/hr → 60, "30" → 30, "15" → 15, else default."""
    lowered = (text or "").lower()
    for keywords, minutes in DURATION_KEYWORDS:
        if any(k in lowered for k in keywords):
            return minutes
    return default

def _after(text: str, keyword: str) -> str:
    """Trimmed text following the first occurrence of keyword ('' if absent)."""
    if keyword not in text:
        return ""
    return text.split(keyword, 1)[1].strip()

def extract_title(text: str) -> str:
    """First double-quoted span, else what follows 'about', else ''."""
    text = text or ""
    m = QUOTED_RE.search(text)
    if m:
        return m.group(1)
    return _after(text, "about")

# Subjects follow the same rules as titles.
extract_subject = extract_title

def extract_body(text: str) -> str:
    """What follows 'saying', else what follows 'message', else ''."""
    text = text or ""
    for keyword in ("saying", "message"):
        if keyword in text:
            return _after(text, keyword)
    return ""
