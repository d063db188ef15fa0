"""
Hint extraction: division tokens, map aliases and the two sides of a match.
"""

import re
from typing import Iterable, List, Optional, Tuple

from config import MAP_PREFIX

# ============================================================================
# DIVISION HINT
# ============================================================================

def _division_pattern(division: str) -> re.Pattern:
    name = re.escape(division)
    return re.compile(
        rf"\[\s*{name}\s*\]|(?<![a-z0-9]){name}\s*:|\b{name}\b",
        re.IGNORECASE
    )


def extract_division_hint(text: str, divisions: Iterable[str]) -> Optional[str]:
    """Earliest division token in the text (word, [X] or X: prefix)"""
    best = None
    best_pos = None
    for division in divisions:
        match = _division_pattern(division).search(text or "")
        if match and (best_pos is None or match.start() < best_pos):
            best, best_pos = division, match.start()
    return best


def strip_division_prefix(side: str, divisions: Iterable[str]) -> str:
    """Remove a leading division token ("Bronze:", "[Gold]", "Silver ") from a side"""
    names = "|".join(re.escape(d) for d in divisions)
    if not names:
        return side.strip()
    pattern = re.compile(rf"^\s*(?:\[\s*(?:{names})\s*\]|(?:{names})\b\s*:?)\s*", re.IGNORECASE)
    stripped = pattern.sub("", side, count=1).strip()
    return stripped or side.strip()


# ============================================================================
# MAP HINT
# ============================================================================

_VERSION_SUFFIX_RE = re.compile(r"[_ ]?(?:v|b|a|rc|beta)?\d+[a-z]?$")
MIN_MAP_ALIAS_LENGTH = 3


def map_variants(map_id: str, prefix: str = MAP_PREFIX) -> set:
    """All spellings a captain might use for a canonical map id

    Examples:
        "dod_anzio_b4" -> {"dod_anzio_b4", "anzio_b4", "dod anzio b4",
                           "anzio b4", "dod_anzio", "anzio", "dod anzio"}
    """
    base = (map_id or "").strip().lower()
    forms = {base}
    if prefix and base.startswith(prefix.lower()):
        forms.add(base[len(prefix):])
    forms |= {form.replace("_", " ") for form in forms}
    forms |= {_VERSION_SUFFIX_RE.sub("", form) for form in forms}
    return {form.strip(" _") for form in forms if len(form.strip(" _")) >= MIN_MAP_ALIAS_LENGTH}


def _alias_pattern(alias: str) -> re.Pattern:
    parts = [re.escape(part) for part in re.split(r"[ _]+", alias) if part]
    return re.compile(r"(?<![a-z0-9])" + r"[ _]+".join(parts) + r"(?![a-z0-9])", re.IGNORECASE)


def build_map_catalog(map_ids: Iterable[str], prefix: str = MAP_PREFIX) -> List[Tuple[str, str, re.Pattern]]:
    """Build (alias, canonical id, pattern) entries, longest alias first

    Built once per batch. An alias claimed by two maps keeps the first map.
    """
    seen = {}
    for map_id in map_ids:
        if not map_id or not map_id.strip():
            continue
        for alias in map_variants(map_id, prefix):
            seen.setdefault(alias, map_id.strip())
    ordered = sorted(seen.items(), key=lambda item: (-len(item[0]), item[0]))
    return [(alias, canonical, _alias_pattern(alias)) for alias, canonical in ordered]


def extract_map_hint(text: str, catalog) -> Optional[str]:
    """Canonical map id of the longest alias found in the text"""
    if not text:
        return None
    for _alias, canonical, pattern in catalog:
        if pattern.search(text):
            return canonical
    return None


# ============================================================================
# SIDE SPLITTER
# ============================================================================

_VS_WORD_RE = re.compile(r"\s*\b(?:vs|versus)\b\.?\s*|\s+v\.\s*", re.IGNORECASE)
_BETWEEN_RE = re.compile(r"\bbetween\s+(.+?)\s+and\s+(.+)", re.IGNORECASE)
_OTHER_DELIMITERS = [
    re.compile(r"\s*//\s*"),
    re.compile(r"\s+[-–—]\s+"),
    re.compile(r"\s*;\s*"),
]

_WEEKDAY = (r"(?:monday|mon|tuesday|tues|tue|wednesday|wed|thursday|thurs|thur|thu|"
            r"friday|fri|saturday|sat|sunday|sun)")
_MONTH = (r"(?:january|jan|february|feb|march|mar|april|apr|may|june|jun|july|jul|"
          r"august|aug|september|sept|sep|october|oct|november|nov|december|dec)")

# Scheduling info captains append after the second team
_TRAILING_FRAGMENT_RE = re.compile(
    r"(?<![a-z0-9])(?:"
    rf"{_WEEKDAY}\b"
    rf"|{_MONTH}\.?\s*\d"
    r"|\d{1,2}/\d{1,2}"
    r"|\d{1,2}(?::\d{2})?\s*(?:a\.?m\.?|p\.?m\.?)(?![a-z])"
    r"|\d{1,4}\s*(?:et|est|edt|eastern)\b"
    r"|(?:et|est|edt)\b"
    r"|tbd\b|postponed\b|next\s+week\b|tonight\b|today\b|tomorrow\b"
    r"|week\s*\d+\b|wk\s*\d+\b"
    r"|@|at\s+\d"
    r"|default\b|usual\b|normal\b|regular\b|same\s+time\b|standard\s+time\b"
    r"|make[\s-]?ups?\b|rematch\b|reschedul\w*"
    r")",
    re.IGNORECASE
)
_TRAILING_FILLER_RE = re.compile(r"(?:[\s,.:!?()\-]|\b(?:on|at|for|this|the|is|@)\b)+$", re.IGNORECASE)


def trim_trailing_schedule(side: str) -> str:
    """Cut date/time fragments and filler words off the end of a side

    A fragment at the very start belongs to the team name ("Sun Devils").
    """
    for match in _TRAILING_FRAGMENT_RE.finditer(side):
        if match.start() > 0 and _TRAILING_FILLER_RE.sub("", side[:match.start()]).strip():
            side = side[:match.start()]
            break
    return _TRAILING_FILLER_RE.sub("", side).strip()


def _split_once(text: str) -> Optional[Tuple[str, str]]:
    match = _VS_WORD_RE.search(text)
    if match:
        return text[:match.start()], text[match.end():]
    between = _BETWEEN_RE.search(text)
    if between:
        return between.group(1), between.group(2)
    for pattern in _OTHER_DELIMITERS:
        match = pattern.search(text)
        if match:
            return text[:match.start()], text[match.end():]
    return None


def split_sides(text: str, divisions: Iterable[str]) -> Optional[Tuple[str, str]]:
    """Split a match line into its two team sides

    Returns None when no delimiter is present or either side is empty.

    Examples:
        "Bronze: Falcons vs Wolves 9/28 9pm" -> ("Falcons", "Wolves")
        "between Falcons and Wolves sunday"  -> ("Falcons", "Wolves")
    """
    divisions = list(divisions)
    parts = _split_once(text or "")
    if not parts:
        return None
    side_a, side_b = parts
    side_a = _TRAILING_FILLER_RE.sub("", strip_division_prefix(side_a, divisions)).strip()
    side_b = trim_trailing_schedule(strip_division_prefix(side_b, divisions))
    if not side_a or not side_b:
        return None
    return side_a, side_b
