"""
Team Resolver - map a free-text side of a match onto a canonical roster team

Scoring per candidate name/alias:
    exact match            -> 10
    containment            -> min(8, length of the shorter string)
    otherwise              -> number of overlapping tokens
A team needs a score of at least 2 to be accepted.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from rapidfuzz import fuzz, process

from models.entities import Team

EXACT_SCORE = 10
CONTAINMENT_CAP = 8
MIN_ACCEPT_SCORE = 2

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_name(text: str) -> str:
    """Lowercase alphanumerics separated by single spaces"""
    return _NON_ALNUM_RE.sub(" ", (text or "").lower()).strip()


def alias_key(text: str) -> str:
    """Alias table key: case, whitespace and punctuation removed"""
    return _NON_ALNUM_RE.sub("", (text or "").lower())


def build_alias_map(alias_rows: Iterable[Tuple[str, str]], teams: Iterable[Team]) -> Dict[str, str]:
    """Alias key -> canonical team name

    Canonical names and team aliases are included so a bare team name always
    resolves through the table too.
    """
    alias_map = {}
    for team in teams:
        alias_map.setdefault(alias_key(team.name), team.name)
        for alias in team.aliases:
            alias_map.setdefault(alias_key(alias), team.name)
    for alias, canonical in alias_rows:
        key = alias_key(alias)
        if key and canonical:
            alias_map[key] = canonical.strip().upper()
    return alias_map


def resolve_alias(text: str, alias_map: Dict[str, str]) -> Optional[str]:
    """Resolve a side through the alias table, whole string first then word by word

    Captains sometimes prefix an emoji-derived word ("fire falcons"), so the
    suffixes left after dropping leading words are tried before single words.
    """
    normalized = normalize_name(text)
    if not normalized:
        return None
    whole = alias_map.get(alias_key(normalized))
    if whole:
        return whole

    words = normalized.split()
    for start in range(1, len(words)):
        suffix = alias_map.get(alias_key(" ".join(words[start:])))
        if suffix:
            return suffix
    for word in words:
        single = alias_map.get(alias_key(word))
        if single:
            return single
    return None


def _tokens_overlap(a: str, b: str) -> bool:
    if a == b:
        return True
    if len(a) < 2 or len(b) < 2:
        return False
    return a.startswith(b) or b.startswith(a)


def score_candidate(query: str, candidate: str) -> int:
    """Score one normalized query against one normalized candidate name"""
    if not query or not candidate:
        return 0
    if query == candidate:
        return EXACT_SCORE
    if query in candidate or candidate in query:
        return min(CONTAINMENT_CAP, min(len(query), len(candidate)))
    candidate_tokens = candidate.split()
    return sum(
        1 for token in query.split()
        if any(_tokens_overlap(token, other) for other in candidate_tokens)
    )


def score_team(query: str, team: Team) -> int:
    best = score_candidate(query, normalize_name(team.name))
    for alias in team.aliases:
        best = max(best, score_candidate(query, normalize_name(alias)))
    return best


def resolve_team(side: str, teams: List[Team], alias_map: Dict[str, str],
                 division: Optional[str] = None) -> Optional[Team]:
    """Best-scoring team for a side string, or None below the accept threshold

    Args:
        side: One side of the match as typed by the captain
        teams: Full roster
        alias_map: Alias key -> canonical name
        division: When given, only teams of this division are scored
    """
    resolved = resolve_alias(side, alias_map)
    query = normalize_name(resolved or side)
    if not query:
        return None

    best_team = None
    best_score = 0
    for team in teams:
        if division and team.division != division:
            continue
        score = score_team(query, team)
        if score > best_score:
            best_team, best_score = team, score

    if best_score < MIN_ACCEPT_SCORE:
        return None
    return best_team


def suggest_teams(side: str, teams: List[Team], division: Optional[str] = None,
                  limit: int = 3) -> List[str]:
    """Closest roster names for an unresolved side (warning text only)"""
    names = [t.name for t in teams if not division or t.division == division]
    if not names or not side:
        return []
    results = process.extract(side.upper(), names, scorer=fuzz.WRatio, limit=limit)
    return [name for name, score, _ in results if score > 50]
