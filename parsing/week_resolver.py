"""
Week Resolver - pick the week block a match message refers to

Strategies run in order and the first one returning a block wins:
1. match_by_map           map hint + pair
2. match_by_parsed_date   pair, closest block date to the parsed kickoff
3. match_makeup           make-up language, earliest unplayed block for the pair
4. match_by_message_time  pair, closest block date to when the message was sent
5. match_active_week      the division's soonest upcoming block

Pairs are unordered: (home, away) matches (away, home).
"""

import re
import datetime
from dataclasses import dataclass
from typing import Callable, List, Optional

from models.entities import WeekBlock
from parsing.temporal import WhenResult
from utils.timestamp import league_epoch, to_league

_MAKEUP_RE = re.compile(r"\b(?:make[\s-]?ups?|rematch|postponed|reschedul\w*)\b", re.IGNORECASE)


@dataclass
class WeekQuery:
    """Everything the strategies may look at"""
    division: str
    team_a: str
    team_b: str
    map_hint: Optional[str] = None
    text: str = ""
    when: Optional[WhenResult] = None
    message_time: Optional[datetime.datetime] = None
    reference: Optional[datetime.datetime] = None


def _pair_blocks(query: WeekQuery, weeks: List[WeekBlock]) -> List[WeekBlock]:
    return [
        b for b in weeks
        if b.division == query.division and b.has_pair(query.team_a, query.team_b)
    ]


def _closest(blocks: List[WeekBlock], epoch: int) -> Optional[WeekBlock]:
    """Smallest absolute distance to epoch; the earlier block wins ties"""
    if not blocks:
        return None
    return min(blocks, key=lambda b: (abs(league_epoch(b.date) - epoch), b.date))


def match_by_map(query: WeekQuery, weeks: List[WeekBlock]) -> Optional[WeekBlock]:
    if not query.map_hint:
        return None
    candidates = [b for b in _pair_blocks(query, weeks) if b.map.lower() == query.map_hint.lower()]
    if len(candidates) <= 1:
        return candidates[0] if candidates else None
    # Same map twice in a season: use whatever time information we have
    if query.when and query.when.epoch_seconds and not query.when.date_defaulted:
        return _closest(candidates, query.when.epoch_seconds)
    if query.message_time:
        return _closest(candidates, int(query.message_time.timestamp()))
    return candidates[0]


def match_by_parsed_date(query: WeekQuery, weeks: List[WeekBlock]) -> Optional[WeekBlock]:
    when = query.when
    if not when or when.is_tbd or when.date_defaulted or when.epoch_seconds is None:
        return None
    return _closest(_pair_blocks(query, weeks), when.epoch_seconds)


def match_makeup(query: WeekQuery, weeks: List[WeekBlock]) -> Optional[WeekBlock]:
    if not _MAKEUP_RE.search(query.text or ""):
        return None
    unplayed = [b for b in _pair_blocks(query, weeks) if b.pair_unplayed(query.team_a, query.team_b)]
    return min(unplayed, key=lambda b: b.date) if unplayed else None


def match_by_message_time(query: WeekQuery, weeks: List[WeekBlock]) -> Optional[WeekBlock]:
    if not query.message_time:
        return None
    return _closest(_pair_blocks(query, weeks), int(query.message_time.timestamp()))


def match_active_week(query: WeekQuery, weeks: List[WeekBlock]) -> Optional[WeekBlock]:
    blocks = sorted((b for b in weeks if b.division == query.division), key=lambda b: b.date)
    if not blocks:
        return None
    today = to_league(query.reference or query.message_time).date()
    for block in blocks:
        if block.date >= today:
            return block
    return blocks[-1]


Strategy = Callable[[WeekQuery, List[WeekBlock]], Optional[WeekBlock]]

STRATEGIES: tuple = (
    match_by_map,
    match_by_parsed_date,
    match_makeup,
    match_by_message_time,
    match_active_week,
)


def resolve_week(query: WeekQuery, weeks: List[WeekBlock],
                 strategies: tuple = STRATEGIES) -> Optional[WeekBlock]:
    """First block any strategy returns, or None"""
    for strategy in strategies:
        block = strategy(query, weeks)
        if block is not None:
            return block
    return None
