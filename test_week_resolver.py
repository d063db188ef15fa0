"""Tests for the week-resolution strategies"""

import datetime

from conftest import league_time
from models.entities import MatchSlot, WeekBlock
from parsing.temporal import resolve_when
from parsing.week_resolver import (
    STRATEGIES,
    WeekQuery,
    match_active_week,
    match_by_map,
    match_by_message_time,
    match_by_parsed_date,
    match_makeup,
    resolve_week,
)


def _query(team_a="FALCONS", team_b="WOLVES", **kwargs):
    return WeekQuery(division="Bronze", team_a=team_a, team_b=team_b, **kwargs)


def test_strategy_order():
    assert [s.__name__ for s in STRATEGIES] == [
        "match_by_map",
        "match_by_parsed_date",
        "match_makeup",
        "match_by_message_time",
        "match_active_week",
    ]


def test_match_by_map(cache):
    weeks = cache.weeks_for("Bronze")
    assert match_by_map(_query(map_hint="dod_avalanche"), weeks).date == datetime.date(2025, 9, 28)
    assert match_by_map(_query(map_hint="dod_flash"), weeks) is None
    assert match_by_map(_query(), weeks) is None


def test_pairs_are_unordered(cache):
    weeks = cache.weeks_for("Bronze")
    block = match_by_map(_query("WOLVES", "FALCONS", map_hint="dod_avalanche"), weeks)
    assert block.index == 1


def test_match_by_parsed_date(cache):
    weeks = cache.weeks_for("Bronze")
    when = resolve_when("10/4 9pm", league_time(2025, 9, 24))
    block = match_by_parsed_date(_query("WOLVES", "EMOTIONAL DAMAGE", when=when), weeks)
    assert block.date == datetime.date(2025, 10, 5)


def test_parsed_date_skipped_when_defaulted_or_tbd(cache):
    weeks = cache.weeks_for("Bronze")
    defaulted = resolve_when("9pm", league_time(2025, 9, 24), default_date=datetime.date(2025, 9, 28))
    assert match_by_parsed_date(_query(when=defaulted), weeks) is None
    tbd = resolve_when("tbd", league_time(2025, 9, 24))
    assert match_by_parsed_date(_query(when=tbd), weeks) is None


def test_match_makeup_picks_earliest_unplayed(cache):
    weeks = cache.weeks_for("Bronze")
    query = _query("FALCONS", "EMOTIONAL DAMAGE", text="makeup tonight")
    assert match_makeup(query, weeks).date == datetime.date(2025, 9, 21)
    assert match_makeup(_query("FALCONS", "EMOTIONAL DAMAGE", text="tonight"), weeks) is None


def test_match_by_message_time(cache):
    weeks = cache.weeks_for("Bronze")
    query = _query(message_time=league_time(2025, 9, 27))
    assert match_by_message_time(query, weeks).date == datetime.date(2025, 9, 28)


def test_match_active_week(cache):
    weeks = cache.weeks_for("Bronze")
    assert match_active_week(_query(reference=league_time(2025, 9, 24)), weeks).index == 1
    # Season over: last block
    assert match_active_week(_query(reference=league_time(2025, 12, 1)), weeks).index == 2


def _twice_on_same_pair():
    def block(index, day, map_name):
        return WeekBlock("Bronze", index, map_name, day, rows=[MatchSlot(3 + index * 10, "FALCONS", "WOLVES")])
    return [
        block(0, datetime.date(2025, 9, 28), "dod_avalanche"),
        block(1, datetime.date(2025, 10, 12), "dod_anzio_b4"),
    ]


def test_map_hint_beats_parsed_date():
    weeks = _twice_on_same_pair()
    when = resolve_when("9/28 9pm", league_time(2025, 9, 24))
    block = resolve_week(_query(map_hint="dod_anzio_b4", when=when), weeks)
    assert block.date == datetime.date(2025, 10, 12)


def test_closest_date_wins():
    weeks = _twice_on_same_pair()
    when = resolve_when("10/10 9pm", league_time(2025, 9, 24))
    assert resolve_week(_query(when=when), weeks).index == 1


def test_falls_through_to_active_week(cache):
    weeks = cache.weeks_for("Bronze")
    query = _query("FALCONS", "HAWKS", reference=league_time(2025, 9, 24))
    assert resolve_week(query, weeks).index == 1


def test_no_blocks():
    assert resolve_week(_query(reference=league_time(2025, 9, 24)), []) is None
