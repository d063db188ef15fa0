"""Tests for the full interpretation pipeline"""

import datetime

import pytest

from conftest import WEEK2_KEY, WEEK3_KEY, league_time
from managers.schedule_manager import apply_update
from models.entities import ParseErr, ParseOk
from models.properties import load_week_store
from parsing.pairs import interpret_message
from utils.error_handling import ErrorKind

WEDNESDAY_NOON = league_time(2025, 9, 24)


def _only(results):
    assert len(results) == 1
    return results[0]


def test_bronze_example(cache):
    result = _only(interpret_message("Bronze: Falcons vs Wolves 9/28 9pm", cache, WEDNESDAY_NOON))
    assert isinstance(result, ParseOk)
    pair = result.pair
    assert pair.division == "Bronze"
    assert (pair.home, pair.away) == ("FALCONS", "WOLVES")
    assert pair.when_text == "9:00 PM ET 9/28"
    assert pair.week_key == WEEK2_KEY
    assert pair.row_index == 13


def test_order_independent(cache):
    forward = _only(interpret_message("Falcons vs Wolves 9/28 9pm", cache, WEDNESDAY_NOON)).pair
    backward = _only(interpret_message("wolves vs falcons 9/28 9pm", cache, WEDNESDAY_NOON)).pair
    assert forward == backward


def test_upcoming_sunday_from_tuesday(cache):
    tuesday = league_time(2025, 9, 30)
    pair = _only(interpret_message("emo vs wolves sunday 930 est", cache, tuesday)).pair
    assert pair.week_key == WEEK3_KEY
    assert pair.when_text == "9:30 PM ET 10/5"
    # Grid row has WOLVES at home
    assert (pair.home, pair.away) == ("WOLVES", "EMOTIONAL DAMAGE")


def test_undated_message_lands_on_block_date(cache):
    pair = _only(interpret_message("Falcons vs Wolves 8pm", cache, WEDNESDAY_NOON)).pair
    assert pair.week_key == WEEK2_KEY
    assert pair.when_text == "8:00 PM ET 9/28"


def test_tbd_message(cache):
    pair = _only(interpret_message("Falcons vs Wolves TBD", cache, WEDNESDAY_NOON)).pair
    assert pair.when_text == "TBD"
    assert pair.epoch_seconds is None


@pytest.mark.parametrize("text", [
    "Falcons vs Hawks 9/28",
    "Bronze: Falcons vs Hawks 9/28",
])
def test_cross_division_is_never_guessed(cache, text):
    result = _only(interpret_message(text, cache, WEDNESDAY_NOON))
    assert isinstance(result, ParseErr)
    assert result.kind == ErrorKind.CROSS_DIVISION
    assert {result.context["home_division"], result.context["away_division"]} == {"Bronze", "Silver"}


def test_unknown_team(cache):
    result = _only(interpret_message("Falcons vs Penguins 9/28", cache, WEDNESDAY_NOON))
    assert result.kind == ErrorKind.TEAM_NOT_FOUND
    assert result.context["unresolved_away"] == "Penguins"
    assert "unresolved_home" not in result.context


def test_same_team_both_sides(cache):
    result = _only(interpret_message("Falcons vs birds", cache, WEDNESDAY_NOON))
    assert result.kind == ErrorKind.TEAM_NOT_FOUND


def test_no_delimiter(cache):
    result = _only(interpret_message("gg everyone, see you sunday", cache, WEDNESDAY_NOON))
    assert result.kind == ErrorKind.NO_VS
    assert not result.ok


def test_multi_line_message_shares_context(cache):
    text = "Sunday 9/28 at 10pm\nFalcons vs Wolves\n[Gold] Ravens vs Titans"
    results = interpret_message(text, cache, WEDNESDAY_NOON)
    assert [r.ok for r in results] == [True, True]
    assert [r.pair.division for r in results] == ["Bronze", "Gold"]
    assert all(r.pair.when_text == "10:00 PM ET 9/28" for r in results)


def test_mentions_and_markup_are_ignored(cache):
    result = _only(interpret_message("<@1234> **Titans** vs Ravens :fire: 9/28 9pm", cache, WEDNESDAY_NOON))
    assert result.pair.division == "Gold"
    assert (result.pair.home, result.pair.away) == ("RAVENS", "TITANS")


def test_pipeline_is_idempotent(cache, store):
    text = "Bronze: Falcons vs Wolves 9/28 9pm"
    first = _only(interpret_message(text, cache, WEDNESDAY_NOON)).pair
    second = _only(interpret_message(text, cache, WEDNESDAY_NOON)).pair
    assert first == second

    assert apply_update(first, cache, store).changed
    snapshot = load_week_store(store, WEEK2_KEY)
    assert not apply_update(second, cache, store).changed
    assert load_week_store(store, WEEK2_KEY) == snapshot
    assert list(snapshot["schedule"]) == ["Bronze|13"]


def test_message_time_is_the_default_reference(cache):
    sent = league_time(2025, 9, 30)
    pair = _only(interpret_message("emo vs wolves sunday 930 est", cache, message_time=sent)).pair
    assert pair.epoch_seconds == int(league_time(2025, 10, 5, 21, 30).timestamp())
    assert pair.week_key == WEEK3_KEY
    assert datetime.date(2025, 10, 5).isoformat() in pair.week_key
