"""Tests for the board publication reconciler"""

import asyncio

from conftest import WEEK2_KEY, FakeResponse, league_time
from managers.board_renderer import BoardContent, render_board
from managers.publisher import (
    CREATED, DELETED, EDITED, ERROR, UP_TO_DATE,
    content_hash, format_publish_notice, reconcile_week, sync_week_board,
)
from managers.schedule_manager import apply_update
from models.entities import UpdatePair
from models.properties import ROLES, load_published

BOARD = 100
LOG = 200
WEDNESDAY = league_time(2025, 9, 24)


def _actions(report):
    return {o.role: o.action for o in report.outcomes}


def test_content_hash_ignores_timestamps_and_footers():
    a = "Week 2 <t:100:R>\n-# Updated <t:5:R>"
    b = "Week 2 <t:999:R>\n-# Updated <t:7:R>"
    assert content_hash(a) == content_hash(b)
    assert content_hash(a) != content_hash("Week 3 <t:100:R>")


async def test_first_publish_creates_every_role(relay, store):
    content = BoardContent(header="h", table="t", rematch="r")
    report = await reconcile_week(WEEK2_KEY, content, relay, store, BOARD)
    assert _actions(report) == {"header": CREATED, "table": CREATED, "rematch": CREATED}
    published = load_published(store, WEEK2_KEY)
    assert set(published.live_ids()) == set(ROLES)
    assert published.tableHash == content_hash("t")


async def test_empty_role_is_not_created(relay, store):
    report = await reconcile_week(WEEK2_KEY, BoardContent("h", "t", ""), relay, store, BOARD)
    assert report.action_for("rematch") == UP_TO_DATE
    assert load_published(store, WEEK2_KEY).rematchMessageId is None
    assert len(relay.posts) == 2


async def test_second_identical_run_is_up_to_date(cache, store, relay):
    await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=WEDNESDAY)
    report = await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD,
                                   now=league_time(2025, 9, 24, 20, 0))
    assert set(_actions(report).values()) == {UP_TO_DATE}
    assert relay.edits == []
    assert not report.changed


async def test_changed_table_is_edited_in_place(cache, store, relay):
    first = await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=WEDNESDAY)
    table_id = load_published(store, WEEK2_KEY).tableMessageId

    pair = UpdatePair("Bronze", "FALCONS", "WOLVES", "9:00 PM ET 9/28", 1759107600, WEEK2_KEY, 1)
    apply_update(pair, cache, store)
    report = await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=WEDNESDAY)

    assert _actions(report) == {"header": UP_TO_DATE, "table": EDITED, "rematch": UP_TO_DATE}
    assert load_published(store, WEEK2_KEY).tableMessageId == table_id
    assert "9:00 PM ET 9/28" in relay.messages[table_id]["content"]
    assert first.ok and report.ok


async def test_edit_of_deleted_message_recreates(relay, store):
    await reconcile_week(WEEK2_KEY, BoardContent("h", "t", "r"), relay, store, BOARD)
    old_id = load_published(store, WEEK2_KEY).tableMessageId
    del relay.messages[old_id]

    report = await reconcile_week(WEEK2_KEY, BoardContent("h", "t2", "r"), relay, store, BOARD)
    assert report.action_for("table") == CREATED
    published = load_published(store, WEEK2_KEY)
    assert published.tableMessageId not in (None, old_id)
    assert published.tableHash == content_hash("t2")


async def test_emptied_role_is_deleted_and_hash_kept(relay, store):
    await reconcile_week(WEEK2_KEY, BoardContent("h", "t", "r"), relay, store, BOARD)
    rematch_id = load_published(store, WEEK2_KEY).rematchMessageId

    report = await reconcile_week(WEEK2_KEY, BoardContent("h", "t", ""), relay, store, BOARD)
    assert report.action_for("rematch") == DELETED
    assert relay.deletes == [(BOARD, rematch_id)]
    published = load_published(store, WEEK2_KEY)
    assert published.rematchMessageId is None
    assert published.rematchHash == content_hash("r")

    again = await reconcile_week(WEEK2_KEY, BoardContent("h", "t", ""), relay, store, BOARD)
    assert again.action_for("rematch") == UP_TO_DATE


async def test_rematch_moves_off_past_week(cache, store, relay):
    await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=WEDNESDAY)
    report = await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=league_time(2025, 9, 29))
    assert report.action_for("rematch") == DELETED


async def test_relay_error_on_one_role(relay, store):
    await reconcile_week(WEEK2_KEY, BoardContent("h", "t", "r"), relay, store, BOARD)
    relay.fail_edit = 500
    report = await reconcile_week(WEEK2_KEY, BoardContent("h2", "t", "r2"), relay, store, BOARD)
    assert _actions(report) == {"header": ERROR, "table": UP_TO_DATE, "rematch": ERROR}
    assert not report.ok
    # Failed roles keep their old hash so the next run retries
    assert load_published(store, WEEK2_KEY).headerHash == content_hash("h")


async def test_timed_out_role_does_not_stop_the_rest(relay, store, relay_client_with):
    await reconcile_week(WEEK2_KEY, BoardContent("h", "t", "r"), relay, store, BOARD)
    # header edit times out on every attempt, rematch edit succeeds
    timeouts = [asyncio.TimeoutError() for _ in range(3)]
    rematch_id = load_published(store, WEEK2_KEY).message_id("rematch")
    client = relay_client_with(*timeouts, FakeResponse(200, {"id": rematch_id}))
    report = await reconcile_week(WEEK2_KEY, BoardContent("h2", "t", "r2"), client, store, BOARD)
    assert _actions(report) == {"header": ERROR, "table": UP_TO_DATE, "rematch": EDITED}
    assert load_published(store, WEEK2_KEY).headerHash == content_hash("h")
    assert load_published(store, WEEK2_KEY).rematchHash == content_hash("r2")


async def test_one_live_message_per_role(cache, store, relay):
    for day in (21, 22, 24, 25, 29):
        await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, now=league_time(2025, 9, day))
    published = load_published(store, WEEK2_KEY)
    assert sorted(relay.live_in(BOARD)) == sorted(published.live_ids().values())
    assert len(relay.live_in(BOARD)) <= len(ROLES)


async def test_notice_goes_to_log_channel(cache, store, relay):
    report = await sync_week_board(WEEK2_KEY, cache, store, relay, BOARD, LOG, now=WEDNESDAY)
    notices = [m for m in relay.messages.values() if m["channel_id"] == LOG]
    assert len(notices) == 1
    description = notices[0]["embeds"][0]["description"]
    assert description == format_publish_notice(report)
    assert "table: created" in description


def test_render_board_matches_published_content(cache, store):
    content = render_board(WEEK2_KEY, cache, store, WEDNESDAY)
    assert all(content.for_role(role) for role in ROLES)
