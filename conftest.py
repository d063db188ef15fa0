"""Shared fixtures: in-memory spreadsheet, chat relay and properties store"""

import datetime
import json
import itertools

import pytest

from config import ROWS_PER_BLOCK, config
from managers.relay_client import RelayClient
from models.cache import BatchCache
from models.properties import PropertiesStore
from schedule_sheets import parse_aliases, parse_grid, parse_maps, parse_teams
from utils.error_handling import RelayHTTPError
from utils.timestamp import LEAGUE_TZ, datetime_to_snowflake

TEAMS = [
    ["Division", "Team"],
    ["Bronze", "Falcons"],
    ["Bronze", "Wolves"],
    ["Bronze", "Emotional Damage"],
    ["Silver", "Hawks"],
    ["Silver", "Sharks"],
    ["Gold", "Titans"],
    ["Gold", "Ravens"],
]

ALIASES = [
    ["Alias", "Team"],
    ["emo", "Emotional Damage"],
    ["birds", "Falcons"],
]

MAPS = [["Map"], ["dod_anzio_b4"], ["dod_avalanche"], ["dod_flash"]]


def make_grid(blocks):
    """Sheet values for a division grid

    blocks: (label, map, date text, [(home, away, home score, away score)])
    """
    values = [["Schedule", "", "", "", "", ""]]
    for label, map_name, date_text, matches in blocks:
        values.append([label, map_name, date_text, "", "", ""])
        for home, away, home_score, away_score in matches:
            values.append(["", home, home_score, away_score, away, ""])
        values.extend([["", "", "", "", "", ""] for _ in range(ROWS_PER_BLOCK + 1 - len(matches))])
    return values


GRIDS = {
    # Rows: Week 1 header is sheet row 2, Week 2 row 12, Week 3 row 22
    # Bronze week 1 row 5 is an empty slot with both cells set to BYE
    "Bronze": make_grid([
        ("Week 1", "dod_anzio_b4", "9/21/2025", [("FALCONS", "EMOTIONAL DAMAGE", "", ""),
                                                 ("WOLVES", "BYE", "", ""),
                                                 ("BYE", "BYE", "", "")]),
        ("Week 2", "dod_avalanche", "9/28/2025", [("FALCONS", "WOLVES", "", ""),
                                                  ("EMOTIONAL DAMAGE", "BYE", "", "")]),
        ("Week 3", "dod_flash", "10/5/2025", [("WOLVES", "EMOTIONAL DAMAGE", "", ""),
                                              ("FALCONS", "BYE", "", "")]),
    ]),
    "Silver": make_grid([
        ("Week 1", "dod_anzio_b4", "9/21/2025", [("HAWKS", "SHARKS", "3", "1")]),
        ("Week 2", "dod_avalanche", "9/28/2025", [("SHARKS", "HAWKS", "", "")]),
    ]),
    "Gold": make_grid([
        ("Week 1", "dod_anzio_b4", "9/21/2025", [("TITANS", "RAVENS", "", "")]),
        ("Week 2", "dod_avalanche", "9/28/2025", [("RAVENS", "TITANS", "", "")]),
    ]),
}

WEEK1_KEY = "2025-09-21|dod_anzio_b4"
WEEK2_KEY = "2025-09-28|dod_avalanche"
WEEK3_KEY = "2025-10-05|dod_flash"


def league_time(year, month, day, hour=12, minute=0) -> datetime.datetime:
    return LEAGUE_TZ.localize(datetime.datetime(year, month, day, hour, minute))


class FakeSheets:
    """ScheduleStore over the literal sheet values above"""

    def __init__(self, grids=None):
        self.grids = grids or GRIDS

    def get_teams(self):
        return parse_teams(TEAMS)

    def get_aliases(self):
        return parse_aliases(ALIASES)

    def get_maps(self):
        return parse_maps(MAPS)

    def get_week_blocks(self, division):
        return parse_grid(division, self.grids.get(division, []))


class FakeRelay:
    """In-memory ChatRelay; pages come back newest first like the real API"""

    def __init__(self):
        self.channels = {}
        self.messages = {}
        self.ids = itertools.count(9000)
        self.posts = []
        self.edits = []
        self.deletes = []
        self.fail_fetch = None
        self.fail_edit = None

    def add_message(self, channel_id, content, sent_at, offset=0, bot=False):
        message = {
            "id": str(datetime_to_snowflake(sent_at) + offset),
            "content": content,
            "author": {"id": "1", "bot": bot},
            "embeds": [],
        }
        self.channels.setdefault(str(channel_id), []).append(message)
        return message

    async def post_message(self, channel_id, content, embeds=None):
        message_id = str(next(self.ids))
        self.messages[message_id] = {"channel_id": channel_id, "content": content, "embeds": embeds}
        self.posts.append((channel_id, message_id, content))
        return message_id

    async def edit_message(self, channel_id, message_id, content, embeds=None):
        if self.fail_edit:
            raise RelayHTTPError(self.fail_edit, "edit failed", "PATCH", f"/messages/{message_id}")
        if message_id not in self.messages:
            raise RelayHTTPError(404, "Unknown Message", "PATCH", f"/messages/{message_id}")
        self.messages[message_id]["content"] = content
        self.edits.append((channel_id, message_id, content))
        return message_id

    async def delete_message(self, channel_id, message_id):
        if message_id not in self.messages:
            raise RelayHTTPError(404, "Unknown Message", "DELETE", f"/messages/{message_id}")
        del self.messages[message_id]
        self.deletes.append((channel_id, message_id))
        return True

    async def fetch_messages(self, channel_id, after=None, around=None, limit=50):
        if self.fail_fetch:
            raise RelayHTTPError(self.fail_fetch, "fetch failed", "GET", f"/channels/{channel_id}/messages")
        found = sorted(
            (m for m in self.channels.get(str(channel_id), []) if int(m["id"]) > int(after or 0)),
            key=lambda m: int(m["id"])
        )
        return list(reversed(found[:limit]))

    async def fetch_message(self, channel_id, message_id):
        for message in self.channels.get(str(channel_id), []):
            if message["id"] == str(message_id):
                return message
        return None

    def live_in(self, channel_id):
        return [mid for mid, m in self.messages.items() if m["channel_id"] == channel_id]


@pytest.fixture
def sheets():
    return FakeSheets()


@pytest.fixture
def cache(sheets):
    return BatchCache.load(sheets)


@pytest.fixture
def store(tmp_path):
    return PropertiesStore(str(tmp_path / "properties.json"))


@pytest.fixture
def relay():
    return FakeRelay()


class FakeResponse:
    """Stand-in for an aiohttp response context manager"""

    def __init__(self, status, payload=None, headers=None):
        self.status = status
        self.payload = payload
        self.headers = headers or {}

    async def json(self, content_type="application/json"):
        return self.payload

    async def text(self):
        return json.dumps(self.payload)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replays canned responses; exceptions in the list are raised instead"""
    closed = False

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, json=None, params=None):
        self.calls.append((method, url, json, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True


@pytest.fixture
def relay_client_with(monkeypatch):
    """Build a RelayClient (3 attempts, no backoff) over canned responses"""
    monkeypatch.setattr(config, "RETRY_DELAY", 0)
    monkeypatch.setattr("managers.relay_client.random.uniform", lambda a, b: 0)

    def build(*responses):
        client = RelayClient(token="t", base_url="https://relay.test/api", timeout=5, max_retries=3)
        client.session = FakeSession(responses)
        return client
    return build
