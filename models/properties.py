"""
Key-value properties store with JSON file persistence.

Holds the only state the bot owns:
- WeekStore (kickoff times per grid row), keyed by week key
- PublishedMessageSet (board message ids + content hashes), keyed by week key
- Poll cursor, keyed by channel id
"""

import os
import json
import datetime
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from config import PROPERTIES_FILE

WEEK_STORE_PREFIX = "week_store:"
PUBLISHED_PREFIX = "published:"
CURSOR_PREFIX = "poll_cursor:"

ROLES = ("header", "table", "rematch")


class PropertiesStore:
    """Small persistent dict backed by one JSON file

    Every write goes straight to disk (write to temp file, then replace) so a
    hard stop never leaves a half-written file.
    """

    def __init__(self, path: str = PROPERTIES_FILE):
        self.path = path
        self.data: Dict[str, object] = {}
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                self.data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"⚠️ Properties file unreadable, starting empty: {e}")
            self.data = {}

    def _flush(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default=None):
        return self.data.get(key, default)

    def set(self, key: str, value):
        self.data[key] = value
        self._flush()

    def delete(self, key: str):
        if key in self.data:
            del self.data[key]
            self._flush()

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self.data if k.startswith(prefix))


# ============================================================================
# WEEK STORE
# ============================================================================

def row_key(division: str, row_index: int) -> str:
    return f"{division}|{row_index}"


def load_week_store(store: PropertiesStore, week_key: str) -> dict:
    """Get the WeekStore for a week (empty schedule if never written)"""
    data = store.get(WEEK_STORE_PREFIX + week_key)
    if not data:
        return {"schedule": {}}
    data.setdefault("schedule", {})
    return data


def save_week_store(store: PropertiesStore, week_key: str, week_store: dict):
    store.set(WEEK_STORE_PREFIX + week_key, week_store)


def reset_week_store(store: PropertiesStore, week_key: str):
    """Overwrite a week's schedule with an empty one"""
    save_week_store(store, week_key, {
        "schedule": {},
        "reset_at": datetime.datetime.now(datetime.timezone.utc).isoformat()
    })


def stored_week_keys(store: PropertiesStore) -> List[str]:
    return [k[len(WEEK_STORE_PREFIX):] for k in store.keys(WEEK_STORE_PREFIX)]


# ============================================================================
# PUBLISHED MESSAGE SET
# ============================================================================

@dataclass
class PublishedMessageSet:
    """Board messages currently live for one week key"""
    headerMessageId: Optional[str] = None
    tableMessageId: Optional[str] = None
    rematchMessageId: Optional[str] = None
    headerHash: Optional[str] = None
    tableHash: Optional[str] = None
    rematchHash: Optional[str] = None

    def message_id(self, role: str) -> Optional[str]:
        return getattr(self, f"{role}MessageId")

    def content_hash(self, role: str) -> Optional[str]:
        return getattr(self, f"{role}Hash")

    def record(self, role: str, message_id: Optional[str], content_hash: Optional[str]):
        setattr(self, f"{role}MessageId", message_id)
        setattr(self, f"{role}Hash", content_hash)

    def clear_message(self, role: str):
        """Forget the message id; the hash stays for audit"""
        setattr(self, f"{role}MessageId", None)

    def live_ids(self) -> Dict[str, str]:
        return {role: self.message_id(role) for role in ROLES if self.message_id(role)}

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict):
        known = {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}
        return cls(**known)


def load_published(store: PropertiesStore, week_key: str) -> PublishedMessageSet:
    return PublishedMessageSet.from_dict(store.get(PUBLISHED_PREFIX + week_key))


def save_published(store: PropertiesStore, week_key: str, published: PublishedMessageSet):
    store.set(PUBLISHED_PREFIX + week_key, published.to_dict())


# ============================================================================
# POLL CURSOR
# ============================================================================

def load_cursor(store: PropertiesStore, channel_id) -> Optional[str]:
    value = store.get(f"{CURSOR_PREFIX}{channel_id}")
    return str(value) if value else None


def save_cursor(store: PropertiesStore, channel_id, cursor: Optional[str]):
    if cursor:
        store.set(f"{CURSOR_PREFIX}{channel_id}", str(cursor))
