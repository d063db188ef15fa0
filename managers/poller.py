"""
Batch poller - replay new schedule-channel messages through the pipeline

Walks messages after a persisted cursor, oldest first, under a budget of
messages and wall-clock seconds. Bad messages are recorded and skipped; the
cursor is saved even when the walk stops early so the next run resumes.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from managers.schedule_manager import apply_update
from models.entities import ApplyOutcome, ParseErr, ParseResult
from models.interfaces import ChatRelay
from models.properties import PropertiesStore, load_cursor, save_cursor
from parsing.pairs import interpret_message
from utils.error_handling import ErrorKind, RelayHTTPError, log_error, log_event
from utils.timestamp import snowflake_to_datetime

CAUGHT_UP = "caught_up"
MAX_MESSAGES = "max_messages"
TIMEOUT_PREVENTION = ErrorKind.TIMEOUT_PREVENTION.value
RELAY_HTTP_ERROR = ErrorKind.RELAY_HTTP_ERROR.value


@dataclass
class PollBudget:
    max_messages: int = 200
    max_elapsed: float = 240.0  # seconds

    def messages_left(self, processed: int) -> bool:
        return processed < self.max_messages

    def time_left(self, elapsed: float) -> bool:
        return elapsed < self.max_elapsed


@dataclass
class MessageOutcome:
    """What happened to one chat message"""
    message_id: str
    results: List[ParseResult] = field(default_factory=list)
    applied: List[ApplyOutcome] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PollSummary:
    channel_id: str
    processed: int = 0
    skipped: int = 0
    applied: int = 0
    changed: int = 0
    errors: List[dict] = field(default_factory=list)
    unmatched: List[ApplyOutcome] = field(default_factory=list)
    touched_week_keys: List[str] = field(default_factory=list)
    cursor: Optional[str] = None
    stop_reason: str = CAUGHT_UP
    messages: List[MessageOutcome] = field(default_factory=list)

    def touch(self, week_key: str):
        if week_key not in self.touched_week_keys:
            self.touched_week_keys.append(week_key)

    def describe(self) -> str:
        return (f"processed={self.processed} applied={self.applied} changed={self.changed} "
                f"errors={len(self.errors)} unmatched={len(self.unmatched)} "
                f"stop={self.stop_reason} cursor={self.cursor}")


def _is_bot_message(message: dict) -> bool:
    return bool((message.get("author") or {}).get("bot"))


def process_message(message: dict, cache, store: PropertiesStore, summary: PollSummary) -> MessageOutcome:
    """Run one message through interpretation and the applier

    Failures are recorded on the summary; nothing is raised.
    """
    message_id = str(message["id"])
    outcome = MessageOutcome(message_id)
    sent_at = snowflake_to_datetime(message_id)

    try:
        outcome.results = interpret_message(message.get("content", ""), cache,
                                            reference=sent_at, message_time=sent_at)
        for result in outcome.results:
            if isinstance(result, ParseErr):
                summary.errors.append({"message_id": message_id, "kind": result.kind.value,
                                       "context": result.context})
                log_event(result.kind, message_id=message_id, detail=result.describe())
                continue

            applied = apply_update(result.pair, cache, store)
            outcome.applied.append(applied)
            if applied.ok:
                summary.applied += 1
                summary.changed += int(applied.changed)
                summary.touch(applied.week_key)
            else:
                summary.unmatched.append(applied)
    except Exception as e:
        log_error(e, "Processing schedule message", {"message_id": message_id})
        outcome.error = str(e)
        summary.errors.append({"message_id": message_id, "kind": type(e).__name__,
                               "context": {"error": str(e)[:200]}})

    summary.messages.append(outcome)
    return outcome


async def poll_channel(channel_id, relay: ChatRelay, cache, store: PropertiesStore, budget: PollBudget,
                       cursor: Optional[str] = None, page_size: int = 50,
                       clock: Callable[[], float] = time.monotonic) -> PollSummary:
    """Process messages strictly after the cursor until caught up or out of budget

    Args:
        channel_id: Schedule channel to read
        relay: ChatRelay implementation
        cache: BatchCache built for this batch
        store: Properties store (WeekStores and the cursor)
        budget: Message and time limits
        cursor: Start after this message id (defaults to the persisted cursor)
        page_size: Messages per fetch (max 100)
        clock: Monotonic seconds source

    Returns:
        PollSummary with the stop reason and the final cursor
    """
    started = clock()
    summary = PollSummary(str(channel_id))
    summary.cursor = cursor or load_cursor(store, channel_id) or "0"
    page_size = max(1, min(int(page_size), 100))

    try:
        while True:
            if not budget.time_left(clock() - started):
                summary.stop_reason = TIMEOUT_PREVENTION
                break

            try:
                page = await relay.fetch_messages(channel_id, after=summary.cursor, limit=page_size)
            except RelayHTTPError as e:
                log_error(e, "Polling schedule channel", {"channel_id": channel_id, "cursor": summary.cursor})
                summary.errors.append({"message_id": None, "kind": RELAY_HTTP_ERROR,
                                       "context": {"status": e.status}})
                summary.stop_reason = RELAY_HTTP_ERROR
                break

            page = sorted((m for m in page if int(m["id"]) > int(summary.cursor)),
                          key=lambda m: int(m["id"]))
            if not page:
                summary.stop_reason = CAUGHT_UP
                break

            stopped = False
            for message in page:
                if not budget.messages_left(summary.processed):
                    summary.stop_reason = MAX_MESSAGES
                    stopped = True
                    break
                if not budget.time_left(clock() - started):
                    summary.stop_reason = TIMEOUT_PREVENTION
                    stopped = True
                    break

                if _is_bot_message(message) or not (message.get("content") or "").strip():
                    summary.skipped += 1
                else:
                    process_message(message, cache, store, summary)
                    summary.processed += 1
                summary.cursor = str(message["id"])

            if stopped:
                break
            if len(page) < page_size:
                summary.stop_reason = CAUGHT_UP
                break
    finally:
        save_cursor(store, channel_id, summary.cursor if summary.cursor != "0" else None)

    log_event("batch_summary", channel_id=channel_id, processed=summary.processed,
              applied=summary.applied, changed=summary.changed, errors=len(summary.errors),
              unmatched=len(summary.unmatched), stop_reason=summary.stop_reason,
              cursor=summary.cursor)
    print(f"📥 Poll {channel_id}: {summary.describe()}")
    return summary
