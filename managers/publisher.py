"""
Board publisher - keep exactly one live message per role per week key

Each role (header, table, rematch) moves absent -> present. On every run the
freshly rendered content is compared against the stored hash and the stored
message is created, edited, deleted or left alone.
"""

import re
import hashlib
import datetime
from dataclasses import dataclass, field
from typing import List, Optional

from config import BOARD_COLORS
from managers.board_renderer import BoardContent, render_board
from models.interfaces import ChatRelay
from models.properties import PropertiesStore, ROLES, load_published, save_published
from utils.error_handling import RelayHTTPError, log_error, log_event

_TIMESTAMP_TOKEN_RE = re.compile(r"<t:\d+(?::[a-zA-Z])?>")

CREATED = "created"
EDITED = "edited"
DELETED = "deleted"
UP_TO_DATE = "up-to-date"
ERROR = "error"


def content_hash(content: str) -> str:
    """sha256 of content without timestamps and `-# ` footer lines"""
    lines = [
        _TIMESTAMP_TOKEN_RE.sub("", line)
        for line in (content or "").split("\n")
        if not line.startswith("-# ")
    ]
    return hashlib.sha256("\n".join(lines).strip().encode("utf-8")).hexdigest()


@dataclass
class RoleOutcome:
    role: str
    action: str
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class PublishReport:
    week_key: str
    outcomes: List[RoleOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.action != ERROR for o in self.outcomes)

    @property
    def changed(self) -> bool:
        return any(o.action in (CREATED, EDITED, DELETED) for o in self.outcomes)

    def action_for(self, role: str) -> Optional[str]:
        for outcome in self.outcomes:
            if outcome.role == role:
                return outcome.action
        return None


async def _reconcile_role(role: str, content: str, relay, published, channel_id) -> RoleOutcome:
    message_id = published.message_id(role)
    new_hash = content_hash(content)

    if not message_id:
        if not content:
            return RoleOutcome(role, UP_TO_DATE)
        new_id = await relay.post_message(channel_id, content)
        published.record(role, new_id, new_hash)
        return RoleOutcome(role, CREATED, new_id)

    if not content:
        try:
            await relay.delete_message(channel_id, message_id)
        except RelayHTTPError as e:
            if not e.is_not_found:
                raise
        published.clear_message(role)
        return RoleOutcome(role, DELETED, message_id)

    if published.content_hash(role) != new_hash:
        try:
            await relay.edit_message(channel_id, message_id, content)
        except RelayHTTPError as e:
            if not e.is_not_found:
                raise
            # Someone deleted the message by hand
            new_id = await relay.post_message(channel_id, content)
            published.record(role, new_id, new_hash)
            return RoleOutcome(role, CREATED, new_id)
        published.record(role, message_id, new_hash)
        return RoleOutcome(role, EDITED, message_id)

    return RoleOutcome(role, UP_TO_DATE, message_id)


async def reconcile_week(week_key: str, content: BoardContent, relay: ChatRelay,
                         store: PropertiesStore, channel_id) -> PublishReport:
    """Bring the live board messages for a week in line with rendered content

    A relay failure on one role is recorded as an `error` outcome and the
    remaining roles still run. The PublishedMessageSet is saved after each role.
    """
    published = load_published(store, week_key)
    report = PublishReport(week_key)

    for role in ROLES:
        try:
            outcome = await _reconcile_role(role, content.for_role(role), relay, published, channel_id)
        except RelayHTTPError as e:
            log_error(e, "Board publish", {"week_key": week_key, "role": role})
            outcome = RoleOutcome(role, ERROR, published.message_id(role), error=str(e))
        save_published(store, week_key, published)
        report.outcomes.append(outcome)

    log_event("publish", week_key=week_key,
              **{o.role: o.action for o in report.outcomes})
    return report


def format_publish_notice(report: PublishReport) -> str:
    """One human-readable line per role for the log channel"""
    icons = {CREATED: "🆕", EDITED: "✏️", DELETED: "🗑️", UP_TO_DATE: "✅", ERROR: "❌"}
    lines = [f"**Board publish · {report.week_key}**"]
    for outcome in report.outcomes:
        line = f"{icons[outcome.action]} {outcome.role}: {outcome.action}"
        if outcome.error:
            line += f" ({outcome.error[:150]})"
        lines.append(line)
    return "\n".join(lines)


def notice_color(report: PublishReport) -> int:
    if not report.ok:
        return BOARD_COLORS[ERROR]
    actions = {o.action for o in report.outcomes}
    for action in (CREATED, EDITED, DELETED):
        if action in actions:
            return BOARD_COLORS[action]
    return BOARD_COLORS[UP_TO_DATE]


async def sync_week_board(week_key: str, cache, store: PropertiesStore, relay, channel_id,
                          log_channel_id=None, now: Optional[datetime.datetime] = None) -> PublishReport:
    """Render, reconcile and report one week's board"""
    content = render_board(week_key, cache, store, now)
    report = await reconcile_week(week_key, content, relay, store, channel_id)

    if log_channel_id:
        embed = {"description": format_publish_notice(report), "color": notice_color(report)}
        try:
            await relay.post_message(log_channel_id, "", embeds=[embed])
        except RelayHTTPError as e:
            log_error(e, "Publish notice", {"week_key": week_key})
    print(f"📋 Board {week_key}: " + ", ".join(f"{o.role}={o.action}" for o in report.outcomes))
    return report
