"""
Board Renderer - turn a week's grid rows and WeekStore into message content

Pure: the same blocks, stores and `now` always give the same content.
Three roles are rendered per week key:
    header   week label, map, date and a countdown
    table    one aligned code block per division
    rematch  unplayed matches from earlier weeks, one section per map
"""

import datetime
from dataclasses import dataclass
from typing import Dict, List, Optional

from config import DIVISION_RANK
from models.entities import MatchSlot, WeekBlock
from models.properties import PropertiesStore, load_week_store, row_key
from utils.formatting import align_columns, clip_message
from utils.timestamp import league_epoch, to_league

TBD_TEXT = "TBD"
FOOTER_PREFIX = "-# "


@dataclass
class BoardContent:
    header: str = ""
    table: str = ""
    rematch: str = ""

    def for_role(self, role: str) -> str:
        return getattr(self, role)


def _division_order(division: str) -> int:
    return DIVISION_RANK.get(division, len(DIVISION_RANK))


def _slot_status(slot: MatchSlot, schedule: Dict[str, dict], division: str) -> str:
    if slot.result is not None:
        return f"FINAL {slot.result[0]}-{slot.result[1]}"
    entry = schedule.get(row_key(division, slot.row_index))
    if entry and entry.get("whenText"):
        return entry["whenText"]
    return TBD_TEXT


def current_week_key(cache, today: datetime.date) -> Optional[str]:
    """Week key of the soonest block dated today or later (carries the rematch section)"""
    upcoming = [b for b in cache.all_blocks() if b.date >= today]
    return upcoming[0].week_key if upcoming else None


def render_header(blocks: List[WeekBlock], now: datetime.datetime) -> str:
    if not blocks:
        return ""
    first = blocks[0]
    kickoff = league_epoch(first.date)
    divisions = ", ".join(b.division for b in blocks)
    lines = [
        f"📅 **{first.title} · {first.map}**",
        f"{first.date.strftime('%A, %B')} {first.date.day}, {first.date.year} · "
        f"first kickoff <t:{kickoff}:R>",
        f"Divisions: {divisions}",
        f"{FOOTER_PREFIX}Updated <t:{int(now.timestamp())}:R>",
    ]
    return "\n".join(lines)


def render_table(blocks: List[WeekBlock], schedule: Dict[str, dict]) -> str:
    sections = []
    for block in blocks:
        rows = [
            [slot.home.strip().upper(), "vs", slot.away.strip().upper(),
             _slot_status(slot, schedule, block.division)]
            for slot in block.rows if slot.schedulable
        ]
        if not rows:
            continue
        body = "\n".join(align_columns(rows))
        sections.append(f"**{block.division}**\n```\n{body}\n```")
    return clip_message("\n".join(sections)) if sections else ""


def render_rematches(past_blocks: List[WeekBlock], schedules: Dict[str, Dict[str, dict]]) -> str:
    """Unplayed schedulable matches from past blocks, grouped by map"""
    by_map: Dict[str, list] = {}
    map_first_date: Dict[str, datetime.date] = {}
    for block in past_blocks:
        schedule = schedules.get(block.week_key, {})
        for slot in block.rows:
            if not slot.schedulable or slot.played:
                continue
            home, away = slot.home.strip().upper(), slot.away.strip().upper()
            by_map.setdefault(block.map, []).append((
                _division_order(block.division), home, away,
                [f"[{block.division}]", home, "vs", away, _slot_status(slot, schedule, block.division)]
            ))
            current = map_first_date.get(block.map)
            if current is None or block.date < current:
                map_first_date[block.map] = block.date

    if not by_map:
        return ""
    sections = ["🔁 **Make-up matches**"]
    for map_name in sorted(by_map, key=lambda m: (map_first_date[m], m)):
        entries = sorted(by_map[map_name], key=lambda e: (e[0], e[1], e[2]))
        body = "\n".join(align_columns([entry[3] for entry in entries]))
        sections.append(f"**{map_name}**\n```\n{body}\n```")
    return clip_message("\n".join(sections))


def render_board(week_key: str, cache, store: PropertiesStore,
                 now: Optional[datetime.datetime] = None) -> BoardContent:
    """Render header, table and rematch content for one week key

    Args:
        week_key: "iso-date|map" key of the week being published
        cache: BatchCache with the grid
        store: Properties store holding WeekStores
        now: Render time (footer only, and the cut-off for rematches)
    """
    now = to_league(now)
    blocks = sorted(cache.blocks_for_key(week_key).values(), key=lambda b: _division_order(b.division))
    schedule = load_week_store(store, week_key)["schedule"]

    rematch = ""
    today = now.date()
    if week_key == current_week_key(cache, today):
        past_blocks = [b for b in cache.all_blocks() if b.date < today]
        schedules = {
            key: load_week_store(store, key)["schedule"]
            for key in {b.week_key for b in past_blocks}
        }
        rematch = render_rematches(past_blocks, schedules)

    return BoardContent(
        header=render_header(blocks, now),
        table=render_table(blocks, schedule),
        rematch=rematch,
    )
