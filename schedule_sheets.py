"""
Schedule spreadsheet reader
Roster, alias table, map list and the per-division weekly grids
"""

import re
import datetime
from typing import List, Optional, Tuple

from config import (
    TEAMS_SHEET_NAME, ALIASES_SHEET_NAME, MAPS_SHEET_NAME,
    GRID_START_ROW, ROWS_PER_BLOCK, GRID_COLUMNS,
)
from models.entities import MatchSlot, Team, WeekBlock

_WEEK_LABEL_RE = re.compile(r"^\s*week\s*\d+", re.IGNORECASE)
_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y-%m-%d", "%b %d, %Y", "%B %d, %Y")


def _cell(row: List[str], col: int) -> str:
    return row[col].strip() if col < len(row) and row[col] else ""


def _is_header(row: List[str], first: str) -> bool:
    return _cell(row, 0).lower() == first.lower()


def parse_sheet_date(value: str) -> Optional[datetime.date]:
    value = (value or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _score(value: str) -> Optional[int]:
    value = (value or "").strip()
    return int(value) if value.isdigit() else None


def parse_result(row: List[str]) -> Optional[Tuple[int, int]]:
    """Home/away score of a played row, None when unplayed

    Scores win; with only W/L marks the winner gets 1.
    """
    home_score, away_score = _score(_cell(row, 2)), _score(_cell(row, 3))
    if home_score is not None and away_score is not None:
        return home_score, away_score
    home_mark, away_mark = _cell(row, 0).upper(), _cell(row, 5).upper()
    if home_mark == "W" or away_mark == "L":
        return 1, 0
    if home_mark == "L" or away_mark == "W":
        return 0, 1
    return None


def parse_teams(values: List[List[str]]) -> List[Team]:
    """Division | Team rows"""
    teams = []
    for row in values:
        division, name = _cell(row, 0), _cell(row, 1)
        if not division or not name or _is_header(row, "Division"):
            continue
        teams.append(Team(name=name, division=division))
    return teams


def parse_aliases(values: List[List[str]]) -> List[Tuple[str, str]]:
    """Alias | Team rows"""
    rows = []
    for row in values:
        alias, team = _cell(row, 0), _cell(row, 1)
        if alias and team and not _is_header(row, "Alias"):
            rows.append((alias, team))
    return rows


def parse_maps(values: List[List[str]]) -> List[str]:
    return [_cell(row, 0) for row in values if _cell(row, 0) and not _is_header(row, "Map")]


def parse_grid(division: str, values: List[List[str]]) -> List[WeekBlock]:
    """Week blocks of one division grid

    A block starts at a `Week N | map | date` row and owns the next
    ROWS_PER_BLOCK rows (fewer if another block starts first). Row indexes
    are 1-based sheet rows.
    """
    blocks = []
    start = max(GRID_START_ROW - 1, 0)
    i = start
    while i < len(values):
        row = values[i]
        day = parse_sheet_date(_cell(row, 2))
        if not _WEEK_LABEL_RE.match(_cell(row, 0)) or not _cell(row, 1) or day is None:
            i += 1
            continue

        block = WeekBlock(
            division=division,
            index=len(blocks),
            map=_cell(row, 1),
            date=day,
            label=_cell(row, 0),
            top_row=i + 1,
        )
        j = i + 1
        while j < len(values) and j <= i + ROWS_PER_BLOCK:
            match_row = (values[j] + [""] * GRID_COLUMNS)[:GRID_COLUMNS]
            if _WEEK_LABEL_RE.match(_cell(match_row, 0)):
                break
            home, away = _cell(match_row, 1), _cell(match_row, 4)
            if home or away:
                block.rows.append(MatchSlot(row_index=j + 1, home=home, away=away,
                                            result=parse_result(match_row)))
            j += 1
        blocks.append(block)
        i = j
    return blocks


class ScheduleSheets:
    """Schedule store over a GoogleSheetsManager"""

    def __init__(self, gs_manager):
        self.gs = gs_manager

    def get_teams(self) -> List[Team]:
        return parse_teams(self.gs.get_worksheet_with_retry(TEAMS_SHEET_NAME))

    def get_aliases(self) -> List[Tuple[str, str]]:
        return parse_aliases(self.gs.get_worksheet_with_retry(ALIASES_SHEET_NAME))

    def get_maps(self) -> List[str]:
        return parse_maps(self.gs.get_worksheet_with_retry(MAPS_SHEET_NAME))

    def get_week_blocks(self, division: str) -> List[WeekBlock]:
        return parse_grid(division, self.gs.get_worksheet_with_retry(division))

    def find_block_top(self, division: str, block_index: int) -> Optional[int]:
        """Fresh read of a block's header row"""
        for block in self.get_week_blocks(division):
            if block.index == block_index:
                return block.top_row
        return None
