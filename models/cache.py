"""
Per-batch cache of the schedule spreadsheet.

The roster, alias index, map catalog and week list are expensive to read, so
one BatchCache is built at the start of every batch and dropped at the end.
Within a batch it is read-only; a new batch always builds a fresh one.
"""

import datetime
from typing import Dict, List, Optional, Tuple

from config import DIVISIONS, DIVISION_RANK, MAP_PREFIX
from models.entities import Team, WeekBlock
from models.interfaces import ScheduleStore
from parsing.hints import build_map_catalog
from parsing.team_resolver import build_alias_map, alias_key


class BatchCache:
    """Read-only snapshot of teams, aliases, maps and week blocks

    Features:
    - Alias table merged into team aliases for scoring
    - Map alias catalog built once
    - Week blocks per division in chronological order
    - Week-key lookup across divisions
    """

    def __init__(self, teams: List[Team], alias_rows: List[Tuple[str, str]] = None,
                 maps: List[str] = None, weeks: Dict[str, List[WeekBlock]] = None,
                 divisions: List[str] = None, map_prefix: str = MAP_PREFIX):
        self.divisions = list(divisions or DIVISIONS)
        self.teams = list(teams)
        self.alias_rows = list(alias_rows or [])
        self._attach_aliases()
        self.alias_map = build_alias_map(self.alias_rows, self.teams)
        self.maps = list(maps or [])
        self.map_catalog = build_map_catalog(self.maps, map_prefix)
        self.weeks: Dict[str, List[WeekBlock]] = {
            division: sorted(blocks, key=lambda b: (b.date, b.index))
            for division, blocks in (weeks or {}).items()
        }

    @classmethod
    def load(cls, sheets: ScheduleStore, divisions: List[str] = None) -> "BatchCache":
        """Read everything the pipeline needs from the schedule store"""
        divisions = list(divisions or DIVISIONS)
        teams = sheets.get_teams()
        alias_rows = sheets.get_aliases()
        maps = sheets.get_maps()
        weeks = {division: sheets.get_week_blocks(division) for division in divisions}
        cache = cls(teams, alias_rows, maps, weeks, divisions)
        block_count = sum(len(b) for b in cache.weeks.values())
        print(f"✅ Batch cache built: {len(teams)} teams, {len(cache.alias_map)} aliases, "
              f"{len(maps)} maps, {block_count} week blocks")
        return cache

    def _attach_aliases(self):
        by_name = {}
        for team in self.teams:
            by_name.setdefault(alias_key(team.name), []).append(team)
        for alias, canonical in self.alias_rows:
            for team in by_name.get(alias_key(canonical), []):
                team.aliases.add(alias.strip())

    # ------------------------------------------------------------------
    # Weeks
    # ------------------------------------------------------------------

    def weeks_for(self, division: str) -> List[WeekBlock]:
        return self.weeks.get(division, [])

    def all_blocks(self) -> List[WeekBlock]:
        blocks = [b for division in self.divisions for b in self.weeks_for(division)]
        return sorted(blocks, key=lambda b: (b.date, DIVISION_RANK.get(b.division, 99), b.index))

    def block(self, division: str, index: int) -> Optional[WeekBlock]:
        for block in self.weeks_for(division):
            if block.index == index:
                return block
        return None

    def block_top(self, division: str, index: int) -> Optional[int]:
        """Top grid row of a division's block, as read from the grid"""
        block = self.block(division, index)
        return block.top_row if block else None

    def active_week(self, division: str, today: datetime.date) -> Optional[WeekBlock]:
        """Soonest block dated today or later; the last block once the season is over"""
        blocks = self.weeks_for(division)
        for block in blocks:
            if block.date >= today:
                return block
        return blocks[-1] if blocks else None

    def blocks_for_key(self, week_key: str) -> Dict[str, WeekBlock]:
        """Division -> block for every division scheduled on this date|map"""
        found = {}
        for division in self.divisions:
            for block in self.weeks_for(division):
                if block.week_key == week_key:
                    found[division] = block
                    break
        return found

    def active_week_keys(self, today: datetime.date) -> List[str]:
        keys = []
        for division in self.divisions:
            block = self.active_week(division, today)
            if block and block.week_key not in keys:
                keys.append(block.week_key)
        return keys
