"""
Domain records shared by the interpretation pipeline and the board.

Teams, week blocks and match slots mirror the schedule spreadsheet; update
pairs and parse results are ephemeral, produced per message.
"""

import datetime
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple, Union

from config import BYE_MARKER
from utils.error_handling import ErrorKind


def normalize_cell(value: str) -> str:
    """Case/whitespace-insensitive form used to compare team cells"""
    return " ".join((value or "").lower().split())


@dataclass
class Team:
    """A roster entry; canonical names are unique within a division"""
    name: str
    division: str
    aliases: set = field(default_factory=set)

    def __post_init__(self):
        self.name = self.name.strip().upper()


@dataclass
class MatchSlot:
    """One row of a week block"""
    row_index: int
    home: str = ""
    away: str = ""
    result: Optional[Tuple[int, int]] = None

    @property
    def schedulable(self) -> bool:
        home, away = self.home.strip(), self.away.strip()
        if not home or not away:
            return False
        return BYE_MARKER.upper() not in (home.upper(), away.upper())

    @property
    def played(self) -> bool:
        return self.result is not None

    def has_pair(self, team_a: str, team_b: str) -> bool:
        """Directionless exact match on normalized team cells"""
        cells = {normalize_cell(self.home), normalize_cell(self.away)}
        return cells == {normalize_cell(team_a), normalize_cell(team_b)}


@dataclass
class WeekBlock:
    """One week's matches for one division"""
    division: str
    index: int
    map: str
    date: datetime.date
    label: str = ""
    top_row: Optional[int] = None
    rows: List[MatchSlot] = field(default_factory=list)

    @property
    def week_key(self) -> str:
        return f"{self.date.isoformat()}|{self.map}"

    @property
    def title(self) -> str:
        return self.label or f"Week {self.index + 1}"

    def slot_for(self, team_a: str, team_b: str) -> Optional[MatchSlot]:
        for slot in self.rows:
            if slot.schedulable and slot.has_pair(team_a, team_b):
                return slot
        return None

    def has_pair(self, team_a: str, team_b: str) -> bool:
        return self.slot_for(team_a, team_b) is not None

    def pair_unplayed(self, team_a: str, team_b: str) -> bool:
        slot = self.slot_for(team_a, team_b)
        return slot is not None and not slot.played


@dataclass
class UpdatePair:
    """A resolved schedule update, consumed immediately by the applier"""
    division: str
    home: str
    away: str
    when_text: str
    epoch_seconds: Optional[int]
    week_key: str
    block_index: int
    row_index: Optional[int] = None
    time_defaulted: bool = False

    def to_dict(self):
        return asdict(self)


@dataclass
class ParseOk:
    pair: UpdatePair

    @property
    def ok(self) -> bool:
        return True


@dataclass
class ParseErr:
    kind: ErrorKind
    context: Dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.kind.value}: {details}" if details else self.kind.value


ParseResult = Union[ParseOk, ParseErr]


@dataclass
class ApplyOutcome:
    """Result of writing one UpdatePair into its WeekStore"""
    ok: bool
    week_key: str
    division: str
    home: str
    away: str
    row_key: Optional[str] = None
    changed: bool = False
    reason: Optional[ErrorKind] = None
    candidates: List[int] = field(default_factory=list)

    def describe(self) -> str:
        if self.ok:
            state = "updated" if self.changed else "unchanged"
            return f"{self.division} {self.home} vs {self.away} -> {self.row_key} ({state})"
        text = f"{self.reason.value}: {self.division} {self.home} vs {self.away} in {self.week_key}"
        if self.candidates:
            text += f" (ambiguous rows {', '.join(str(c) for c in self.candidates)})"
        return text
