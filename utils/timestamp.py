"""
Timestamp utilities: league timezone, snowflakes and kickoff instants.
"""

import datetime
from typing import Optional

import pytz

from config import TIMEZONE, DEFAULT_KICKOFF_HOUR, DEFAULT_KICKOFF_MINUTE

LEAGUE_TZ = pytz.timezone(TIMEZONE)

# Discord epoch (2015-01-01T00:00:00Z) in milliseconds
DISCORD_EPOCH_MS = 1420070400000


def snowflake_to_datetime(snowflake) -> datetime.datetime:
    """Creation instant (UTC) encoded in a snowflake id"""
    ms = (int(snowflake) >> 22) + DISCORD_EPOCH_MS
    return datetime.datetime.fromtimestamp(ms / 1000, tz=pytz.UTC)


def datetime_to_snowflake(moment: datetime.datetime) -> int:
    """Smallest snowflake created at `moment` (useful as an `after` cursor)"""
    ms = int(moment.timestamp() * 1000) - DISCORD_EPOCH_MS
    return max(ms, 0) << 22


def now_league() -> datetime.datetime:
    """Current time in the league timezone"""
    return datetime.datetime.now(LEAGUE_TZ)


def to_league(moment: Optional[datetime.datetime]) -> datetime.datetime:
    """Convert an aware (or naive UTC) datetime to the league timezone"""
    if moment is None:
        return now_league()
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return moment.astimezone(LEAGUE_TZ)


def league_instant(day: datetime.date, hour: int = DEFAULT_KICKOFF_HOUR,
                   minute: int = DEFAULT_KICKOFF_MINUTE) -> datetime.datetime:
    """Wall-clock time on `day` in the league timezone, DST-correct for that date"""
    naive = datetime.datetime(day.year, day.month, day.day, hour, minute)
    return LEAGUE_TZ.localize(naive)


def league_epoch(day: datetime.date, hour: int = DEFAULT_KICKOFF_HOUR,
                 minute: int = DEFAULT_KICKOFF_MINUTE) -> int:
    return int(league_instant(day, hour, minute).timestamp())
