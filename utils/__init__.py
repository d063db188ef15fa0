"""Utils package - Utility functions and helpers"""

from .error_handling import (
    ErrorKind,
    RelayHTTPError,
    log_error,
    log_event,
    is_retryable_error,
)
from .formatting import (
    display_width,
    pad_display,
    format_kickoff,
    align_columns,
    clip_message,
)
from .timestamp import (
    LEAGUE_TZ,
    snowflake_to_datetime,
    datetime_to_snowflake,
    now_league,
    to_league,
    league_instant,
    league_epoch,
)

__all__ = [
    'ErrorKind',
    'RelayHTTPError',
    'log_error',
    'log_event',
    'is_retryable_error',
    'display_width',
    'pad_display',
    'format_kickoff',
    'align_columns',
    'clip_message',
    'LEAGUE_TZ',
    'snowflake_to_datetime',
    'datetime_to_snowflake',
    'now_league',
    'to_league',
    'league_instant',
    'league_epoch',
]
