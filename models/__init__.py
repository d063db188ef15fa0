"""Models package - Core data structures and stores

BatchCache lives in models.cache and is imported from there directly; it
depends on the parsing package, which itself depends on these records.
"""

from .entities import (
    Team,
    MatchSlot,
    WeekBlock,
    UpdatePair,
    ParseOk,
    ParseErr,
    ParseResult,
    ApplyOutcome,
    normalize_cell,
)
from .properties import (
    PropertiesStore,
    PublishedMessageSet,
    load_week_store,
    save_week_store,
    reset_week_store,
    load_published,
    save_published,
    load_cursor,
    save_cursor,
    row_key,
)

__all__ = [
    'Team',
    'MatchSlot',
    'WeekBlock',
    'UpdatePair',
    'ParseOk',
    'ParseErr',
    'ParseResult',
    'ApplyOutcome',
    'normalize_cell',
    'PropertiesStore',
    'PublishedMessageSet',
    'load_week_store',
    'save_week_store',
    'reset_week_store',
    'load_published',
    'save_published',
    'load_cursor',
    'save_cursor',
    'row_key',
]
