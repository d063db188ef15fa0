"""
Schedule management: write resolved kickoffs into the per-week store.

apply_update() finds the grid row holding a pair inside its week block and
records the kickoff under that row. Misses are reported, never raised.
"""

from typing import List, Optional, Tuple

from models.entities import ApplyOutcome, MatchSlot, UpdatePair, normalize_cell
from models.properties import PropertiesStore, load_week_store, save_week_store, row_key, reset_week_store
from utils.error_handling import ErrorKind, log_event


def _fuzzy_side(cell: str, name: str) -> bool:
    """Cell and resolved name contain one another (case-insensitive)"""
    cell, name = normalize_cell(cell), normalize_cell(name)
    if not cell or not name:
        return False
    return cell in name or name in cell


def _fuzzy_pair(slot: MatchSlot, home: str, away: str) -> bool:
    straight = _fuzzy_side(slot.home, home) and _fuzzy_side(slot.away, away)
    crossed = _fuzzy_side(slot.home, away) and _fuzzy_side(slot.away, home)
    return straight or crossed


def find_row(rows: List[MatchSlot], home: str, away: str) -> Tuple[Optional[MatchSlot], List[int]]:
    """Locate the row for a pair within a block's row window

    Exact (normalized, directionless) match first; otherwise a fuzzy match is
    accepted only when exactly one row qualifies.

    Returns:
        (slot, ambiguous_row_indexes); slot is None on a miss
    """
    schedulable = [slot for slot in rows if slot.schedulable]
    for slot in schedulable:
        if slot.has_pair(home, away):
            return slot, []

    fuzzy = [slot for slot in schedulable if _fuzzy_pair(slot, home, away)]
    if len(fuzzy) == 1:
        return fuzzy[0], []
    return None, [slot.row_index for slot in fuzzy]


def apply_update(pair: UpdatePair, cache, store: PropertiesStore) -> ApplyOutcome:
    """Write one UpdatePair into its WeekStore

    Args:
        pair: Resolved update from the interpretation pipeline
        cache: BatchCache of the current batch (grid reader)
        store: Properties store holding the WeekStores

    Returns:
        ApplyOutcome; ok=False with a reason code when the block top or the
        row could not be found
    """
    outcome = ApplyOutcome(ok=False, week_key=pair.week_key, division=pair.division,
                           home=pair.home, away=pair.away)

    top_row = cache.block_top(pair.division, pair.block_index)
    block = cache.block(pair.division, pair.block_index)
    if top_row is None or block is None:
        outcome.reason = ErrorKind.BLOCK_TOP_NOT_FOUND
        log_event(outcome.reason, week_key=pair.week_key, division=pair.division,
                  block_index=pair.block_index)
        return outcome

    slot, ambiguous = find_row(block.rows, pair.home, pair.away)
    if slot is None:
        outcome.reason = ErrorKind.ROW_NOT_FOUND
        outcome.candidates = ambiguous
        log_event(outcome.reason, week_key=pair.week_key, division=pair.division,
                  home=pair.home, away=pair.away, top_row=top_row,
                  ambiguous_rows=ambiguous or "none")
        return outcome

    key = row_key(pair.division, slot.row_index)
    entry = {
        "whenText": pair.when_text,
        "epochSeconds": pair.epoch_seconds,
        "home": slot.home,
        "away": slot.away,
    }

    week_store = load_week_store(store, pair.week_key)
    outcome.ok = True
    outcome.row_key = key
    if week_store["schedule"].get(key) != entry:
        week_store["schedule"][key] = entry
        save_week_store(store, pair.week_key, week_store)
        outcome.changed = True
    return outcome


def reset_week(store: PropertiesStore, week_key: str):
    """Clear every kickoff recorded for a week"""
    reset_week_store(store, week_key)
    log_event("week_reset", week_key=week_key)
    print(f"🗑️ Week store reset for {week_key}")
