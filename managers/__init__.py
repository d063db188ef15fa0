"""Managers package - applying, rendering, publishing and polling"""

from .schedule_manager import (
    apply_update,
    find_row,
    reset_week,
)
from .board_renderer import (
    BoardContent,
    render_board,
    current_week_key,
)
from .publisher import (
    PublishReport,
    content_hash,
    reconcile_week,
    sync_week_board,
    format_publish_notice,
)
from .poller import (
    PollBudget,
    PollSummary,
    poll_channel,
)
from .relay_client import RelayClient

__all__ = [
    'apply_update',
    'find_row',
    'reset_week',
    'BoardContent',
    'render_board',
    'current_week_key',
    'PublishReport',
    'content_hash',
    'reconcile_week',
    'sync_week_board',
    'format_publish_notice',
    'PollBudget',
    'PollSummary',
    'poll_channel',
    'RelayClient',
]
