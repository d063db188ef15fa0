#!/usr/bin/env python
"""
Module Integration Test

Tests that every package module can be imported and wired together.
"""


def test_config_module():
    from config import config, BotConfig, SCRIPT_DIR, DIVISIONS
    assert isinstance(config, BotConfig)
    assert SCRIPT_DIR
    assert DIVISIONS == ["Bronze", "Silver", "Gold"]


def test_models_package():
    from models import PropertiesStore, PublishedMessageSet, WeekBlock, ParseOk, ParseErr
    from models.cache import BatchCache
    from models.database import GoogleSheetsManager, get_gs_manager
    from models.interfaces import ChatRelay, ScheduleStore
    assert callable(get_gs_manager)


def test_utils_package():
    from utils import log_error, log_event, is_retryable_error, RelayHTTPError, format_kickoff
    assert is_retryable_error(RelayHTTPError(503))
    assert is_retryable_error(RelayHTTPError(429))
    assert not is_retryable_error(RelayHTTPError(404))
    assert is_retryable_error(Exception("APIError: [503] service unavailable"))


def test_parsing_package():
    from parsing.pairs import interpret_message
    from parsing.week_resolver import STRATEGIES
    assert len(STRATEGIES) == 5


def test_managers_package():
    from managers import apply_update, render_board, reconcile_week, poll_channel, RelayClient
    assert callable(poll_channel)


def test_bot_module():
    import bot
    assert bot.client.tree is not None
    assert bot.poll_schedule_channel is not None
