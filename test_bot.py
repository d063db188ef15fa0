"""Tests for the bot's sync-cycle scheduling"""

import asyncio

import discord
import pytest

from bot import ScheduleBoardBot


@pytest.fixture
async def bot():
    instance = ScheduleBoardBot(intents=discord.Intents.default())
    instance.sync_calls = []
    instance.failures = []

    async def sync_once():
        instance.sync_calls.append(True)
        return ("summary", [])

    async def notify_failure(action, error):
        instance.failures.append((action, error))

    instance._sync_once = sync_once
    instance.notify_failure = notify_failure
    yield instance


async def _drain(bot):
    while bot.background_tasks:
        await asyncio.gather(*list(bot.background_tasks), return_exceptions=True)


async def test_spawned_cycle_is_tracked_until_done(bot):
    task = bot.spawn_cycle("message 1")
    assert task in bot.background_tasks
    await _drain(bot)
    assert bot.sync_calls == [True]
    assert not bot.background_tasks


async def test_failed_background_cycle_is_reported(bot):
    async def broken():
        raise RuntimeError("sheet down")
    bot._sync_once = broken

    bot.spawn_cycle("message 2")
    await _drain(bot)
    assert len(bot.failures) == 1
    action, error = bot.failures[0]
    assert action == "Background sync cycle"
    assert str(error) == "sheet down"


async def test_message_during_publish_runs_after_it(bot):
    async def load_cache():
        return object()

    async def publish(cache, keys):
        # A message lands while the publish holds the lock
        await bot.run_sync_cycle(reason="message 3")
        return ["report"]

    bot.load_cache = load_cache
    bot._publish = publish

    reports = await bot.publish_weeks(["2025-09-28|dod_avalanche"])
    assert reports == ["report"]
    assert bot.sync_calls == []
    await _drain(bot)
    assert bot.sync_calls == [True]
    assert not bot.poll_pending
