"""
Schedule Board bot

Reads captains' schedule messages from the schedule channel, records the
kickoffs against the league spreadsheet grid and keeps one live board per
week in the board channel.
"""

import sys
import asyncio
import datetime
from typing import List, Optional

import discord
from discord import app_commands
from discord.ext import tasks

from config import config
from cogs.schedule import build_summary_embed, build_warning_embed, register_schedule_commands
from managers.poller import PollBudget, poll_channel
from managers.publisher import sync_week_board
from managers.relay_client import RelayClient
from models.cache import BatchCache
from models.database import get_gs_manager
from models.properties import PropertiesStore
from schedule_sheets import ScheduleSheets
from utils.error_handling import ErrorKind, RelayHTTPError, log_error
from utils.timestamp import now_league

# Warnings worth a captain's attention; everything else only lands in the summary
WARN_KINDS = {ErrorKind.TEAM_NOT_FOUND.value, ErrorKind.CROSS_DIVISION.value}


# ============================================================================
# DISCORD BOT CLIENT
# ============================================================================

class ScheduleBoardBot(discord.Client):
    """Discord client that owns the poll loop and the board"""

    def __init__(self, *, intents: discord.Intents):
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)
        self.store = PropertiesStore()
        self.relay: Optional[RelayClient] = None
        self.poll_lock = asyncio.Lock()
        self.poll_pending = False
        self.background_tasks = set()
        self.last_summary = None
        self.start_time = datetime.datetime.now(datetime.timezone.utc)

    async def setup_hook(self):
        """Setup hook called before the gateway connects"""
        self.relay = RelayClient(token=config.DISCORD_BOT_TOKEN)
        await self.relay.open()

        register_schedule_commands(self)
        await self.tree.sync()
        print("✅ Commands synced to Discord")

        poll_schedule_channel.change_interval(minutes=config.POLL_INTERVAL_MINUTES)
        poll_schedule_channel.start()

    async def close(self):
        if self.relay:
            await self.relay.close()
        await super().close()

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def load_cache(self) -> Optional[BatchCache]:
        """Fresh BatchCache for this batch (gspread runs in a worker thread)"""
        try:
            sheets = ScheduleSheets(get_gs_manager())
            return await asyncio.to_thread(BatchCache.load, sheets)
        except Exception as e:
            log_error(e, "Building batch cache")
            await self.notify_failure("Reading the schedule spreadsheet", e)
            return None

    async def run_sync_cycle(self, reason: str = "interval"):
        """Poll, apply and republish; one cycle at a time

        Returns:
            (PollSummary, [PublishReport]) of the last cycle, or None on failure
        """
        if self.poll_lock.locked():
            # The running cycle picks up the new messages on its rerun
            self.poll_pending = True
            return self.last_summary

        async with self.poll_lock:
            result = None
            while True:
                self.poll_pending = False
                print(f"🔄 Sync cycle ({reason})")
                result = await self._sync_once()
                if result is None or not self.poll_pending:
                    break
                reason = "rerun"
            return result

    async def _sync_once(self):
        cache = await self.load_cache()
        if cache is None:
            return None

        budget = PollBudget(config.POLL_MAX_MESSAGES, config.POLL_MAX_SECONDS)
        summary = await poll_channel(config.SCHEDULE_CHANNEL_ID, self.relay, cache, self.store,
                                     budget, page_size=config.POLL_PAGE_SIZE)
        self.last_summary = (summary, [])

        week_keys = list(summary.touched_week_keys)
        for key in cache.active_week_keys(now_league().date()):
            if key not in week_keys:
                week_keys.append(key)
        reports = await self._publish(cache, week_keys)

        await self.post_log(embed=build_summary_embed(summary, reports))
        for error in summary.errors:
            if error["kind"] in WARN_KINDS:
                await self.post_log(embed=build_warning_embed(error))

        self.last_summary = (summary, reports)
        return self.last_summary

    async def _publish(self, cache: BatchCache, week_keys: List[str]) -> list:
        reports = []
        for week_key in week_keys:
            try:
                reports.append(await sync_week_board(
                    week_key, cache, self.store, self.relay, config.BOARD_CHANNEL_ID,
                    config.LOGGING_CHANNEL_ID,
                ))
            except Exception as e:
                log_error(e, "Publishing board", {"week_key": week_key})
                await self.notify_failure(f"Publishing {week_key}", e)
        return reports

    async def publish_weeks(self, week_keys: Optional[List[str]] = None) -> list:
        """Republish the given weeks (default: each division's active week)"""
        reports = []
        async with self.poll_lock:
            cache = await self.load_cache()
            if cache is not None:
                keys = week_keys or cache.active_week_keys(now_league().date())
                reports = await self._publish(cache, keys)
        if self.poll_pending:
            # Messages arrived while the lock was held
            self.spawn_cycle("pending")
        return reports

    def spawn_cycle(self, reason: str) -> asyncio.Task:
        """Run a sync cycle in the background, holding a reference until it ends"""
        task = asyncio.create_task(self.run_sync_cycle(reason=reason))
        self.background_tasks.add(task)
        task.add_done_callback(self._cycle_done)
        return task

    def _cycle_done(self, task: asyncio.Task):
        self.background_tasks.discard(task)
        if task.cancelled() or task.exception() is None:
            return
        error = task.exception()
        log_error(error, "Background sync cycle")
        notice = asyncio.create_task(self.notify_failure("Background sync cycle", error))
        self.background_tasks.add(notice)
        notice.add_done_callback(self.background_tasks.discard)

    # ------------------------------------------------------------------
    # Log channel
    # ------------------------------------------------------------------

    async def post_log(self, content: str = "", embed: discord.Embed = None, channel_id: int = None):
        channel_id = channel_id or config.LOGGING_CHANNEL_ID
        if not channel_id:
            return
        try:
            await self.relay.post_message(channel_id, content, embeds=[embed.to_dict()] if embed else None)
        except RelayHTTPError as e:
            log_error(e, "Posting to log channel", {"channel_id": channel_id})

    async def notify_failure(self, action: str, error: Exception):
        """Generic infrastructure failure notice for the debug channel"""
        embed = discord.Embed(
            title="❌ Schedule board failure",
            description=f"**{action}**\n```{type(error).__name__}: {str(error)[:1500]}```",
            color=0xE74C3C,
        )
        await self.post_log(embed=embed, channel_id=config.DEBUG_LOG_CHANNEL_ID)


intents = discord.Intents.default()
intents.message_content = True
client = ScheduleBoardBot(intents=intents)


# ============================================================================
# BACKGROUND TASK: POLL SCHEDULE CHANNEL
# ============================================================================

@tasks.loop(minutes=5)
async def poll_schedule_channel():
    """Periodic batch; interval is reset from config in setup_hook"""
    try:
        await client.run_sync_cycle()
    except Exception as e:
        log_error(e, "Scheduled poll")
        await client.notify_failure("Scheduled poll", e)


@poll_schedule_channel.before_loop
async def before_poll():
    await client.wait_until_ready()


# ============================================================================
# EVENTS
# ============================================================================

@client.event
async def on_ready():
    print(f"✅ Logged in as {client.user} (ID: {client.user.id})")
    print(f"   Schedule channel: {config.SCHEDULE_CHANNEL_ID} · Board channel: {config.BOARD_CHANNEL_ID}")


@client.event
async def on_message(message: discord.Message):
    """A new captain message triggers an immediate cycle"""
    if message.author.bot or message.channel.id != config.SCHEDULE_CHANNEL_ID:
        return
    client.spawn_cycle(f"message {message.id}")


if __name__ == "__main__":
    if not config.DISCORD_BOT_TOKEN:
        print("ERROR: DISCORD_BOT_TOKEN environment variable is not set!")
        print("Please create a .env file with:")
        print("    DISCORD_BOT_TOKEN=your_bot_token_here")
        sys.exit(1)

    try:
        print("Starting bot...")
        client.run(config.DISCORD_BOT_TOKEN)
    except discord.LoginFailure:
        print("ERROR: Invalid Bot Token.")
        print("Please check your token at: https://discord.com/developers/applications")
