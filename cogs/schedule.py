"""
Schedule Module - admin slash commands and log-channel embeds
Compatible with discord.Client (no commands.Bot required)
"""
import discord
from discord import app_commands
from typing import List, Optional

from config import config, BOARD_COLORS
from managers.schedule_manager import reset_week
from models.properties import (
    PropertiesStore, ROLES, load_cursor, load_published, load_week_store, stored_week_keys,
)
from utils.error_handling import ErrorKind


# ============================================================================
# PERMISSION DECORATORS
# ============================================================================

def is_admin_or_has_role():
    """Check if user is admin or has one of the configured admin roles"""
    async def predicate(interaction: discord.Interaction) -> bool:
        if not interaction.guild:
            print(f"❌ Permission: {interaction.user.name} failed (No guild context)")
            return False

        if interaction.user.id == interaction.guild.owner_id:
            return True

        try:
            if interaction.user.guild_permissions.administrator:
                return True
        except (AttributeError, TypeError) as e:
            print(f"⚠️ Permission check error for {interaction.user.name}: {e}")

        try:
            user_role_ids = {role.id for role in interaction.user.roles}
            if user_role_ids & set(config.ADMIN_ROLE_IDS):
                return True
        except (AttributeError, TypeError) as e:
            print(f"⚠️ Role check error for {interaction.user.name}: {e}")

        print(f"❌ Permission DENIED for {interaction.user.name} (ADMIN_ROLE_IDS: {config.ADMIN_ROLE_IDS})")
        return False
    return app_commands.check(predicate)


# ============================================================================
# EMBED BUILDERS
# ============================================================================

def build_summary_embed(summary, reports: Optional[list] = None) -> discord.Embed:
    """Batch summary for the log channel"""
    color = BOARD_COLORS["error"] if summary.errors or summary.unmatched else BOARD_COLORS["created"]
    embed = discord.Embed(title="📥 Schedule batch", color=color)

    embed.add_field(name="Processed", value=str(summary.processed), inline=True)
    embed.add_field(name="Applied", value=f"{summary.applied} ({summary.changed} changed)", inline=True)
    embed.add_field(name="Stop", value=summary.stop_reason, inline=True)

    if summary.touched_week_keys:
        embed.add_field(name="Weeks touched", value="\n".join(summary.touched_week_keys)[:1024], inline=False)

    if summary.unmatched:
        lines = [f"• {outcome.describe()}" for outcome in summary.unmatched[:10]]
        embed.add_field(name=f"Unmatched ({len(summary.unmatched)})", value="\n".join(lines)[:1024], inline=False)

    errors = [e for e in summary.errors if e["kind"] != ErrorKind.NO_VS.value]
    if errors:
        counts = {}
        for error in errors:
            counts[error["kind"]] = counts.get(error["kind"], 0) + 1
        embed.add_field(name="Errors", value="\n".join(f"• {k}: {v}" for k, v in counts.items()), inline=False)

    if reports:
        lines = [
            f"`{report.week_key}` " + " · ".join(f"{o.role} {o.action}" for o in report.outcomes)
            for report in reports
        ]
        embed.add_field(name="Boards", value="\n".join(lines)[:1024], inline=False)

    embed.set_footer(text=f"Cursor {summary.cursor}")
    return embed


def build_warning_embed(error: dict) -> discord.Embed:
    """Captain-facing warning for a message that named unknown or mismatched teams"""
    context = error.get("context") or {}
    kind = error.get("kind")
    embed = discord.Embed(color=BOARD_COLORS["error"])

    if kind == ErrorKind.CROSS_DIVISION.value:
        embed.title = "⚠️ Teams are in different divisions"
        embed.description = (
            f"**{context.get('home')}** ({context.get('home_division')}) vs "
            f"**{context.get('away')}** ({context.get('away_division')})"
        )
    elif kind == ErrorKind.TEAM_NOT_FOUND.value:
        embed.title = "⚠️ Team not recognised"
        lines = [f"Division: {context.get('division', 'any')}"]
        for side in ("home", "away"):
            unresolved = context.get(f"unresolved_{side}")
            if unresolved:
                line = f"Unknown: **{unresolved}**"
                suggestions = context.get(f"suggestions_{side}") or []
                if suggestions:
                    line += f" (did you mean {', '.join(suggestions)}?)"
                lines.append(line)
        if context.get("reason"):
            lines.append(context["reason"])
        embed.description = "\n".join(lines)
    else:
        embed.title = f"⚠️ {kind}"
        embed.description = ", ".join(f"{k}={v}" for k, v in context.items())[:4000] or None

    if error.get("message_id"):
        embed.set_footer(text=f"Message {error['message_id']}")
    return embed


def build_status_embed(store: PropertiesStore, channel_id) -> discord.Embed:
    """Cursor and published boards at a glance"""
    embed = discord.Embed(title="📋 Schedule board status", color=BOARD_COLORS["up-to-date"])
    embed.add_field(name="Cursor", value=str(load_cursor(store, channel_id) or "none"), inline=False)

    lines = []
    for week_key in stored_week_keys(store)[-10:]:
        scheduled = len(load_week_store(store, week_key)["schedule"])
        published = load_published(store, week_key)
        live = ", ".join(role for role in ROLES if published.message_id(role)) or "none"
        lines.append(f"`{week_key}` {scheduled} scheduled · live: {live}")
    embed.add_field(name="Weeks", value="\n".join(lines) or "No kickoffs recorded yet", inline=False)
    return embed


# ============================================================================
# SLASH COMMANDS
# ============================================================================

def register_schedule_commands(client):
    """Add the schedule commands to client.tree"""

    async def week_key_autocomplete(
        interaction: discord.Interaction,
        current: str
    ) -> List[app_commands.Choice[str]]:
        current_lower = (current or "").lower()
        keys = [k for k in stored_week_keys(client.store) if current_lower in k.lower()]
        return [app_commands.Choice(name=k, value=k) for k in keys[-25:]]

    @client.tree.command(name="schedule_sync", description="Admin: read new schedule messages and refresh the board")
    @is_admin_or_has_role()
    async def schedule_sync(interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)
        result = await client.run_sync_cycle(reason=f"/schedule_sync by {interaction.user.name}")
        if result is None:
            await interaction.followup.send("❌ Sync failed, see the debug channel.", ephemeral=True)
            return
        summary, reports = result
        await interaction.followup.send(embed=build_summary_embed(summary, reports), ephemeral=True)

    @client.tree.command(name="schedule_publish", description="Admin: republish a week's board")
    @app_commands.describe(week_key="date|map (defaults to the active weeks)")
    @app_commands.autocomplete(week_key=week_key_autocomplete)
    @is_admin_or_has_role()
    async def schedule_publish(interaction: discord.Interaction, week_key: Optional[str] = None):
        await interaction.response.defer(ephemeral=True)
        reports = await client.publish_weeks([week_key] if week_key else None)
        if not reports:
            await interaction.followup.send("❌ Nothing published.", ephemeral=True)
            return
        text = "\n".join(
            f"`{r.week_key}` " + " · ".join(f"{o.role} {o.action}" for o in r.outcomes)
            for r in reports
        )
        await interaction.followup.send(text, ephemeral=True)

    @client.tree.command(name="schedule_reset", description="Admin: clear every kickoff recorded for a week")
    @app_commands.describe(week_key="date|map of the week to clear")
    @app_commands.autocomplete(week_key=week_key_autocomplete)
    @is_admin_or_has_role()
    async def schedule_reset(interaction: discord.Interaction, week_key: str):
        await interaction.response.defer(ephemeral=True)
        reset_week(client.store, week_key)
        await client.publish_weeks([week_key])
        await interaction.followup.send(f"🗑️ Cleared `{week_key}` and republished its board.", ephemeral=True)

    @client.tree.command(name="schedule_status", description="Admin: show the poll cursor and published boards")
    @is_admin_or_has_role()
    async def schedule_status(interaction: discord.Interaction):
        embed = build_status_embed(client.store, config.SCHEDULE_CHANNEL_ID)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    print("✅ Schedule commands registered")
