from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands

from application.formatting import render_balances, render_rounds, render_settlement_history
from application.room_history import RoomHistory
from application.services import (
    ExternalContext,
    create_room,
    get_room_summary,
    get_settlement_history,
    join_room,
    leave_room,
    record_payment,
    settle_room,
    start_new_round,
    undo_last_payment,
)
from domain.money import DEFAULT_LOCALE, parse_to_cents
from infrastructure.db.backends import Repositories

logger = logging.getLogger(__name__)


def _build_external_context(user: discord.abc.User) -> ExternalContext:
    """Create an `ExternalContext` from a Discord user."""

    return ExternalContext(
        provider="discord",
        provider_user_id=str(user.id),
        display_name=user.display_name or user.name,
    )


def create_discord_bot(
    repos: Repositories,
    locale: str = DEFAULT_LOCALE,
) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface, using the `!` prefix.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.members = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)
    room_history = RoomHistory(repos.kv_store)

    async def reply(ctx: commands.Context, result) -> None:
        # Every member of a room is expected to be in the channel, so the
        # broadcast text is posted once instead of per member.
        if not result.success:
            await ctx.send(result.error_message or "Something went wrong.")
        elif result.broadcasts:
            await ctx.send(result.broadcasts[0].text)

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.send(f"{error}. Type !help for usage.")
            return
        logger.error("Command %s failed: %s", ctx.command, error, exc_info=error)
        await ctx.send("Something went wrong.")

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await ctx.send(
            "Welcome to the game ledger bot (Discord)!\n"
            "Use !new to open a room or !join <code> to sit down.\n"
            "Type !help to see available commands."
        )

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(
            "!new [name]               - open a new room\n"
            "!join <code> [name]       - join a room by its code\n"
            "!leave                    - leave your room\n"
            "!pay <amount> @player     - record that you paid another player\n"
            "!undo                     - delete your last payment\n"
            "!list                     - show everyone's balance\n"
            "!rounds                   - show per-round results\n"
            "!round                    - start the next round\n"
            "!settle                   - settle up and show who pays whom\n"
            "!history                  - your past settlements\n"
            "!rooms                    - your recent rooms\n"
        )

    @bot.command(name="new")
    async def new_cmd(ctx: commands.Context, *, nickname: Optional[str] = None):
        external_ctx = _build_external_context(ctx.author)
        result = create_room(
            external_ctx,
            nickname,
            repos.rooms,
            repos.participants,
            room_history,
        )
        if not result.success:
            await ctx.send(result.error_message)
            return

        await ctx.send(
            f"Room {result.room.code} is open. Others can join with !join {result.room.code}"
        )

    @bot.command(name="join")
    async def join_cmd(ctx: commands.Context, code: str, *, nickname: Optional[str] = None):
        external_ctx = _build_external_context(ctx.author)
        result = join_room(
            external_ctx,
            code,
            nickname,
            repos.rooms,
            repos.participants,
            room_history,
        )
        if not result.success:
            await ctx.send(result.error_message)
            return

        await ctx.send(f"{result.participant.emoji} {result.participant.name} joined room {result.room.code}.")

    @bot.command(name="leave")
    async def leave_cmd(ctx: commands.Context):
        result = leave_room(_build_external_context(ctx.author), repos.participants)
        await reply(ctx, result)

    @bot.command(name="pay")
    async def pay_cmd(ctx: commands.Context, amount: str, payee: discord.Member):
        """
        !pay <amount> @payee    -> record a payment from the author to payee
        """

        cents = parse_to_cents(amount)
        if cents is None:
            await ctx.send("Amount must be a positive number.")
            return

        result = record_payment(
            _build_external_context(ctx.author),
            str(payee.id),
            cents,
            repos.rooms,
            repos.participants,
            repos.payments,
            locale,
        )
        await reply(ctx, result)

    @bot.command(name="undo")
    async def undo_cmd(ctx: commands.Context):
        result = undo_last_payment(
            _build_external_context(ctx.author),
            repos.rooms,
            repos.participants,
            repos.payments,
            locale,
        )
        await reply(ctx, result)

    @bot.command(name="list")
    async def list_cmd(ctx: commands.Context):
        result = get_room_summary(
            _build_external_context(ctx.author),
            repos.rooms,
            repos.participants,
            repos.payments,
        )
        if not result.success:
            await ctx.send(result.error_message)
            return

        summary = result.summary
        await ctx.send(
            f"Room {summary.room.code}, round {summary.room.current_round}\n"
            + render_balances(summary.balances, locale)
        )

    @bot.command(name="rounds")
    async def rounds_cmd(ctx: commands.Context):
        result = get_room_summary(
            _build_external_context(ctx.author),
            repos.rooms,
            repos.participants,
            repos.payments,
        )
        if not result.success:
            await ctx.send(result.error_message)
            return

        summary = result.summary
        await ctx.send(render_rounds(summary.rounds, summary.participants, locale))

    @bot.command(name="round")
    async def round_cmd(ctx: commands.Context):
        result = start_new_round(
            _build_external_context(ctx.author),
            repos.rooms,
            repos.participants,
        )
        await reply(ctx, result)

    @bot.command(name="settle")
    async def settle_cmd(ctx: commands.Context):
        result = settle_room(
            _build_external_context(ctx.author),
            repos.rooms,
            repos.participants,
            repos.payments,
            repos.history,
            locale,
        )
        await reply(ctx, result)

    @bot.command(name="history")
    async def history_cmd(ctx: commands.Context):
        result = get_settlement_history(_build_external_context(ctx.author), repos.history)
        await ctx.send(render_settlement_history(result.snapshots, locale))

    @bot.command(name="rooms")
    async def rooms_cmd(ctx: commands.Context):
        recent = room_history.list(str(ctx.author.id))
        if not recent:
            await ctx.send("No recent rooms.")
            return

        lines = [f"{r.code}  {r.player_name or ''}  {r.last_visited[:10]}" for r in recent]
        await ctx.send("\n".join(lines))

    return bot
