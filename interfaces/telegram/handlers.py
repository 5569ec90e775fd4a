from __future__ import annotations

import logging

import telebot
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

from application.formatting import render_balances, render_rounds, render_settlement_history
from application.room_history import RoomHistory
from application.services import (
    ExternalContext,
    create_room,
    get_room_summary,
    get_settlement_history,
    initiate_payment,
    join_room,
    leave_room,
    record_payment,
    settle_room,
    start_new_round,
    undo_last_payment,
)
from domain.money import DEFAULT_LOCALE, format_amount, parse_to_cents
from infrastructure.db.backends import Repositories
from interfaces.telegram.callback_data import (
    encode_cancel,
    encode_pay_choice,
    is_cancel,
    parse_cancel,
    parse_pay_choice,
)

logger = logging.getLogger(__name__)


def _build_external_context(user) -> ExternalContext:
    """Extract a channel-agnostic context object from a Telegram user."""

    display_name = " ".join(
        part for part in (user.first_name, user.last_name) if part
    ) or (user.username or "")
    return ExternalContext(
        provider="telegram",
        provider_user_id=str(user.id),
        display_name=display_name,
    )


def create_telegram_bot(
    bot_token: str,
    repos: Repositories,
    locale: str = DEFAULT_LOCALE,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from application services.
    """

    bot = telebot.TeleBot(bot_token)
    room_history = RoomHistory(repos.kv_store)

    def deliver(chat_id, result) -> None:
        if not result.success:
            bot.send_message(chat_id, result.error_message or "Something went wrong.")
            return
        for broadcast in result.broadcasts:
            bot.send_message(broadcast.user_id, broadcast.text)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the game ledger bot!\n"
            "Use /new to open a room or /join <code> to sit down.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        bot.send_message(
            message.chat.id,
            "/new [name]            - open a new room\n"
            "/join <code> [name]    - join a room by its code\n"
            "/leave                 - leave your room\n"
            "/pay <amount>          - pay <amount> to another player\n"
            "/undo                  - delete your last payment\n"
            "/list                  - show everyone's balance\n"
            "/rounds                - show per-round results\n"
            "/round                 - start the next round\n"
            "/settle                - settle up and show who pays whom\n"
            "/history               - your past settlements\n"
            "/rooms                 - your recent rooms\n",
        )

    @bot.message_handler(commands=["new"])
    def handle_new(message):
        parts = message.text.split(maxsplit=1)
        nickname = parts[1] if len(parts) > 1 else None
        ctx = _build_external_context(message.from_user)

        try:
            result = create_room(ctx, nickname, repos.rooms, repos.participants, room_history)
        except Exception as exc:
            logger.exception("Failed to create room for %s", ctx.participant_id)
            bot.send_message(message.chat.id, f"Could not create a room: {exc}")
            return

        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(
            message.chat.id,
            f"Room {result.room.code} is open. Share the code so others can /join it.",
        )

    @bot.message_handler(commands=["join"])
    def handle_join(message):
        parts = message.text.split(maxsplit=2)
        if len(parts) < 2:
            bot.send_message(message.chat.id, "Please enter a room code.")
            return

        nickname = parts[2] if len(parts) > 2 else None
        ctx = _build_external_context(message.from_user)
        result = join_room(ctx, parts[1], nickname, repos.rooms, repos.participants, room_history)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(message.chat.id, f"You joined room {result.room.code}.")
        deliver(message.chat.id, result)

    @bot.message_handler(commands=["leave"])
    def handle_leave(message):
        ctx = _build_external_context(message.from_user)
        result = leave_room(ctx, repos.participants)
        if result.success:
            bot.send_message(message.chat.id, "You left the room.")
        deliver(message.chat.id, result)

    @bot.message_handler(commands=["pay"])
    def handle_pay(message):
        parts = message.text.split(maxsplit=1)
        if len(parts) < 2:
            bot.send_message(message.chat.id, "Please enter an amount.")
            return

        amount = parse_to_cents(parts[1])
        if amount is None:
            bot.send_message(message.chat.id, "Amount must be a positive number.")
            return

        ctx = _build_external_context(message.from_user)
        result = initiate_payment(ctx, amount, repos.rooms, repos.participants)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        markup = InlineKeyboardMarkup(row_width=2)
        for candidate in result.candidates:
            markup.add(
                InlineKeyboardButton(
                    f"{candidate.emoji} {candidate.name}",
                    callback_data=encode_pay_choice(result.payer.id, candidate.id, amount),
                )
            )
        markup.add(InlineKeyboardButton("cancel", callback_data=encode_cancel(result.payer.id)))

        bot.send_message(
            message.chat.id,
            f"Who did you pay {format_amount(amount, locale)}?",
            reply_markup=markup,
        )

    @bot.callback_query_handler(func=lambda call: call.data.startswith("pay:"))
    def handle_pay_choice(call):
        try:
            payer_id, payee_id, amount = parse_pay_choice(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid selection.")
            return

        if str(call.from_user.id) != payer_id:
            bot.answer_callback_query(call.id, "Only the player who started this payment can choose.")
            return

        ctx = _build_external_context(call.from_user)
        try:
            result = record_payment(
                ctx,
                payee_id,
                amount,
                repos.rooms,
                repos.participants,
                repos.payments,
                locale,
            )
            deliver(call.message.chat.id, result)
        except Exception:
            logger.exception("Failed to record payment from %s", ctx.participant_id)
            bot.send_message(call.message.chat.id, "Could not record the payment.")
        finally:
            bot.delete_message(call.message.chat.id, call.message.id)

    @bot.callback_query_handler(func=lambda call: is_cancel(call.data))
    def handle_cancel(call):
        try:
            payer_id = parse_cancel(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid selection.")
            return

        if str(call.from_user.id) != payer_id:
            bot.answer_callback_query(call.id, "Only the player who started this payment can cancel.")
            return

        bot.delete_message(call.message.chat.id, call.message.id)

    @bot.message_handler(commands=["undo"])
    def handle_undo(message):
        ctx = _build_external_context(message.from_user)
        result = undo_last_payment(ctx, repos.rooms, repos.participants, repos.payments, locale)
        deliver(message.chat.id, result)

    @bot.message_handler(commands=["list"])
    def handle_list(message):
        ctx = _build_external_context(message.from_user)
        result = get_room_summary(ctx, repos.rooms, repos.participants, repos.payments)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        summary = result.summary
        bot.send_message(
            message.chat.id,
            f"Room {summary.room.code}, round {summary.room.current_round}\n"
            + render_balances(summary.balances, locale),
        )

    @bot.message_handler(commands=["rounds"])
    def handle_rounds(message):
        ctx = _build_external_context(message.from_user)
        result = get_room_summary(ctx, repos.rooms, repos.participants, repos.payments)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        summary = result.summary
        bot.send_message(
            message.chat.id,
            render_rounds(summary.rounds, summary.participants, locale),
        )

    @bot.message_handler(commands=["round"])
    def handle_next_round(message):
        ctx = _build_external_context(message.from_user)
        deliver(message.chat.id, start_new_round(ctx, repos.rooms, repos.participants))

    @bot.message_handler(commands=["settle"])
    def handle_settle(message):
        ctx = _build_external_context(message.from_user)
        try:
            result = settle_room(
                ctx,
                repos.rooms,
                repos.participants,
                repos.payments,
                repos.history,
                locale,
            )
        except Exception:
            logger.exception("Failed to settle room for %s", ctx.participant_id)
            bot.send_message(message.chat.id, "Could not settle the room.")
            return

        deliver(message.chat.id, result)

    @bot.message_handler(commands=["history"])
    def handle_history(message):
        ctx = _build_external_context(message.from_user)
        result = get_settlement_history(ctx, repos.history)
        bot.send_message(message.chat.id, render_settlement_history(result.snapshots, locale))

    @bot.message_handler(commands=["rooms"])
    def handle_rooms(message):
        ctx = _build_external_context(message.from_user)
        recent = room_history.list(ctx.participant_id)
        if not recent:
            bot.send_message(message.chat.id, "No recent rooms.")
            return

        lines = [f"{r.code}  {r.player_name or ''}  {r.last_visited[:10]}" for r in recent]
        bot.send_message(message.chat.id, "\n".join(lines))

    return bot
