from __future__ import annotations

import telebot
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

from application import services
from interfaces.commands import COMMANDS, LedgerContext, format_account, safe_dispatch, usage_lines
from interfaces.telegram.callback_data import (
    encode_close_confirmation,
    parse_close_confirmation,
)


def _split_command(text: str) -> tuple[str, list[str]]:
    """Turn "/deposit@bank_bot 3 100" into ("deposit", ["3", "100"])."""

    parts = text.split()
    name = parts[0][1:].split("@", 1)[0]
    return name, parts[1:]


def create_telegram_bot(bot_token: str, ctx: LedgerContext) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from the shared command layer.
    """

    bot = telebot.TeleBot(bot_token)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the bank bot!\n"
            "Use /create_user to register and /deposit, /withdraw, /transfer "
            "to move money.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        bot.send_message(message.chat.id, "\n".join(usage_lines("/")))

    @bot.message_handler(commands=["close"])
    def handle_close(message):
        _, args = _split_command(message.text)
        try:
            account_id = int(args[0]) if len(args) == 1 else None
        except ValueError:
            account_id = None
        if account_id is None:
            bot.send_message(message.chat.id, "Usage: /close <account_id>")
            return

        found = services.find_account_by_id(account_id, ctx.account_repo)
        if not found.success:
            bot.send_message(message.chat.id, found.error_message)
            return

        markup = InlineKeyboardMarkup(row_width=2)
        markup.add(
            InlineKeyboardButton(
                "yes", callback_data=encode_close_confirmation(account_id, True)
            ),
            InlineKeyboardButton(
                "no", callback_data=encode_close_confirmation(account_id, False)
            ),
        )
        bot.send_message(
            message.chat.id,
            f"Close {format_account(found.value)}? "
            "Its balance moves to another account of the same user.",
            reply_markup=markup,
        )

    @bot.message_handler(
        commands=[name for name in COMMANDS if name != "close"]
    )
    def handle_command(message):
        name, args = _split_command(message.text)
        bot.send_message(message.chat.id, safe_dispatch(name, args, ctx))

    @bot.callback_query_handler(func=lambda call: call.data.startswith("close:"))
    def handle_close_confirmation(call):
        """
        Handle the confirm/decline buttons attached to a /close request.
        """

        try:
            accepted, account_id = parse_close_confirmation(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid confirmation.")
            return

        try:
            if accepted:
                reply = safe_dispatch("close", [str(account_id)], ctx)
            else:
                reply = f"Account id={account_id} stays open."
            bot.send_message(call.message.chat.id, reply)
        finally:
            bot.delete_message(call.message.chat.id, call.message.id)

    return bot
