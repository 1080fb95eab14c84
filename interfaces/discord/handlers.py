from __future__ import annotations

import logging
from typing import Dict, Tuple

import discord
from discord.ext import commands

from application import services
from interfaces.commands import COMMANDS, LedgerContext, format_account, safe_dispatch, usage_lines


logger = logging.getLogger(__name__)

CONFIRM = "✅"
DECLINE = "❌"


def _register_text_command(bot: commands.Bot, name: str, ledger: LedgerContext) -> None:
    @bot.command(name=name)
    async def text_command(ctx: commands.Context, *args: str):
        await ctx.send(safe_dispatch(name, args, ledger))


def create_discord_bot(ledger: LedgerContext) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface: every ledger command as `!<name>`, with
    account closing confirmed through a reaction.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.reactions = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    # Pending close requests keyed by the confirmation message ID.
    # value: (account_id, requester_discord_id)
    pending_closes: Dict[int, Tuple[int, int]] = {}

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send("\n".join(usage_lines("!")))

    for name in COMMANDS:
        if name != "close":
            _register_text_command(bot, name, ledger)

    @bot.command(name="close")
    async def close_cmd(ctx: commands.Context, account_id: int):
        found = services.find_account_by_id(account_id, ledger.account_repo)
        if not found.success:
            await ctx.send(found.error_message)
            return

        confirmation_message = await ctx.send(
            f"{ctx.author.mention}, close {format_account(found.value)}?\n"
            f"React with {CONFIRM} to confirm or {DECLINE} to keep it open."
        )
        await confirmation_message.add_reaction(CONFIRM)
        await confirmation_message.add_reaction(DECLINE)

        pending_closes[confirmation_message.id] = (account_id, ctx.author.id)

    @close_cmd.error
    async def close_cmd_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, (commands.BadArgument, commands.MissingRequiredArgument)):
            await ctx.send("Usage: !close <account_id>")
            return
        raise error

    @bot.event
    async def on_reaction_add(reaction: discord.Reaction, user: discord.abc.User):
        # Ignore bot reactions and reactions not on tracked messages.
        if user.bot:
            return

        message_id = reaction.message.id
        if message_id not in pending_closes:
            return

        account_id, requester_id = pending_closes[message_id]

        # Only the member who asked can confirm/decline.
        if user.id != requester_id:
            return

        emoji = str(reaction.emoji)
        if emoji == CONFIRM:
            reply = safe_dispatch("close", [str(account_id)], ledger)
        elif emoji == DECLINE:
            reply = f"Account id={account_id} stays open."
        else:
            return

        pending_closes.pop(message_id, None)
        await reaction.message.channel.send(reply)

    return bot
