import logging

from telegram import Update
from telegram.ext import ContextTypes

from calculon.bot.session import error_text, get_tracker
from calculon.core.errors import TrackerError

logger = logging.getLogger(__name__)

CREDENTIALS_USAGE = "Usage: `/{command} <email> <password>`"


async def signup_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Creates an account: /signup <email> <password>."""
    if len(context.args or []) != 2:
        await update.message.reply_text(CREDENTIALS_USAGE.format(command='signup'), parse_mode='Markdown')
        return

    tracker = get_tracker(context)
    email, password = context.args
    try:
        tracker.sign_up(email, password)
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return

    if tracker.is_authenticated():
        await update.message.reply_text("✅ Account created successfully. You are logged in!")
    else:
        await update.message.reply_text(
            "✅ Account created successfully. Confirm your email, then log in with `/login`.",
            parse_mode='Markdown',
        )


async def login_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Logs in: /login <email> <password>."""
    if len(context.args or []) != 2:
        await update.message.reply_text(CREDENTIALS_USAGE.format(command='login'), parse_mode='Markdown')
        return

    tracker = get_tracker(context)
    email, password = context.args
    try:
        tracker.sign_in(email, password)
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return

    logger.info("User %s logged in from chat %s", email, update.message.chat_id)
    await update.message.reply_text(
        f"👋 Welcome back! You have {len(tracker.goals)} goal(s). Use `/goals` to see them.",
        parse_mode='Markdown',
    )


async def logout_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    tracker = get_tracker(context)
    try:
        tracker.sign_out()
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return
    await update.message.reply_text("👋 Logged out.")
