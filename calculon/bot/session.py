# calculon/bot/session.py
from telegram import Update
from telegram.ext import ContextTypes

from calculon.core.errors import FormValidationError, TrackerError
from calculon.core.tracker import GoalTracker

LOGIN_PROMPT = (
    "🔒 You are not logged in.\n"
    "Use `/login <email> <password>` or create an account with `/signup <email> <password>`."
)
NO_GOAL_PROMPT = "🎯 No goal selected. Create one with `/newgoal <amount> <YYYY-MM-DD> <name>` or pick one with `/goals`."


def get_tracker(context: ContextTypes.DEFAULT_TYPE) -> GoalTracker:
    """Returns the GoalTracker of the current Telegram user, creating it on first use."""
    tracker = context.user_data.get('tracker')
    if tracker is None:
        client = context.bot_data['supabase_factory']()
        tracker = GoalTracker(client)
        context.user_data['tracker'] = tracker
    return tracker


async def require_login(update: Update, tracker: GoalTracker) -> bool:
    if tracker.is_authenticated():
        return True
    await update.message.reply_text(LOGIN_PROMPT, parse_mode='Markdown')
    return False


def error_text(error: TrackerError) -> str:
    if isinstance(error, FormValidationError):
        lines = [f"• {message}" for message in error.fields.values()]
        return "⚠️ Please fix the following:\n" + "\n".join(lines)
    return f"❌ {error.user_message}"
