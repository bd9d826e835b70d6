from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes, ConversationHandler

from calculon.bot.handlers.states import (
    ASKING_DELETE_CONFIRMATION, CONFIRM_KEYBOARD, NO_ANSWERS, YES_ANSWERS,
)
from calculon.bot.session import NO_GOAL_PROMPT, error_text, get_tracker, require_login
from calculon.core.errors import TrackerError


async def start_delete_goal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point of /delete: asks before deleting the selected goal."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return ConversationHandler.END

    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return ConversationHandler.END

    context.user_data['goal_to_delete'] = goal.id
    await update.message.reply_text(
        f"🗑️ Delete the goal '{goal.name}'? Its expenses and budget adjustments "
        "will be removed too. This cannot be undone.",
        reply_markup=ReplyKeyboardMarkup(CONFIRM_KEYBOARD, one_time_keyboard=True, resize_keyboard=True),
    )
    return ASKING_DELETE_CONFIRMATION


async def handle_delete_confirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    answer = update.message.text.lower().strip()
    goal_id = context.user_data.pop('goal_to_delete', None)

    if goal_id is None or answer in NO_ANSWERS or answer not in YES_ANSWERS:
        await update.message.reply_text("Nothing was deleted.", reply_markup=ReplyKeyboardRemove())
        return ConversationHandler.END

    tracker = get_tracker(context)
    goal = tracker.get_goal(goal_id)
    try:
        tracker.delete_goal(goal_id)
    except TrackerError as e:
        await update.message.reply_text(error_text(e), reply_markup=ReplyKeyboardRemove())
        return ConversationHandler.END

    name = goal.name if goal else "Goal"
    await update.message.reply_text(f"🗑️ '{name}' deleted.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END
