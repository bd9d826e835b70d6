import datetime
from typing import Any, Dict

from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes, ConversationHandler
from telegram.helpers import escape_markdown

from calculon.bot.handlers.states import (
    ASKING_AMOUNT, ASKING_CATEGORY, ASKING_CONFIRMATION, ASKING_DATE, ASKING_NOTES,
    CONFIRM_KEYBOARD, NO_ANSWERS, YES_ANSWERS,
)
from calculon.bot.session import NO_GOAL_PROMPT, error_text, get_tracker, require_login
from calculon.config import DEFAULT_CATEGORIES
from calculon.core.errors import TrackerError
from calculon.utils.text_utils import format_currency


def _keyboard(rows) -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(rows, one_time_keyboard=True, resize_keyboard=True)


async def start_expense(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point of /expense."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return ConversationHandler.END

    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return ConversationHandler.END

    context.user_data['pending_expense'] = {"goal_id": goal.id, "goal_name": goal.name}
    await update.message.reply_text(f"💰 New expense for '{goal.name}'. How much did you spend?")
    return ASKING_AMOUNT


async def handle_amount(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data['pending_expense']['amount'] = update.message.text.strip()
    categories = [DEFAULT_CATEGORIES[i:i + 2] for i in range(0, len(DEFAULT_CATEGORIES), 2)]
    await update.message.reply_text(
        "🏷️ Category? Pick one or type your own.",
        reply_markup=_keyboard(categories),
    )
    return ASKING_CATEGORY


async def handle_category(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data['pending_expense']['category'] = update.message.text.strip()
    await update.message.reply_text(
        "📅 Date? (YYYY-MM-DD)",
        reply_markup=_keyboard([["Today"]]),
    )
    return ASKING_DATE


async def handle_date(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    answer = update.message.text.strip()
    if answer.lower() == "today":
        answer = datetime.date.today().isoformat()
    context.user_data['pending_expense']['date'] = answer
    await update.message.reply_text(
        "📝 Any notes? Add details or skip.",
        reply_markup=_keyboard([["Skip"]]),
    )
    return ASKING_NOTES


async def handle_notes(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    answer = update.message.text.strip()
    pending = context.user_data['pending_expense']
    pending['notes'] = None if answer.lower() == "skip" else answer

    await update.message.reply_text(
        f"{_describe(pending)}\n\n*All good?* 🤔",
        reply_markup=_keyboard(CONFIRM_KEYBOARD),
        parse_mode='Markdown',
    )
    return ASKING_CONFIRMATION


def _describe(pending: Dict[str, Any]) -> str:
    """Confirmation text. User input stays outside entities and is escaped."""
    try:
        amount = format_currency(float(pending['amount']))
    except ValueError:
        amount = pending['amount']
    text = (
        f"Add this expense to {escape_markdown(pending['goal_name'])}?\n"
        f"💰 Amount: {escape_markdown(amount)}\n"
        f"🏷️ Category: {escape_markdown(pending['category'])}\n"
        f"📅 Date: {escape_markdown(pending['date'])}"
    )
    if pending.get('notes'):
        text += f"\n📝 Notes: {escape_markdown(pending['notes'])}"
    return text


async def handle_confirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Saves the pending expense on Yes, drops it on No."""
    answer = update.message.text.lower().strip()
    pending = context.user_data.get('pending_expense')

    if not pending:
        await update.message.reply_text(
            "Oops! 😬 There is no pending expense. Start again with /expense.",
            reply_markup=ReplyKeyboardRemove(),
        )
        return ConversationHandler.END

    if answer in NO_ANSWERS:
        context.user_data.pop('pending_expense', None)
        await update.message.reply_text("Expense discarded.", reply_markup=ReplyKeyboardRemove())
        return ConversationHandler.END

    if answer not in YES_ANSWERS:
        await update.message.reply_text(
            "Please answer 'Yes ✅' or 'No ❌'.",
            reply_markup=_keyboard(CONFIRM_KEYBOARD),
        )
        return ASKING_CONFIRMATION

    tracker = get_tracker(context)
    data = {key: pending.get(key) for key in ('goal_id', 'amount', 'category', 'date', 'notes')}
    context.user_data.pop('pending_expense', None)
    try:
        tracker.add_expense(data)
    except TrackerError as e:
        await update.message.reply_text(error_text(e), reply_markup=ReplyKeyboardRemove())
        return ConversationHandler.END

    await update.message.reply_text("✅ Expense added successfully", reply_markup=ReplyKeyboardRemove())
    summary = tracker.goal_summary(pending['goal_id'])
    if summary is not None and summary.over_budget_warning:
        await update.message.reply_text(
            f"⚠️ Warning: You've used {summary.progress_percentage:.1f}% of your budget!"
        )
    return ConversationHandler.END


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data.pop('pending_expense', None)
    context.user_data.pop('goal_to_delete', None)
    await update.message.reply_text("Cancelled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END
