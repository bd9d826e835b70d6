from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from calculon.bot.session import NO_GOAL_PROMPT, get_tracker, require_login
from calculon.core import charts
from calculon.utils.text_utils import format_currency, format_date


async def progress_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends the budget ring of the selected goal."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    tracker.refresh()
    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return

    summary = tracker.goal_summary(goal.id)
    caption = (
        f"{escape_markdown(goal.name)}\n"
        f"Spent {format_currency(summary.total_spent)} of {format_currency(summary.adjusted_budget)} "
        f"({summary.progress_percentage:.1f}%)"
    )
    if summary.total_adjustments > 0:
        caption += f"\nAdjustments: +{format_currency(summary.total_adjustments)}"
    if summary.over_budget_warning:
        caption += f"\n⚠️ Warning: You've used {summary.progress_percentage:.1f}% of your budget!"

    chart_buffer = charts.generate_budget_ring_chart(summary, tracker.theme)
    if chart_buffer:
        chart_buffer.name = "budget_progress.png"
        await update.message.reply_photo(photo=chart_buffer, caption=caption, parse_mode='Markdown')
    else:
        await update.message.reply_text(caption, parse_mode='Markdown')


async def expenses_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Lists the selected goal's expenses: /expenses [date|amount|category] [asc|desc]."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return

    args = [arg.lower() for arg in (context.args or [])]
    field = args[0] if args else 'date'
    direction = args[1] if len(args) > 1 else 'desc'
    if field not in charts.SORT_FIELDS or direction not in ('asc', 'desc'):
        await update.message.reply_text(
            "Usage: `/expenses [date|amount|category] [asc|desc]`", parse_mode='Markdown'
        )
        return

    expenses = charts.sort_expenses(tracker.goal_expenses(goal.id), field, direction)
    if not expenses:
        await update.message.reply_text(f"No expenses recorded for '{goal.name}' yet. Add one with /expense.")
        return

    message = f"*Expenses:* {escape_markdown(goal.name)}\n\n"
    for expense in expenses:
        message += f"• {format_date(expense.date)}: {format_currency(expense.amount)} ({escape_markdown(expense.category)})"
        if expense.notes:
            message += f" {escape_markdown(expense.notes)}"
        message += "\n"
    message += f"\n*Total: {format_currency(sum(e.amount for e in expenses))}*"
    await update.message.reply_text(message, parse_mode='Markdown')


async def theme_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Switches the chart theme between light and dark."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    previous = tracker.theme
    theme = tracker.toggle_theme()
    if theme == previous:
        await update.message.reply_text("❌ Could not save your theme preference. Please try again.")
    else:
        await update.message.reply_text(f"🎨 Theme set to {theme}.")
