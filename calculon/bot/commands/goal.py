from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from calculon.bot.session import NO_GOAL_PROMPT, error_text, get_tracker, require_login
from calculon.core.errors import TrackerError
from calculon.utils.text_utils import format_currency, format_date, split_amount_and_text


async def goals_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Lists the goals the user owns or collaborates on."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    tracker.refresh()
    if not tracker.goals:
        await update.message.reply_text(
            "No goals yet. Create your first financial goal with "
            "`/newgoal <amount> <YYYY-MM-DD> <name>`.",
            parse_mode='Markdown',
        )
        return

    message = "*Your Goals:*\n\n"
    for index, goal in enumerate(tracker.goals, start=1):
        marker = "▶️ " if goal.id == tracker.selected_goal_id else ""
        message += f"{index}. {marker}{escape_markdown(goal.name)}\n"
        message += f"   Target: {format_currency(goal.target_amount)}\n"
        adjustments = tracker.goal_adjustment_total(goal.id)
        if adjustments > 0:
            message += f"   Adjustments: +{format_currency(adjustments)}\n"
        message += f"   Deadline: {format_date(goal.deadline)}\n"
    message += "\nUse `/select <number>` to switch goals."
    await update.message.reply_text(message, parse_mode='Markdown')


async def select_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Selects a goal by its position in /goals."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    if not context.args or not context.args[0].isdigit():
        await update.message.reply_text("Usage: `/select <number>` (see `/goals`)", parse_mode='Markdown')
        return

    position = int(context.args[0])
    if position < 1 or position > len(tracker.goals):
        await update.message.reply_text("🤔 There is no goal with that number. Check `/goals`.", parse_mode='Markdown')
        return

    goal = tracker.select_goal(tracker.goals[position - 1].id)
    await update.message.reply_text(f"🎯 Selected goal: {escape_markdown(goal.name)}", parse_mode='Markdown')


async def new_goal_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Creates a goal: /newgoal <amount> <YYYY-MM-DD> <name>."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "Usage: `/newgoal <amount> <YYYY-MM-DD> <name>`\nEx: `/newgoal 1000 2025-12-31 Holidays`",
            parse_mode='Markdown',
        )
        return

    data = {"target_amount": args[0], "deadline": args[1], "name": " ".join(args[2:])}
    try:
        tracker.create_goal(data)
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return
    await update.message.reply_text(f"🎉 Goal '{data['name'].strip()}' created successfully!")


async def adjust_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Adds to the selected goal's budget: /adjust <amount> <reason>."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return

    if not context.args:
        await update.message.reply_text(
            "Usage: `/adjust <amount> <reason>`\nEx: `/adjust 200 Birthday money`",
            parse_mode='Markdown',
        )
        return

    amount, reason = split_amount_and_text(context.args)
    try:
        tracker.add_budget_adjustment(goal.id, {"amount": amount, "reason": reason})
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return

    summary = tracker.goal_summary(goal.id)
    if summary is None:
        await update.message.reply_text("✅ Budget adjustment added successfully.")
        return
    await update.message.reply_text(
        f"✅ Budget adjustment added successfully. New budget for '{goal.name}': "
        f"{format_currency(summary.adjusted_budget)}"
    )


async def share_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Shares the selected goal: /share <email> [viewer|editor|admin]."""
    tracker = get_tracker(context)
    if not await require_login(update, tracker):
        return

    goal = tracker.get_goal()
    if goal is None:
        await update.message.reply_text(NO_GOAL_PROMPT, parse_mode='Markdown')
        return

    args = context.args or []
    if not args or len(args) > 2:
        await update.message.reply_text(
            "Usage: `/share <email> [viewer|editor|admin]` (default: viewer)",
            parse_mode='Markdown',
        )
        return

    data = {"email": args[0]}
    if len(args) == 2:
        data["role"] = args[1].lower()

    try:
        tracker.share_goal(goal.id, data)
    except TrackerError as e:
        await update.message.reply_text(error_text(e))
        return
    await update.message.reply_text(f"🤝 Collaborator added successfully to '{goal.name}'.")
