from telegram import Update
from telegram.ext import ContextTypes

from calculon.bot.session import get_tracker


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends a greeting when /start is issued."""
    tracker = get_tracker(context)
    greeting = "👋 Welcome to *CalculON*, smart financial goals tracking.\n\n"
    if tracker.is_authenticated():
        greeting += "You are logged in. Use `/goals` to see your goals or `/help` for all commands."
    else:
        greeting += (
            "Log in with `/login <email> <password>`.\n"
            "Don't have an account? Use `/signup <email> <password>`."
        )
    await update.message.reply_text(greeting, parse_mode='Markdown')


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends the command list when /help is issued."""
    await update.message.reply_text(
        "*Account:*\n"
        "- `/signup <email> <password>`: create an account.\n"
        "- `/login <email> <password>`: log in.\n"
        "- `/logout`: log out.\n"
        "- `/theme`: switch between light and dark charts.\n\n"
        "*Goals:*\n"
        "- `/goals`: list the goals you own or share.\n"
        "- `/select <number>`: choose the goal to work on.\n"
        "- `/newgoal <amount> <YYYY-MM-DD> <name>`: create a goal (ex: `/newgoal 1000 2025-12-31 Holidays`).\n"
        "- `/delete`: delete the selected goal.\n"
        "- `/adjust <amount> <reason>`: add to the selected goal's budget.\n"
        "- `/share <email> [viewer|editor|admin]`: share the selected goal.\n\n"
        "*Expenses:*\n"
        "- `/expense`: add an expense to the selected goal, step by step.\n"
        "- `/expenses [date|amount|category] [asc|desc]`: list the selected goal's expenses.\n"
        "- `/progress`: budget progress chart of the selected goal.\n"
        "- `/cancel`: stop the current step-by-step action.",
        parse_mode='Markdown',
    )
