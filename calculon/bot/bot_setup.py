# calculon/bot/bot_setup.py
import logging

from telegram.ext import Application, MessageHandler, filters, CommandHandler, ConversationHandler

from calculon.bot.commands import ALL_COMMANDS
from calculon.bot.handlers import (
    ASKING_AMOUNT, ASKING_CATEGORY, ASKING_CONFIRMATION, ASKING_DATE,
    ASKING_DELETE_CONFIRMATION, ASKING_NOTES,
    cancel, handle_amount, handle_category, handle_confirmation, handle_date,
    handle_delete_confirmation, handle_notes, start_delete_goal, start_expense,
)

logger = logging.getLogger(__name__)

TEXT = filters.TEXT & ~filters.COMMAND


def setup_bot(config: dict) -> Application:
    """
    Builds the Telegram application (commands and conversations).
    `config` needs TELEGRAM_BOT_TOKEN and SUPABASE_FACTORY, a callable that
    returns a fresh Supabase client; every Telegram user gets their own.
    """
    application = Application.builder().token(config["TELEGRAM_BOT_TOKEN"]).build()
    application.bot_data['supabase_factory'] = config["SUPABASE_FACTORY"]

    for name, callback in ALL_COMMANDS.items():
        application.add_handler(CommandHandler(name, callback))

    # Step-by-step expense entry
    expense_handler = ConversationHandler(
        entry_points=[CommandHandler("expense", start_expense)],
        states={
            ASKING_AMOUNT: [MessageHandler(TEXT, handle_amount)],
            ASKING_CATEGORY: [MessageHandler(TEXT, handle_category)],
            ASKING_DATE: [MessageHandler(TEXT, handle_date)],
            ASKING_NOTES: [MessageHandler(TEXT, handle_notes)],
            ASKING_CONFIRMATION: [MessageHandler(TEXT, handle_confirmation)],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )
    application.add_handler(expense_handler)

    delete_handler = ConversationHandler(
        entry_points=[CommandHandler("delete", start_delete_goal)],
        states={
            ASKING_DELETE_CONFIRMATION: [MessageHandler(TEXT, handle_delete_confirmation)],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )
    application.add_handler(delete_handler)

    logger.info("Telegram bot configured with %d commands", len(ALL_COMMANDS) + 2)
    return application
