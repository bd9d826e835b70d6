# calculon/main.py
"""
Entry points.

- WSGI: `gunicorn "calculon.main:create_wsgi_app()"` serves the Telegram webhook with Flask.
- Local: `python -m calculon.main` runs the bot with long polling.
"""
import asyncio
import logging

from flask import Flask, request, jsonify
from telegram import Update
from telegram.ext import Application

from calculon import config
from calculon.bot.bot_setup import setup_bot
from calculon.core.db import get_supabase_client

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    )
    # httpx logs every Telegram request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_application() -> Application:
    return setup_bot({
        "TELEGRAM_BOT_TOKEN": config.TELEGRAM_BOT_TOKEN,
        "SUPABASE_FACTORY": get_supabase_client,
    })


def create_app(ptb_application: Application) -> Flask:
    flask_app = Flask(__name__)

    @flask_app.route(config.WEBHOOK_PATH, methods=['POST'])
    async def telegram_webhook():
        if not request.is_json:
            logger.error("Webhook received non-JSON request")
            return jsonify({"status": "error", "message": "Request must be JSON"}), 400

        update_json = request.get_json()
        try:
            update = Update.de_json(update_json, ptb_application.bot)
            await ptb_application.process_update(update)
            return jsonify({"status": "ok"}), 200
        except Exception:
            logger.exception("Failed to process Telegram update")
            return jsonify({"status": "error", "message": "Failed to process update"}), 500

    return flask_app


def create_wsgi_app() -> Flask:
    configure_logging()
    ptb_application = build_application()
    asyncio.run(ptb_application.initialize())
    logger.info("python-telegram-bot application initialized for webhooks")
    return create_app(ptb_application)


def main() -> None:
    configure_logging()
    application = build_application()
    logger.info("Starting CalculON bot with long polling")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == '__main__':
    main()
