# calculon/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
WEBHOOK_PATH = os.getenv("WEBHOOK_PATH", "/webhook")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Expense submission limit (fixed window, milliseconds)
RATE_LIMIT_DURATION = int(os.getenv("RATE_LIMIT_DURATION", "60000"))
MAX_EXPENSES_PER_MINUTE = int(os.getenv("MAX_EXPENSES_PER_MINUTE", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEFAULT_CATEGORIES = ["ING", "Revolut", "ING Blik", "Other"]

CATEGORY_COLORS = {
    "ING": "#f97316",
    "Revolut": "#3b82f6",
    "ING Blik": "#9333ea",
    "Other": "#6b7280",
}
DEFAULT_CATEGORY_COLOR = "#6b7280"
