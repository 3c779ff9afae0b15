import os
from pathlib import Path

from dotenv import load_dotenv

# Force-load .env from the project root (reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

DATABASE_URL = os.getenv("DATABASE_URL")

# Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
# Per-call timeout for Stripe API requests, in seconds
STRIPE_TIMEOUT_SECONDS = int(os.getenv("STRIPE_TIMEOUT_SECONDS", "10"))

# Auth
JWT_SECRET = os.getenv("JWT_SECRET")

# Resend email
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Rugboost <noreply@rugboost.app>")

# Checkout rate limiting: requests per window, per user
CHECKOUT_RATE_LIMIT = int(os.getenv("CHECKOUT_RATE_LIMIT", "5"))
CHECKOUT_RATE_WINDOW_SECONDS = int(os.getenv("CHECKOUT_RATE_WINDOW_SECONDS", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
