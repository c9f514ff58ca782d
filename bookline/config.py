import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bookline.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Symmetric key for third-party app credentials (generate with:
# python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", "")

# Web app base URL used in emails and redirects
WEBAPP_URL = os.getenv("WEBAPP_URL", "http://localhost:3000")

# Self-hosted instances do not meter SMS usage
IS_SELF_HOSTED = os.getenv("IS_SELF_HOSTED", "false").lower() == "true"
SMS_CREDITS_PER_MEMBER = int(os.getenv("SMS_CREDITS_PER_MEMBER", "250"))

# Twilio (platform account used for workflow reminders)
TWILIO_SID = os.getenv("TWILIO_SID")
TWILIO_TOKEN = os.getenv("TWILIO_TOKEN")
TWILIO_MESSAGING_SID = os.getenv("TWILIO_MESSAGING_SID")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Bookline <noreply@bookline.app>")

# Background worker
REDIS_URL = os.getenv("REDIS_URL")

# Default hold on a slot while the booker fills in the form (minutes)
DEFAULT_RESERVATION_MINUTES = int(os.getenv("DEFAULT_RESERVATION_MINUTES", "5"))

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
