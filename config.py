import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///renewals.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Timezone used for "today" and for the daily job
    APP_TZ = os.getenv("APP_TZ", "UTC")

    # SMTP
    SMTP_HOST = os.getenv("SMTP_HOST", "")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "30"))
    SENDER_NAME = os.getenv("SENDER_NAME", "Renewal Manager")
    SENDER_EMAIL = os.getenv("SENDER_EMAIL", "renewals@example.com")

    EMAIL_DRY_RUN = os.getenv("EMAIL_DRY_RUN", "true").lower() == "true"

    # Reminders
    DAILY_JOB_HOUR = int(os.getenv("DAILY_JOB_HOUR", "0"))
    DAILY_JOB_MINUTE = int(os.getenv("DAILY_JOB_MINUTE", "0"))
    REMINDER_IDEMPOTENCY = os.getenv("REMINDER_IDEMPOTENCY", "true").lower() == "true"
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
