import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as courtslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "courtslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,   # test connection before use
    }

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Used to build links in emails
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000")

    # Cancellation policy: refund share of the total (10% fee)
    REFUND_RATE = os.getenv("REFUND_RATE", "0.9")

    # How long a request waits for a notification before reporting emailSent=false
    NOTIFICATION_WAIT_SECONDS = float(os.getenv("NOTIFICATION_WAIT_SECONDS", "5"))

    # Reminder worker
    REMINDER_POLL_SECONDS = int(os.getenv("REMINDER_POLL_SECONDS", "60"))
    REMINDER_BATCH_SIZE = int(os.getenv("REMINDER_BATCH_SIZE", "100"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT_SECONDS = int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SMTP_HOST = None
    NOTIFICATION_WAIT_SECONDS = 2
