"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Reelbook"
    debug: bool = True
    log_level: str = "INFO"
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api"

    # Database
    database_url: str = "sqlite+aiosqlite:///./reelbook.db"
    database_echo: bool = False

    # Auth
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 30
    jwt_algorithm: str = "HS256"

    # Static admin credential sent in the "admin-key" header. Empty disables it.
    admin_api_key: str = ""
    # When true, admin status updates must follow the booking state machine
    admin_enforce_transitions: bool = False

    # Email / SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = False
    smtp_timeout: float = 10.0
    smtp_from: str = "bookings@reelbook.studio"
    admin_email: str = "studio@reelbook.studio"
    studio_phone: str = "+91 7004636112"

    # Razorpay
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""
    payment_currency: str = "INR"
    payment_min_amount: int = 1  # rupees
    payment_reject_reprocessing: bool = False
    test_booking_prefix: str = "test_"

    model_config = {"env_prefix": "RB_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
