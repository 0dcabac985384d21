from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "local"
    app_name: str = "trekbook-api"
    api_version: str = "v1"
    api_cors_allowed_origins: str = "http://localhost:5173,http://localhost:3000"
    api_cors_allow_credentials: bool = True
    log_level: str = "INFO"

    supabase_url: str = ""
    supabase_service_role_key: str = ""

    cache_ttl_seconds: int = 60
    password_reset_redirect_url: str = "http://localhost:5173/reset-password"

    feature_booking_notifications: bool = True
    whatsapp_api_url: str = ""
    whatsapp_api_token: str = "demo-token"
    email_api_url: str = ""
    email_api_token: str = "demo-token"
    email_sender: str = "bookings@trekbook.local"
    messaging_timeout_ms: int = 5000
    currency_symbol: str = "₹"


settings = Settings()
