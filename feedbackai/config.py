"""FeedbackAI configuration: loaded from environment variables / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    frontend_url: str = "http://localhost:3000"
    api_prefix: str = "/api"
    app_version: str = "1.0.0"
    max_body_bytes: int = 10 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"

    # Rate limiting
    rate_limit_enabled: bool = True
    trust_proxy: bool = False
    general_rate_limit: int = 100
    general_rate_window_seconds: float = 15 * 60
    ai_rate_limit: int = 10
    ai_rate_window_seconds: float = 60

    # AI provider: auto | openai | anthropic | none
    ai_provider: str = "auto"
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    ai_timeout_seconds: float = 30.0
    ai_max_tokens: int = 300
    ai_temperature: float = 0.7

    # Fixed seed makes fallback answers reproducible
    fallback_seed: int | None = None

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
