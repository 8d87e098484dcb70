from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Only needed by maintenance scripts
    supabase_schema: str = "public"
    supabase_timeout_seconds: int = 30

    # OpenRouter (chat completions used for sample generation)
    openrouter_api_key: Optional[str] = None
    openrouter_api_url: str = "https://openrouter.ai/api/v1"
    openrouter_default_model: str = "anthropic/claude-3-haiku-20240307"
    openrouter_temperature: float = 0.7
    openrouter_max_tokens: int = 150
    openrouter_max_tokens_cap: int = 500
    openrouter_system_prompt: str = (
        "You are a social media content expert. Provide concise, engaging content "
        "optimized for short-form video platforms."
    )
    openrouter_app_title: str = "PromptHub"
    openrouter_referer: str = "http://localhost:5173"
    openrouter_timeout_seconds: float = 60.0

    # App
    app_name: str = "PromptHub API"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    generate_rate_limit: str = "10/minute"  # per bearer token (per IP when anonymous)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
