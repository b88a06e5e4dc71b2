from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Search providers (empty key = provider not configured)
    bing_api_key: str = ""
    bing_endpoint: str = "https://api.bing.microsoft.com"
    news_api_key: str = ""
    gnews_api_key: str = ""
    search_timeout_seconds: float = 30.0
    search_query_suffix: str = "music press review article"

    # Supabase (history, usage limits, auth)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # OpenRouter analysis (empty key = deterministic scorer)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    analysis_model: str = "openai/gpt-4o-mini"
    analysis_max_parallel: int = 1

    # Quotas / history
    default_max_searches: int = 50
    default_max_exports: int = 20
    history_limit: int = 20

    # App
    app_url: str = "http://localhost:3000"
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
