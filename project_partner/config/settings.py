from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin-only writes that bypass RLS

    # AWS S3 (optional photo storage; Supabase Storage is used when not configured)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Photos
    photos_bucket: str = "project-photos"
    photo_max_bytes: int = 5 * 1024 * 1024
    photo_signed_url_ttl: int = 3600

    # AI project generation
    openai_api_key: Optional[str] = None
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    ai_default_model: str = "gpt-4o-mini"
    ai_request_timeout: float = 180.0
    ai_max_tokens: int = 8000
    ai_temperature: float = 0.7

    # Project runs
    project_run_default_days: int = 30

    # App
    app_name: str = "project-partner-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
