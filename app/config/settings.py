from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # API routes use it to bypass RLS

    # Storage: S3 when fully configured, otherwise Supabase Storage
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None
    storage_bucket: str = "documents"
    backup_bucket: str = "backups"

    # Weather (OpenWeather)
    openweather_api_key: Optional[str] = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"

    # Fernet key for projects.budget / projects.sensitive_notes
    field_encryption_key: Optional[str] = None

    # Permit portals and jurisdiction submittal APIs
    portal_http_timeout: float = 30.0
    miami_dade_api_key: Optional[str] = None
    broward_api_key: Optional[str] = None
    palm_beach_api_key: Optional[str] = None
    miami_api_key: Optional[str] = None
    orlando_api_key: Optional[str] = None
    jurisdiction_basic_username: Optional[str] = None
    jurisdiction_basic_password: Optional[str] = None

    # Backups
    backup_batch_size: int = 100
    backup_scheduler_enabled: bool = False
    backup_scheduler_interval: int = 3600  # seconds

    # App
    app_name: str = "ipc-backend"
    app_version: str = "2.0.0"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    default_organization_id: str = "11111111-1111-1111-1111-111111111111"
    max_upload_size_mb: int = 10

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
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
