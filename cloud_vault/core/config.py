# cloud_vault/core/config.py
from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # required: the app refuses to start without a database
    database_url: str
    database_ssl: bool = False

    # left unset, boto3 falls back to its default credential chain
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_region: str = "us-east-1"
    aws_endpoint_url: str | None = None
    aws_s3_bucket_name: str = "cloud-vault"

    storage_folder: str = "cloud-vault"
    storage_public_base_url: str | None = None
    max_upload_bytes: int = 50 * 1024 * 1024

    # werkzeug method string; werkzeug has no bcrypt, so there is no "cost factor 10"
    password_hash_method: str = "scrypt"
    default_admin_username: str = "admin"
    default_admin_password: str = "admin123"

    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )

    @field_validator(
        "aws_access_key_id",
        "aws_secret_access_key",
        "aws_endpoint_url",
        "storage_public_base_url",
        mode="before",
    )
    @classmethod
    def blank_as_unset(cls, value):
        # KEY= in .env means "not configured"
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def public_base_url(self) -> str:
        if self.storage_public_base_url:
            return self.storage_public_base_url.rstrip("/")
        return f"https://{self.aws_s3_bucket_name}.s3.{self.aws_region}.amazonaws.com"


@lru_cache
def get_settings() -> Settings:
    return Settings()
