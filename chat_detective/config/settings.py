from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3Config(BaseSettings):
    """S3 configuration for transcripts handed to the model."""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = "chat-detective-transcripts"
    key_prefix: str = "transcripts"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-pro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=8192,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
    )
    temperature: float = Field(
        default=0.0,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="BEDROCK_CONNECT_TIMEOUT",
        gt=0,
    )
    read_timeout_seconds: float = Field(
        default=120.0,
        validation_alias="BEDROCK_READ_TIMEOUT",
        gt=0,
    )
    max_attempts: int = Field(
        default=2,
        validation_alias="BEDROCK_MAX_ATTEMPTS",
        ge=1,
        le=5,
        description="Total attempts per remote call, so 2 means a single retry.",
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="BEDROCK_API_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class UploadConfig(BaseSettings):
    """Local staging area for uploaded chat exports."""

    staging_dir: str = "uploads"

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Chat Detective Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/analysis_pipeline.log"
    model_response_log_file: str = "logs/model_responses.log"

    # S3
    s3: S3Config = Field(default_factory=S3Config)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Uploads
    uploads: UploadConfig = Field(default_factory=UploadConfig)

    # CORS
    cors_origins: list[str] = [
        "http://localhost",
        "http://localhost:3000",
    ]
    cors_origin_regex: Optional[str] = r"https://.*\.varram\.me"
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
