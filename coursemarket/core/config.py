from pydantic_settings import BaseSettings, SettingsConfigDict

# Ensure env file is loaded before Settings() reads environment variables
from coursemarket.core.env import load_env
load_env()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=None,  # loaded via coursemarket.core.env (ENV_FILE)
        extra="ignore",
        case_sensitive=True,
    )

    APP_NAME: str = "coursemarket API"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Catalog
    DEFAULT_MAX_STUDENTS: int = 100
    MAX_UPLOAD_SIZE_BYTES: int = 1024 * 1024

    # Paystack
    PAYSTACK_SECRET_KEY: str = "sk_test_dummy"
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_CALLBACK_URL: str | None = None
    GATEWAY_TIMEOUT_SECONDS: float = 30.0

    # OAuth providers
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/auth/google/callback"
    FACEBOOK_APP_ID: str = ""
    FACEBOOK_APP_SECRET: str = ""
    FACEBOOK_REDIRECT_URI: str = "http://localhost:8000/api/auth/facebook/callback"
    OAUTH_FAILURE_REDIRECT: str = "/login"

    # Storage for uploaded course/lesson media
    USE_DUMMY_S3: bool = True  # local filesystem instead of real S3 (for dev)
    AWS_ACCESS_KEY_ID: str = "dummy-key-id"
    AWS_SECRET_ACCESS_KEY: str = "dummy-secret-key"
    AWS_S3_BUCKET: str = "coursemarket-dev"
    AWS_REGION: str = "us-east-1"
    S3_STORAGE_PATH: str = "./storage/s3"
    MEDIA_BASE_URL: str = "/media"


settings = Settings()
