"""
Configuration settings for the ProjectFlow API
"""
import os


class Settings:
    """Application settings"""

    def __init__(self):
        # Load from environment variables with safe defaults
        self.app_name = os.getenv("APP_NAME", "ProjectFlow API")
        self.app_version = os.getenv("APP_VERSION", "1.0.0")
        self.debug = os.getenv("DEBUG", "False").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", "production")

        # Database - require DATABASE_URL
        self.database_url = os.getenv("DATABASE_URL")
        if not self.database_url:
            raise RuntimeError("DATABASE_URL must be set")

        # Identity provider
        self.auth_issuer_domain = os.getenv("AUTH_ISSUER_DOMAIN", "")
        self.auth_audience = os.getenv("AUTH_AUDIENCE", "")
        self.jwt_secret = os.getenv("JWT_SECRET")
        if not self.jwt_secret:
            raise RuntimeError("JWT_SECRET must be set")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")

        # CORS - configure for dev and prod
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        if not origins_str:
            if self.environment == "production":
                raise RuntimeError("ALLOWED_ORIGINS must be set in production (comma-separated HTTPS URLs)")
            else:
                origins_str = "http://localhost:3000,http://127.0.0.1:3000"

        self.allowed_origins = [origin.strip() for origin in origins_str.split(',') if origin.strip()]

        # Email
        self.smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user = os.getenv("SMTP_USER", "")
        self.smtp_pass = os.getenv("SMTP_PASS", "")
        self.from_email = os.getenv("FROM_EMAIL", "notifications@projectflow.app")
        self.from_name = os.getenv("FROM_NAME", "ProjectFlow")
        self.app_url = os.getenv("APP_URL", "http://localhost:3000")

        # AI Integration
        self.openai_api_key = os.getenv("OPENAI_API_KEY", "")
        self.openai_model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.ai_enabled = os.getenv("AI_ENABLED", "True").lower() == "true"
        self.ai_request_timeout = float(os.getenv("AI_REQUEST_TIMEOUT", "60"))

        # Query limits
        self.chat_page_size = int(os.getenv("CHAT_PAGE_SIZE", "50"))
        self.recent_activity_limit = int(os.getenv("RECENT_ACTIVITY_LIMIT", "10"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "json")

    @property
    def is_development(self) -> bool:
        return self.environment == "development" or self.debug


# Load environment variables from .env file if it exists
from dotenv import load_dotenv

load_dotenv()

# Global settings instance
settings = Settings()
