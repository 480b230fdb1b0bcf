from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_csv(v: Any) -> List[str]:
    """Parse a comma-separated (or JSON list) setting into lowercase items"""
    if isinstance(v, list):
        return [str(item).strip().lower() for item in v]
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return [str(item).strip().lower() for item in json.loads(v)]
            except json.JSONDecodeError:
                pass
        return [item.strip().lower() for item in v.split(',') if item.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "School Noticeboard"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False

    # "database" or "memory"; chosen once at startup
    STORAGE_BACKEND: str = "database"

    # ==========================================
    # Sessions
    # ==========================================
    SESSION_SECRET: str
    SESSION_BACKEND: str = "database"
    SESSION_COOKIE_NAME: str = "noticeboard.sid"
    SESSION_MAX_AGE_SECONDS: int = 86400  # 24 hours
    SESSION_PRUNE_INTERVAL_SECONDS: int = 3600

    # ==========================================
    # Credential store (bcrypt-pbkdf)
    # ==========================================
    KDF_ROUNDS: int = 64
    KDF_KEY_LENGTH: int = 64
    KDF_SALT_BYTES: int = 16

    # Roles a visitor may pick on /api/register
    SELF_REGISTRATION_ROLES_STR: str = "student,teacher,admin"

    # Create the admin/teacher/student demo accounts on first run
    SEED_BOOTSTRAP_ACCOUNTS: bool = True

    # ==========================================
    # File Upload
    # ==========================================
    UPLOAD_DIR: str = "fileuploads"
    UPLOAD_URL_PREFIX: str = "/fileuploads"
    MAX_UPLOAD_SIZE: int = 10485760  # 10MB
    ALLOWED_EXTENSIONS_STR: str = "pdf,doc,docx,ppt,pptx,xls,xlsx,txt,csv,png,jpg,jpeg,gif,zip"
    SERVE_UPLOADS_PUBLIC: bool = True

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5000,http://localhost:5173,http://127.0.0.1:5000,http://127.0.0.1:5173"

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "10/minute"
    REGISTER_RATE_LIMIT: str = "5/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    @field_validator("STORAGE_BACKEND", "SESSION_BACKEND")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in ("database", "memory"):
            raise ValueError("must be 'database' or 'memory'")
        return value

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        """Parse allowed extensions from comma-separated string"""
        return [ext.lstrip('.') for ext in parse_csv(self.ALLOWED_EXTENSIONS_STR)]

    @property
    def SELF_REGISTRATION_ROLES(self) -> List[str]:
        return parse_csv(self.SELF_REGISTRATION_ROLES_STR)

    @property
    def UPLOAD_PATH(self) -> Path:
        return Path(self.UPLOAD_DIR).resolve()

    @property
    def is_production(self) -> bool:
        """Production deployments run behind TLS, so cookies are marked Secure"""
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()
