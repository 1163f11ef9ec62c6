# timebank/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)
    OTP_EXPIRE_MINUTES: int = Field(10)

    DATABASE_URL: str
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"
    # Directory for rotating log files. Console only when unset.
    LOG_DIR: Optional[str] = None
    DEBUG: bool = False

    # Asana integration: all three must be set or the integration stays disabled.
    ASANA_PAT: Optional[str] = None
    ASANA_WORKSPACE_GID: Optional[str] = None
    ASANA_PROJECT_GID: Optional[str] = None
    ASANA_API_URL: str = "https://app.asana.com/api/1.0"
    ASANA_TIMEOUT_SECONDS: float = 10.0

    # Login-code delivery. SMTP_HOST and SMTP_FROM are required; without them /auth/otp answers 503.
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 10.0

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL
        # Ensure asyncpg is used
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def missing_asana_settings(self) -> List[str]:
        """
        Returns:
          - [] → integration usable
          - names of the unset variables otherwise
        """
        required = ("ASANA_PAT", "ASANA_WORKSPACE_GID", "ASANA_PROJECT_GID")
        return [name for name in required if not getattr(self, name)]

    @property
    def asana_configured(self) -> bool:
        return not self.missing_asana_settings

    @property
    def missing_smtp_settings(self) -> List[str]:
        required = ("SMTP_HOST", "SMTP_FROM")
        return [name for name in required if not getattr(self, name)]

    @property
    def smtp_configured(self) -> bool:
        return not self.missing_smtp_settings

settings = Settings()
