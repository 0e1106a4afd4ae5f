import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    mongodb_url: str = "mongodb://localhost:27017"
    db_name: str = "fitness_db"
    secret_key: str = "fallback_secret"
    algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: Optional[str] = None
    admin_force_password_reset: bool = False
    frontend_url: Optional[str] = None
    environment: str = "development"
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongodb_url=os.getenv("MONGODB_URL", cls.mongodb_url),
            db_name=os.getenv("DB_NAME", cls.db_name),
            secret_key=os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY", cls.secret_key),
            algorithm=os.getenv("ALGORITHM", cls.algorithm),
            jwt_expire_hours=int(os.getenv("JWT_EXPIRE_HOURS", cls.jwt_expire_hours)),
            admin_email=os.getenv("ADMIN_EMAIL"),
            admin_password=os.getenv("ADMIN_PASSWORD"),
            admin_name=os.getenv("ADMIN_NAME"),
            admin_force_password_reset=_flag(os.getenv("ADMIN_FORCE_PASSWORD_RESET")),
            frontend_url=os.getenv("FRONTEND_URL"),
            environment=os.getenv("ENVIRONMENT", cls.environment),
            port=int(os.getenv("PORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        origins = [self.frontend_url, "http://localhost:5173", "http://localhost:3000"]
        return [origin for origin in origins if origin]


settings = Settings.from_env()
