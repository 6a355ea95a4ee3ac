"""Runtime configuration read from the environment."""

import os
from typing import List, Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Configuration for the storefront API."""

    database_url: Optional[str] = None
    database_name: Optional[str] = None
    jwt_secret: str = "niora-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = Field(default=60 * 24, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    admin_name: str = "NIORA Admin"
    admin_email: str = "admin@niora.com"
    admin_password: str = "BEANIORA"
    hero_image: str = "https://images.unsplash.com/photo-1604908177522-4028c0f9b0db?auto=format&fit=crop&w=1920&q=80"
    cors_origins: List[str] = Field(default=["*"])
    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    env = {
        "database_url": os.getenv("DATABASE_URL"),
        "database_name": os.getenv("DATABASE_NAME"),
        "jwt_secret": os.getenv("JWT_SECRET"),
        "jwt_expires_minutes": os.getenv("JWT_EXPIRES_MINUTES"),
        "bcrypt_rounds": os.getenv("BCRYPT_ROUNDS"),
        "admin_name": os.getenv("ADMIN_NAME"),
        "admin_email": os.getenv("ADMIN_EMAIL"),
        "admin_password": os.getenv("ADMIN_PASSWORD"),
        "hero_image": os.getenv("HERO_IMAGE"),
        "log_level": os.getenv("LOG_LEVEL"),
        "port": os.getenv("PORT"),
    }
    origins = os.getenv("CORS_ORIGINS")
    if origins:
        env["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    # unset variables fall back to the model defaults
    return Settings(**{k: v for k, v in env.items() if v is not None})


settings = load_settings()
