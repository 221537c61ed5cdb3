# backend/qrmenu/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key (also signs flash messages)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///qrmenu.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens: one symmetric secret for issue and verify.
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me-32-bytes-min")
    JWT_ACCESS_TTL = int(os.environ.get("JWT_ACCESS_TTL", "3600"))  # 1 hour
    JWT_REFRESH_TTL = int(os.environ.get("JWT_REFRESH_TTL", "604800"))  # 7 days

    # Path prefixes that decide which request-time checks apply
    PUBLIC_API_PREFIX = "/api/menu"
    SUPER_ADMIN_API_PREFIX = "/api/super-admin"
    OWNER_AREA_PREFIX = "/admin"
    SUBSCRIPTION_EXEMPT_PATHS = (
        "/admin/login",
        "/admin/logout",
        "/admin/account/subscription/renew",
    )

    # Browser origins allowed to call the API
    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    )

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
