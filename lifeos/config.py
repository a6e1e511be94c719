import os
from dotenv import load_dotenv

load_dotenv()


def _database_url():
    url = os.getenv("DATABASE_URL", "sqlite:///lifeos.db")
    # Heroku/Railway style URLs are rejected by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None

    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # IANA zone name used to decide where one calendar day ends
    DAY_BOUNDARY_TIMEZONE = os.getenv("DAY_BOUNDARY_TIMEZONE", "UTC")
    HABIT_STATS_WINDOW_DAYS = int(os.getenv("HABIT_STATS_WINDOW_DAYS", 30))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
