"""
client/retroscore/config.py

Purpose:
    Central settings loading for the game client.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer client/.env, fallback to project-root .env.
_CLIENT_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:8080/api"
    SERVER_URL: str = "http://localhost:8080"  # Logos and sign-in live outside /api
    AUTH_LOGIN_PATH: str = "/auth/google/mobile"

    # HTTP transport
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_MAX_RETRIES: int = 0  # Game calls are not retried; the session decides
    HTTP_BASE_DELAY_SECONDS: float = 1.0

    # Round timer
    DEFAULT_TIME_LIMIT_SECONDS: int = 30  # Used when the user has no time limit set
    TIMER_TICK_SECONDS: float = 1.0

    # Score selector domain
    SCORE_MIN: int = 0
    SCORE_MAX: int = 9

    # Leaderboard
    LEADERBOARD_PAGE_SIZE: int = 20
    LEADERBOARD_FALLBACK_ENABLED: bool = False
    LEADERBOARD_FALLBACK_MIN_REAL: int = 5
    LEADERBOARD_FALLBACK_PAD_TO: int = 20

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": (str(_CLIENT_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
