"""Runtime settings loaded from the environment."""
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_API_URL = "https://dsa-tracker-backend-production-616d.up.railway.app"
DEFAULT_DB_PATH = str(Path.home() / ".dsa_tracker" / "tracker.db")


class Settings(BaseModel):
    api_url: str = os.getenv("DSA_TRACKER_API_URL", DEFAULT_API_URL)
    db_path: str = os.getenv("DSA_TRACKER_DB_PATH", DEFAULT_DB_PATH)
    request_timeout: float = float(os.getenv("DSA_TRACKER_TIMEOUT", "10.0"))
    tick_interval: float = float(os.getenv("DSA_TRACKER_TICK_INTERVAL", "1.0"))
    log_level: str = os.getenv("DSA_TRACKER_LOG_LEVEL", "WARNING")


settings = Settings()
