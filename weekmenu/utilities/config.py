"""Configuration management for the Weekly Menu application."""
import os
from dataclasses import dataclass
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

from weekmenu.utilities.constants import MENU_KEY as DEFAULT_MENU_KEY

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Storage
MENU_KEY: Final[str] = os.getenv('MENU_KEY', DEFAULT_MENU_KEY)
MENU_STORE_BACKEND: Final[str] = os.getenv('MENU_STORE_BACKEND', '').strip().lower()
KV_REST_API_URL: Final[str] = os.getenv('KV_REST_API_URL', '')
KV_REST_API_TOKEN: Final[str] = os.getenv('KV_REST_API_TOKEN', '')
HTTP_TIMEOUT_SECONDS: Final[float] = float(os.getenv('HTTP_TIMEOUT_SECONDS', '5'))

# Calendar: one authoritative zone for "today" and "current week"
MENU_TIMEZONE: Final[str] = os.getenv('MENU_TIMEZONE', 'UTC')

# Sync client timings
SAVE_DEBOUNCE_SECONDS: Final[float] = float(os.getenv('SAVE_DEBOUNCE_SECONDS', '1.0'))
STATUS_CLEAR_SECONDS: Final[float] = float(os.getenv('STATUS_CLEAR_SECONDS', '2.0'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = BASE_DIR / 'data'
MENU_FILE: Final[Path] = Path(os.getenv('MENU_FILE', str(DATA_DIR / 'menu.json')))


@dataclass(frozen=True)
class Settings:
    """Snapshot of the storage-related settings, handed to store factories."""
    menu_key: str = MENU_KEY
    store_backend: str = MENU_STORE_BACKEND
    menu_file: Path = MENU_FILE
    kv_rest_api_url: str = KV_REST_API_URL
    kv_rest_api_token: str = KV_REST_API_TOKEN
    http_timeout: float = HTTP_TIMEOUT_SECONDS
    timezone: str = MENU_TIMEZONE

    @property
    def has_kv_vars(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)


def get_settings(**overrides: Optional[object]) -> Settings:
    """Return settings from the environment, with keyword overrides applied."""
    values = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**values)
