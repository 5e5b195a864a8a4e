import importlib
import os
from types import ModuleType

# APP_ENV -> module cấu hình; giá trị lạ rơi về development
_SETTINGS_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _SETTINGS_BY_ENV.get(env, "config.development")


def load_settings() -> ModuleType:
    """Import the settings module selected by APP_ENV (DB_CONFIG, LATE_GRACE_MINUTES, ...)."""
    return importlib.import_module(get_settings_module())
