from pydantic import BaseModel
from typing import Optional
import json
import logging
import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Constants
PRINTER_WIDTH = 48  # Characters per printed line


def _env_int(name: str, default: str) -> int:
    """Reads an integer env var; accepts hex such as 0x04b8."""
    return int(os.getenv(name, default), 0)


class Settings(BaseModel):
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _env_int("PORT", "3000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # USB identity of the receipt printer (Epson TM series by default)
    printer_vendor_id: int = _env_int("PRINTER_VENDOR_ID", "0x04b8")
    printer_product_id: int = _env_int("PRINTER_PRODUCT_ID", "0x0e28")
    printer_timeout: float = float(os.getenv("PRINTER_TIMEOUT", "2"))  # seconds

    # When set, the printer is opened on this serial port instead of USB
    printer_serial_port: Optional[str] = os.getenv("PRINTER_SERIAL_PORT")
    printer_baudrate: int = _env_int("PRINTER_BAUDRATE", "9600")

    # Weather
    default_location: str = os.getenv("DEFAULT_LOCATION", "New York")
    timezone: str = os.getenv("TIMEZONE", "America/New_York")
    weather_timeout: float = float(os.getenv("WEATHER_TIMEOUT", "10"))  # seconds


def _config_path() -> str:
    """config.json lives one directory up from this file unless overridden."""
    override = os.getenv("PAPERPRESS_CONFIG")
    if override:
        return override
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, "config.json")


def load_config(config_path: Optional[str] = None) -> Settings:
    """Load settings from config.json over the environment defaults."""
    config_path = config_path or _config_path()

    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            try:
                data = json.load(f)
                return Settings(**data)
            except Exception as e:
                logger.error(f"Error loading config {config_path}: {e}")

    return Settings()


# Global settings instance
settings = load_config()


def resolve_log_level(name: Optional[str]) -> str:
    """Canonical logging level name for `name`; INFO when it names no level."""
    level = logging.getLevelName((name or "").upper())
    if not isinstance(level, int):
        logger.warning(f"Unknown log level {name!r}, using INFO")
        return "INFO"
    return logging.getLevelName(level)
