"""Configuration — loads environment variables with sensible defaults.

All tunables live here. Override via .env file or environment variables.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)

def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))

def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# Storage
# ═══════════════════════════════════════════════════════════════════════════
# The whole habit record is stored as one snapshot under a single key.

DB_PATH = Path(_env("SLIPUP_DB_PATH", str(_PROJECT_ROOT / "data" / "slipup.db")))
STORE_KEY = _env("SLIPUP_STORE_KEY", "habit-store")

# ═══════════════════════════════════════════════════════════════════════════
# Development mode
# ═══════════════════════════════════════════════════════════════════════════
# Enables the simulated clock ("advance day"). Only used as the default for a
# fresh record; a loaded snapshot carries its own developmentMode flag.

DEVELOPMENT_MODE = _env_bool("SLIPUP_DEVELOPMENT_MODE", False)

# ═══════════════════════════════════════════════════════════════════════════
# Timezone (default UTC, override for your locale in .env)
# ═══════════════════════════════════════════════════════════════════════════

TIMEZONE_OFFSET_HOURS = _env_int("TIMEZONE_OFFSET_HOURS", 0)

# ═══════════════════════════════════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════════════════════════════════

LOG_LEVEL = _env("LOG_LEVEL", "WARNING")
