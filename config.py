"""Runtime configuration for imgguard.

Values are read from the environment (optionally populated from a ``.env``
file at the project root).  Every limit uses ``0`` to mean "unlimited".
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

load_dotenv(dotenv_path=BASE_DIR / ".env", override=False)

MIB = 1024 * 1024


def env_int(key: str, default: int) -> int:
    """Return a non-negative integer from ``key`` or ``default`` if unset."""
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key}={raw!r} is not a valid integer") from exc
    if value < 0:
        raise ValueError(f"Environment variable {key}={value} must be >= 0 (0 disables the limit)")
    return value


# ==========================================================================
# Guard limits
# ==========================================================================
MAX_WIDTH = env_int("IMAGE_GUARD_MAX_WIDTH", 0)
MAX_HEIGHT = env_int("IMAGE_GUARD_MAX_HEIGHT", 0)
MAX_MEMORY_BYTES = env_int("IMAGE_GUARD_MAX_MEMORY", 32 * MIB)

# Upper bound on bytes buffered while reading a header.
MAX_PEEK_BYTES = env_int("IMAGE_GUARD_MAX_PEEK_BYTES", 4 * MIB)

# Request body cap for the HTTP surface.
MAX_UPLOAD_BYTES = env_int("IMAGE_GUARD_MAX_UPLOAD_BYTES", 64 * MIB)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


# ==========================================================================
# Logging
# ==========================================================================
def configure_logging(level: str | None = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    resolved = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(
            level=resolved,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    root.setLevel(resolved)
