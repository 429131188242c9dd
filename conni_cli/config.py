"""
conni-cli shared configuration, constants, and module-level state.
Standalone module — no imports from other project files except exceptions.

Connection profiles (host/email/token) are not read here; see profiles.py.
This module only holds process-wide settings such as HTTP tuning knobs.
"""

import os

from conni_cli.exceptions import CliError, ConfigError  # noqa: F401  (re-export)

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")

# Keys that may also come from the process environment (CI, containers).
_ENV_KEYS = (
    "CONNI_PROJECT_ROOT",
    "CONNI_HTTP_TIMEOUT_SECONDS",
    "CONNI_HTTP_MAX_RETRIES",
    "CONNI_HTTP_RETRY_BASE_SECONDS",
    "CONNI_HTTP_MAX_RESPONSE_BYTES",
    "CONNI_HTTP_LOG",
    "CONNI_HTTP_LOG_SAMPLE_RATE",
)


def load_env():
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip()
    for key in _ENV_KEYS:
        if key not in env and os.environ.get(key):
            env[key] = os.environ[key]
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
PROG = "conni-cli"

VALID_FORMATS = ("json", "toon")
DEFAULT_FORMAT = "json"

# Profile storage: YAML front-matter in the project, legacy INI in $HOME.
PROFILE_DIRNAME = ".conni"
PROFILE_FILENAME = "atlassian-config.local.md"
LEGACY_INI_PATH = os.path.join(os.path.expanduser("~"), ".conni-cli.ini")
LEGACY_PROFILE_NAME = "default"

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env)
# ---------------------------------------------------------------------------

env = load_env()

PROJECT_ROOT = env.get("CONNI_PROJECT_ROOT", "")
HTTP_TIMEOUT_SECONDS = _env_int("CONNI_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RETRIES = _env_int("CONNI_HTTP_MAX_RETRIES", 2)
HTTP_RETRY_BASE_SECONDS = _env_float("CONNI_HTTP_RETRY_BASE_SECONDS", 1.0)
# Attachments come back through the same layer, so the cap is generous.
HTTP_MAX_RESPONSE_BYTES = _env_int("CONNI_HTTP_MAX_RESPONSE_BYTES", 50_000_000)
HTTP_LOG_ENABLED = _env_bool("CONNI_HTTP_LOG", False)
HTTP_LOG_SAMPLE_RATE = min(1.0, max(0.0, _env_float("CONNI_HTTP_LOG_SAMPLE_RATE", 1.0)))
