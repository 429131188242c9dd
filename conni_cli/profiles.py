"""
Connection profiles: loading, validation, and persistence.

Two on-disk shapes are understood:

* YAML front-matter in ``<project>/.conni/atlassian-config.local.md``
  (multi-profile, written by ``conni-cli config``), and
* the legacy single-profile INI in ``~/.conni-cli.ini``, which loads as one
  profile named ``default``.
"""

from __future__ import annotations

import configparser
import os
import re
import tempfile
from dataclasses import dataclass, field

import yaml

from conni_cli import config
from conni_cli.exceptions import ConfigError, ProfileNotFoundError

SETUP_HINT = f"Please run: {config.PROG} config"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_REQUIRED_FIELDS = ("host", "email", "apiToken")


@dataclass(frozen=True)
class ProfileCredentials:
    host: str
    email: str
    api_token: str

    def to_dict(self):
        return {"host": self.host, "email": self.email, "apiToken": self.api_token}


@dataclass(frozen=True)
class ProfileConfig:
    """Validated, read-only set of connection profiles."""

    profiles: dict[str, ProfileCredentials]
    default_profile: str
    default_format: str = config.DEFAULT_FORMAT
    source_path: str | None = field(default=None, compare=False)

    def __post_init__(self):
        if not self.profiles:
            raise ConfigError(f"No profiles defined. {SETUP_HINT}")
        if self.default_profile not in self.profiles:
            raise ConfigError(
                f'Default profile "{self.default_profile}" is not defined in profiles '
                f"({', '.join(self.profiles)})."
            )
        if self.default_format not in config.VALID_FORMATS:
            raise ConfigError(
                f"Invalid default format '{self.default_format}'. "
                f"Use: {', '.join(config.VALID_FORMATS)}"
            )

    def names(self):
        return list(self.profiles)

    def get(self, name):
        try:
            return self.profiles[name]
        except KeyError:
            raise ProfileNotFoundError(name, self.profiles) from None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_host(host, profile=None):
    if not re.match(r"^https?://", host or ""):
        where = f' in profile "{profile}"' if profile else ""
        raise ConfigError(
            f"Invalid host '{host}'{where}: must start with http:// or https://"
        )
    return host.rstrip("/")


def validate_email(email, profile=None):
    if not _EMAIL_RE.match(email or ""):
        where = f' in profile "{profile}"' if profile else ""
        raise ConfigError(f"Invalid email '{email}'{where}.")
    return email


def _build_profile(name, raw):
    if not isinstance(raw, dict):
        raise ConfigError(f'Profile "{name}" must be a mapping of host/email/apiToken.')
    missing = [key for key in _REQUIRED_FIELDS if not str(raw.get(key) or "").strip()]
    if missing:
        raise ConfigError(
            f'Profile "{name}" is missing required field(s): {", ".join(missing)}. {SETUP_HINT}'
        )
    host = validate_host(str(raw["host"]).strip(), name)
    email = validate_email(str(raw["email"]).strip(), name)
    return ProfileCredentials(host=host, email=email, api_token=str(raw["apiToken"]).strip())


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def split_front_matter(text):
    """Return the YAML block between the leading ``---`` fences, or None."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            return "\n".join(lines[1:i])
    return None


def parse_front_matter(text, source=None):
    block = split_front_matter(text)
    if block is None:
        raise ConfigError(
            f"Malformed config {source or ''}: expected YAML front-matter between '---' lines."
        )
    try:
        data = yaml.safe_load(block) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed config {source or ''}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Malformed config {source or ''}: front-matter must be a mapping.")

    raw_profiles = data.get("profiles")
    if not isinstance(raw_profiles, dict) or not raw_profiles:
        raise ConfigError(f"Config has no profiles section. {SETUP_HINT}")
    profiles = {str(name): _build_profile(str(name), raw) for name, raw in raw_profiles.items()}
    default_profile = str(data.get("defaultProfile") or next(iter(profiles)))
    default_format = str(data.get("defaultFormat") or config.DEFAULT_FORMAT)
    return ProfileConfig(profiles, default_profile, default_format, source_path=source)


def parse_ini(text, source=None):
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        raise ConfigError(f"Malformed config {source or ''}: {exc}") from exc

    auth = parser["auth"] if parser.has_section("auth") else {}
    values = {
        "host": auth.get("host", "").strip(),
        "email": auth.get("email", "").strip(),
        "api_token": auth.get("api_token", "").strip(),
    }
    missing = [key for key, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing required fields: {', '.join(missing)}. {SETUP_HINT}")
    host = validate_host(values["host"])
    email = validate_email(values["email"])
    fmt = config.DEFAULT_FORMAT
    if parser.has_section("defaults"):
        fmt = parser["defaults"].get("format", fmt).strip() or fmt
    name = config.LEGACY_PROFILE_NAME
    profiles = {name: ProfileCredentials(host, email, values["api_token"])}
    return ProfileConfig(profiles, name, fmt, source_path=source)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def resolve_project_root(project_root=None):
    return project_root or config.PROJECT_ROOT or os.getcwd()


def profile_path(project_root=None):
    root = resolve_project_root(project_root)
    return os.path.join(root, config.PROFILE_DIRNAME, config.PROFILE_FILENAME)


def load_config(project_root=None):
    """Load the profile config. Raises ConfigError when none is usable."""
    path = profile_path(project_root)
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            return parse_front_matter(f.read(), source=path)
    if os.path.exists(config.LEGACY_INI_PATH):
        with open(config.LEGACY_INI_PATH, encoding="utf-8") as f:
            return parse_ini(f.read(), source=config.LEGACY_INI_PATH)
    raise ConfigError(f"Config file not found at {path}. {SETUP_HINT}")


def client_options(cfg, profile_name):
    """Connection options for one profile, in the shape ConfluenceClient expects."""
    creds = cfg.get(profile_name)
    return {
        "host": creds.host,
        "authentication": {"basic": {"email": creds.email, "apiToken": creds.api_token}},
    }


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def render_config(cfg):
    """Render a ProfileConfig as a front-matter markdown document."""
    data = {
        "profiles": {name: creds.to_dict() for name, creds in cfg.profiles.items()},
        "defaultProfile": cfg.default_profile,
        "defaultFormat": cfg.default_format,
    }
    block = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    return f"---\n{block}---\n\n# {config.PROG} connection profiles\n"


def save_config(cfg, path):
    """Write *cfg* to *path* (atomic write-then-rename, owner-only permissions)."""
    target_dir = os.path.dirname(path) or "."
    os.makedirs(target_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=".conni_tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(render_config(cfg))
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
    # Restrict to owner-only on Unix/Mac. No-op on Windows.
    try:
        os.chmod(path, 0o600)
    except (OSError, NotImplementedError):
        pass
    return path
