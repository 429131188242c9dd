"""
Interactive setup wizard for conni-cli (``conni-cli config``).
Creates or updates one connection profile and writes the profile file.
"""

import getpass
import os

from conni_cli import config
from conni_cli._utils import _mask_token
from conni_cli.exceptions import ConfigError
from conni_cli.profiles import (
    ProfileConfig,
    ProfileCredentials,
    load_config,
    profile_path,
    save_config,
    validate_email,
    validate_host,
)

MAX_ATTEMPTS = 3


def _ask(label, default=None, input_fn=input):
    suffix = f" [{default}]" if default else ""
    answer = input_fn(f"  {label}{suffix}: ").strip()
    return answer or (default or "")


def _ask_valid(label, validator, default=None, input_fn=input):
    """Prompt until *validator* accepts the answer (re-raises after MAX_ATTEMPTS)."""
    for attempt in range(MAX_ATTEMPTS):
        value = _ask(label, default, input_fn)
        try:
            return validator(value)
        except ConfigError as e:
            if attempt == MAX_ATTEMPTS - 1:
                raise
            print(f"  ERROR: {e}")
    raise ConfigError(f"No valid value for {label}.")


def _validate_format(value):
    if value not in config.VALID_FORMATS:
        raise ConfigError(f"Invalid format '{value}'. Use: {', '.join(config.VALID_FORMATS)}")
    return value


def _require(label):
    def check(value):
        if not value:
            raise ConfigError(f"{label} cannot be empty.")
        return value

    return check


def _load_existing(project_root):
    if not (os.path.exists(profile_path(project_root)) or os.path.exists(config.LEGACY_INI_PATH)):
        return None
    try:
        return load_config(project_root)
    except ConfigError as e:
        print(f"  Existing configuration could not be read ({e}); starting fresh.")
        return None


def cmd_setup(project_root=None, input_fn=input, secret_fn=getpass.getpass):
    """Run the wizard. Returns the path written."""
    path = profile_path(project_root)
    print(f"\n{config.PROG} configuration\n")
    print(f"Profiles are stored in {path}\n")

    existing = _load_existing(project_root)
    profiles = dict(existing.profiles) if existing else {}

    default_name = existing.default_profile if existing else "default"
    name = _ask_valid("Profile name", _require("Profile name"), default_name, input_fn)
    current = profiles.get(name)

    host = _ask_valid(
        "Confluence host (e.g. https://your-domain.atlassian.net/wiki)",
        validate_host,
        current.host if current else None,
        input_fn,
    )
    email = _ask_valid("Email", validate_email, current.email if current else None, input_fn)

    token_hint = f" [{_mask_token(current.api_token)}]" if current else ""
    api_token = secret_fn(f"  API token{token_hint}: ").strip()
    if not api_token and current:
        api_token = current.api_token
    if not api_token:
        raise ConfigError("API token cannot be empty.")

    default_format = _ask_valid(
        "Default output format (json, toon)",
        _validate_format,
        existing.default_format if existing else config.DEFAULT_FORMAT,
        input_fn,
    )

    profiles[name] = ProfileCredentials(host=host, email=email, api_token=api_token)
    default_profile = existing.default_profile if existing else name
    if existing and name != existing.default_profile:
        answer = _ask(f"Make '{name}' the default profile? (y/N)", None, input_fn)
        if answer.lower() in {"y", "yes"}:
            default_profile = name

    new_config = ProfileConfig(profiles, default_profile, default_format)
    save_config(new_config, path)
    print(f"\nConfiguration saved to {path}")
    print(f"Profiles: {', '.join(new_config.names())} (default: {default_profile})")
    return path
