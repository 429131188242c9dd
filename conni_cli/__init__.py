"""conni-cli — command-line, interactive and MCP client for Confluence."""

from conni_cli.client import ConfluenceClient
from conni_cli.config import VERSION
from conni_cli.dispatcher import CommandDispatcher
from conni_cli.exceptions import (
    ArgumentParseError,
    CliError,
    ConfigError,
    MissingArgumentError,
    ProfileNotFoundError,
    RemoteOperationError,
    UnknownCommandError,
)
from conni_cli.models import ResultEnvelope
from conni_cli.pool import ClientPool
from conni_cli.profiles import ProfileConfig, ProfileCredentials, load_config
from conni_cli.types import (
    AttachmentDownload,
    ConnectionCheck,
    MutationResult,
    PageRow,
    SpaceRow,
)

__all__ = [
    "VERSION",
    "ConfluenceClient",
    "ClientPool",
    "CommandDispatcher",
    "ResultEnvelope",
    "ProfileConfig",
    "ProfileCredentials",
    "load_config",
    "CliError",
    "ConfigError",
    "ArgumentParseError",
    "MissingArgumentError",
    "ProfileNotFoundError",
    "RemoteOperationError",
    "UnknownCommandError",
    "AttachmentDownload",
    "ConnectionCheck",
    "MutationResult",
    "PageRow",
    "SpaceRow",
]
