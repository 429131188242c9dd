"""
Command registry: the static table of commands, their arguments and help.

The dispatcher validates argument bags against ``ArgSpec`` entries; the help
printers render the same table, so help and validation cannot drift apart.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from conni_cli import commands


@dataclass(frozen=True)
class ArgSpec:
    """One named argument as the user types it (``name``) and as the handler
    receives it (``param``)."""

    name: str
    param: str
    required: bool = False
    kind: type = str
    help: str = ""


@dataclass(frozen=True)
class CommandSpec:
    name: str
    summary: str
    handler: Callable
    args: tuple[ArgSpec, ...] = ()
    example: str = ""
    # Handler also receives the effective profile name as ``profile``.
    wants_profile: bool = False

    @property
    def detail(self) -> str:
        return format_command_detail(self.name)

    @property
    def required_args(self) -> tuple[str, ...]:
        return tuple(a.name for a in self.args if a.required)

    @property
    def optional_args(self) -> tuple[str, ...]:
        return tuple(a.name for a in self.args if not a.required)

    def arg(self, name) -> ArgSpec | None:
        for spec in self.args:
            if spec.name == name:
                return spec
        return None

    def handler_args(self) -> tuple[ArgSpec, ...]:
        """Arguments forwarded to the handler (everything but the universal ones)."""
        return tuple(a for a in self.args if a.name not in UNIVERSAL_ARGS)


PROFILE_ARG = ArgSpec("profile", "profile", help="Profile name (defaults to defaultProfile)")
FORMAT_ARG = ArgSpec("format", "format", help="Output format: json or toon")
UNIVERSAL_ARGS = ("profile", "format")


def _req(name, param, kind=str, help=""):
    return ArgSpec(name, param, required=True, kind=kind, help=help)


def _opt(name, param, kind=str, help=""):
    return ArgSpec(name, param, required=False, kind=kind, help=help)


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="list-spaces",
        summary="List all accessible spaces",
        handler=commands.cmd_list_spaces,
        args=(PROFILE_ARG, FORMAT_ARG),
        example="list-spaces",
    ),
    CommandSpec(
        name="get-space",
        summary="Get details of a specific space",
        handler=commands.cmd_get_space,
        args=(_req("spaceKey", "space_key", help="Space key"), PROFILE_ARG, FORMAT_ARG),
        example='get-space {"spaceKey":"DOCS"}',
    ),
    CommandSpec(
        name="list-pages",
        summary="List pages in a space or by search criteria",
        handler=commands.cmd_list_pages,
        args=(
            _opt("spaceKey", "space_key", help="Space key to search in"),
            _opt("title", "title", help="Title search string"),
            _opt("limit", "limit", int, help="Maximum number of results (default: 25)"),
            _opt("start", "start", int, help="Starting index for pagination (default: 0)"),
            PROFILE_ARG,
            FORMAT_ARG,
        ),
        example='list-pages {"spaceKey":"DOCS","title":"Getting Started","limit":10}',
    ),
    CommandSpec(
        name="get-page",
        summary="Get details of a specific page",
        handler=commands.cmd_get_page,
        args=(_req("pageId", "page_id", help="Page ID"), PROFILE_ARG, FORMAT_ARG),
        example='get-page {"pageId":"123456"}',
    ),
    CommandSpec(
        name="create-page",
        summary="Create a new page",
        handler=commands.cmd_create_page,
        args=(
            _req("spaceKey", "space_key", help="Space key where the page will be created"),
            _req("title", "title", help="Page title"),
            _req("body", "body", help="Page body (storage format)"),
            _opt("parentId", "parent_id", help="Parent page ID"),
            PROFILE_ARG,
            FORMAT_ARG,
        ),
        example='create-page {"spaceKey":"DOCS","title":"New Page","body":"<p>Hello World</p>"}',
    ),
    CommandSpec(
        name="update-page",
        summary="Update an existing page",
        handler=commands.cmd_update_page,
        args=(
            _req("pageId", "page_id", help="Page ID to update"),
            _req("title", "title", help="New page title"),
            _req("body", "body", help="New page body (storage format)"),
            _req("version", "version", int, help="Current page version number"),
            PROFILE_ARG,
        ),
        example='update-page {"pageId":"123456","title":"Updated","body":"<p>New</p>","version":1}',
    ),
    CommandSpec(
        name="add-comment",
        summary="Add a comment to a page",
        handler=commands.cmd_add_comment,
        args=(
            _req("pageId", "page_id", help="Page ID to comment on"),
            _req("body", "body", help="Comment body (storage format)"),
            PROFILE_ARG,
            FORMAT_ARG,
        ),
        example='add-comment {"pageId":"123456","body":"<p>Looks good</p>"}',
    ),
    CommandSpec(
        name="delete-page",
        summary="Delete a page",
        handler=commands.cmd_delete_page,
        args=(_req("pageId", "page_id", help="Page ID to delete"), PROFILE_ARG),
        example='delete-page {"pageId":"123456"}',
    ),
    CommandSpec(
        name="download-attachment",
        summary="Download an attachment",
        handler=commands.cmd_download_attachment,
        args=(
            _req("attachmentId", "attachment_id", help="Attachment ID"),
            _opt("outputPath", "output_path", help="Where to save the file"),
            PROFILE_ARG,
        ),
        example='download-attachment {"attachmentId":"att123","outputPath":"./doc.pdf"}',
    ),
    CommandSpec(
        name="get-user",
        summary="Get user information",
        handler=commands.cmd_get_user,
        args=(
            _opt("accountId", "account_id", help="User account ID (takes precedence)"),
            _opt("username", "username", help="Display name to search for"),
            PROFILE_ARG,
            FORMAT_ARG,
        ),
        example='get-user {"accountId":"5b10a2844c20165700ede21g"}',
    ),
    CommandSpec(
        name="test-connection",
        summary="Test Confluence API connection",
        handler=commands.cmd_test_connection,
        args=(PROFILE_ARG,),
        example="test-connection",
        wants_profile=True,
    ),
)

_BY_NAME = {spec.name: spec for spec in COMMANDS}
COMMAND_NAMES = tuple(_BY_NAME)


def get_command(name) -> CommandSpec | None:
    if not name:
        return None
    return _BY_NAME.get(name.strip().lower())


# ---------------------------------------------------------------------------
# Help rendering
# ---------------------------------------------------------------------------


def format_command_list():
    lines = ["", "Available commands:"]
    for i, spec in enumerate(COMMANDS, start=1):
        lines.append(f"{i}. {spec.name}: {spec.summary}")
    return "\n".join(lines)


def format_command_detail(name):
    """Help block for one command, or an error plus the command list."""
    spec = get_command(name)
    if spec is None:
        shown = (name or "").strip() or "(empty)"
        return f"ERROR: Unknown command: {shown}\n{format_command_list()}"
    lines = ["", f"{spec.name}: {spec.summary}", "", "Parameters:"]
    if not spec.args:
        lines.append("- none")
    for arg in spec.args:
        marker = "required" if arg.required else "optional"
        kind = "number" if arg.kind is int else "string"
        suffix = f" - {arg.help}" if arg.help else ""
        lines.append(f"- {arg.name} ({marker}): {kind}{suffix}")
    lines.extend(["", "Example:", spec.example or spec.name])
    return "\n".join(lines)
