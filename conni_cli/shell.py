"""
Interactive front-end: a line-oriented shell over CommandDispatcher.

Input lines are either shell built-ins (help, format, profile, ...) or
``<command> [json-args]``. Commands go through the same dispatcher as the
headless runner; the session only supplies its current profile and format
as defaults beneath whatever the argument bag specifies.
"""

import sys

from conni_cli import config
from conni_cli.dispatcher import CommandDispatcher, parse_args_json
from conni_cli.exceptions import CliError, ConfigError
from conni_cli.models import ResultEnvelope
from conni_cli.profiles import load_config
from conni_cli.registry import COMMAND_NAMES, format_command_detail, format_command_list

EXIT_WORDS = {"exit", "quit", "q"}
HELP_WORDS = {"help", "?"}


class Session:
    prompt = "conni> "

    def __init__(self, project_root=None, profile=None, fmt=None, input_fn=input):
        self.project_root = project_root
        self._input = input_fn
        self._profile_override = profile
        self._format_override = fmt
        self.dispatcher = None
        self.current_profile = None
        self.current_format = config.DEFAULT_FORMAT

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------

    def connect(self):
        """Load configuration. ConfigError propagates: there is no session without it."""
        profile_config = load_config(self.project_root)
        self.dispatcher = CommandDispatcher(profile_config)
        self.current_profile = profile_config.default_profile
        self.current_format = profile_config.default_format
        if self._profile_override:
            self.switch_profile(self._profile_override, quiet=True)
        if self._format_override:
            self.set_format(self._format_override, quiet=True)
        self.print_help()

    def disconnect(self):
        print("\nClosing Confluence connections...")
        if self.dispatcher is not None:
            self.dispatcher.close()

    def run(self):
        """Read-eval-print until exit, EOF or Ctrl-C. Always tears the pool down."""
        try:
            while True:
                try:
                    line = self._input(self.prompt)
                except (EOFError, KeyboardInterrupt):
                    print()
                    break
                if not self.handle_line(line):
                    break
        finally:
            self.disconnect()

    # -------------------------------------------------------------------
    # Line handling
    # -------------------------------------------------------------------

    def handle_line(self, line):
        """Handle one input line. Returns False when the session should end."""
        trimmed = (line or "").strip()
        if not trimmed:
            return True

        word, _, rest = trimmed.partition(" ")
        rest = rest.strip()
        lowered = word.lower()

        if trimmed.lower() in EXIT_WORDS:
            return False
        if trimmed.lower() in HELP_WORDS:
            self.print_help()
        elif trimmed == "commands":
            print(format_command_list())
        elif trimmed == "clear":
            print("\033[2J\033[H", end="")
        elif lowered == "format":
            self.set_format(rest)
        elif lowered == "profile" and rest:
            self.switch_profile(rest)
        elif trimmed == "profile":
            print(f"Current profile: {self.current_profile}")
        elif trimmed == "profiles":
            self.print_profiles()
        elif trimmed == "reload":
            self.reload()
        elif rest == "-h":
            print(format_command_detail(word))
        else:
            self.render(self.run_command(word, rest))
        return True

    def run_command(self, command, arg):
        """Dispatch *command* with the JSON argument string *arg*."""
        try:
            args = parse_args_json(arg)
        except CliError as e:
            return ResultEnvelope.fail(str(e))
        if not args.get("profile"):
            args["profile"] = self.current_profile
        if not args.get("format"):
            args["format"] = self.current_format
        return self.dispatcher.dispatch(command, args)

    # -------------------------------------------------------------------
    # Built-ins
    # -------------------------------------------------------------------

    def set_format(self, fmt, quiet=False):
        if fmt in config.VALID_FORMATS:
            self.current_format = fmt
            if not quiet:
                print(f"Output format set to: {fmt}")
        else:
            print(
                f"ERROR: Invalid format. Choose: {' or '.join(config.VALID_FORMATS)}",
                file=sys.stderr,
            )

    def switch_profile(self, name, quiet=False):
        names = self.dispatcher.profile_config.names()
        if name in names:
            self.current_profile = name
            if not quiet:
                print(f"Switched to profile: {name}")
        else:
            print(
                f'ERROR: Profile "{name}" not found. Available: {", ".join(names)}',
                file=sys.stderr,
            )

    def print_profiles(self):
        print("\nAvailable profiles:")
        for i, name in enumerate(self.dispatcher.profile_config.names(), start=1):
            marker = " (current)" if name == self.current_profile else ""
            print(f"{i}. {name}{marker}")

    def reload(self):
        try:
            profile_config = load_config(self.project_root)
        except ConfigError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return
        self.dispatcher.reload(profile_config)
        if self.current_profile not in profile_config.profiles:
            self.current_profile = profile_config.default_profile
        print(f"Configuration reloaded ({len(profile_config.profiles)} profile(s)).")

    def render(self, envelope):
        if envelope.success:
            print("\n" + envelope.result)
        else:
            print("\n" + envelope.error, file=sys.stderr)

    def print_help(self):
        print(
            f"""
Confluence CLI v{config.VERSION}

Current Settings:
  Profile: {self.current_profile}
  Format:  {self.current_format}

Usage:

commands              list all available Confluence commands
<command> -h          quick help on <command>
<command> <arg>       run <command> with JSON argument
profile <name>        switch to a different profile
profiles              list configured profiles
format <type>         set output format (json, toon)
reload                re-read the configuration file
clear                 clear the screen
exit, quit, q         exit the CLI

All commands:

{", ".join(COMMAND_NAMES)}

Examples:
  list-spaces
  get-space {{"spaceKey":"DOCS"}}
  list-pages {{"spaceKey":"DOCS","title":"Getting Started","limit":10}}
  get-page {{"pageId":"123456"}}
  create-page {{"spaceKey":"DOCS","title":"New Page","body":"<p>Hello World</p>"}}
  test-connection
"""
        )
