# CLI interface for mcpdesk
import argparse
import logging
import sys
from pathlib import Path

from mcpdesk import __version__
from mcpdesk.commands import Commands
from mcpdesk.errors import ConfigError, NotFoundError, ParseError, SchemaError, StorageError
from mcpdesk.models import PresetDefinition, SaveResult, ServerEdit, ServerEntry
from mcpdesk.utils.validation import validate_command_exists, validate_entry

# ABOUTME: Exit codes
# 0 = success, 1 = refused (conflict/not found/no backup), 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_REFUSED = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

MASK = "********"

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure root logging for CLI runs (stderr, WARNING unless -v)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_pairs(text: str | None) -> dict[str, str]:
    """Parse comma-separated KEY=VALUE pairs."""
    pairs: dict[str, str] = {}
    if not text:
        return pairs
    for pair in text.split(","):
        if "=" in pair:
            key, value = pair.split("=", 1)
            pairs[key.strip()] = value.strip()
    return pairs


def parse_list(text: str | None) -> list[str]:
    """Parse a comma-separated argument list."""
    if not text:
        return []
    return [item.strip() for item in text.split(",")]


def print_config_error(error: ConfigError) -> int:
    """Report a ConfigError and return the matching exit code.

    ABOUTME: Parse errors show location, suggestion and a restore hint
    """
    if isinstance(error, ParseError):
        print(f"Error: {error.message}")
        print(f"  Location: {error.location()}")
        if error.detail:
            print(f"  Detail: {error.detail}")
        if error.suggestion:
            print(f"  Suggestion: {error.suggestion}")
        if error.has_backup:
            print()
            print("A backup is available. Run 'mcpdesk backup restore' to recover.")
        return EXIT_CONFIG_ERROR

    print(f"Error: {error.message}")
    if isinstance(error, (SchemaError, StorageError)):
        return EXIT_CONFIG_ERROR
    if isinstance(error, NotFoundError) and "Config file not found" in error.message:
        return EXIT_CONFIG_ERROR
    return EXIT_REFUSED


def report_result(result: SaveResult) -> int:
    if result.success:
        print(f"  {result.message}")
        return EXIT_SUCCESS
    if result.error is not None:
        return print_config_error(result.error)
    print(f"Error: {result.message}")
    return EXIT_REFUSED


def format_env(env: dict[str, str], show_secrets: bool) -> str:
    return ", ".join(f"{k}={v if show_secrets else MASK}" for k, v in env.items())


def print_server(server: ServerEntry, show_secrets: bool) -> None:
    print(f"  {server.name}")
    print(f"    command: {server.command}")
    if server.args:
        print(f"    args: {' '.join(server.args)}")
    if server.env:
        print(f"    env: {format_env(server.env, show_secrets)}")


def print_preset(preset: PresetDefinition) -> None:
    print(f"  {preset.name} [{preset.category}, {preset.kind}]")
    print(f"    {preset.description}")
    print(f"    {preset.command} {' '.join(preset.args)}".rstrip())
    for key in preset.api_keys:
        marker = "required" if key.required else "optional"
        print(f"    key: {key.name} ({marker}) {key.description}".rstrip())


def cmd_list(commands: Commands, args: argparse.Namespace) -> int:
    """Execute list command.

    ABOUTME: Loads config and displays all servers
    ABOUTME: Env values are masked unless --show-secrets
    """
    print(f"mcpdesk list v{__version__}")
    print()

    config_path = commands.config_path()
    servers = commands.load_servers()

    print(f"MCP Servers in {config_path}:")
    print()
    for server in servers:
        print_server(server, args.show_secrets)
        print()

    print(f"Total: {len(servers)} server(s)")
    return EXIT_SUCCESS


def cmd_show(commands: Commands, args: argparse.Namespace) -> int:
    server = commands.get_server_details(args.name)
    print_server(server, args.show_secrets)
    return EXIT_SUCCESS


def prompt_edit() -> ServerEdit | None:
    """Interactively ask for command, args and env."""
    command = input("Command (e.g., npx, uvx, docker): ").strip()
    if not command:
        print("Error: Command is required.")
        return None

    args_input = input("Arguments (comma-separated, e.g., -y,@mcp/package): ").strip()
    server_args = parse_list(args_input)

    env_vars: dict[str, str] = {}
    print("Environment variables (KEY=VALUE, one per line, empty line to finish):")
    while True:
        env_input = input("  ").strip()
        if not env_input:
            break
        if "=" in env_input:
            key, value = env_input.split("=", 1)
            env_vars[key.strip()] = value.strip()
        else:
            print("    Invalid format. Use KEY=VALUE.")

    return ServerEdit(command=command, args=server_args, env=env_vars)


def cmd_add(commands: Commands, args: argparse.Namespace) -> int:
    """Execute add command.

    ABOUTME: Non-interactive when --command is given, prompts otherwise
    """
    print(f"mcpdesk add v{__version__}")
    print()

    if args.command:
        edit = ServerEdit(
            command=args.command,
            args=parse_list(args.args),
            env=parse_pairs(args.env),
        )
    else:
        print(f"Adding new MCP server: {args.name}")
        print()
        prompted = prompt_edit()
        if prompted is None:
            return EXIT_CONFIG_ERROR
        edit = prompted

    for warning in validate_entry(args.name, edit):
        if warning.severity == "warning":
            print(f"  Warning: {warning.message}")

    print(f"Adding server '{args.name}'...")
    return report_result(commands.add_server(args.name, edit))


def cmd_update(commands: Commands, args: argparse.Namespace) -> int:
    """Execute update command.

    ABOUTME: Fields not given on the command line keep their current values
    """
    print(f"mcpdesk update v{__version__}")
    print()

    current = commands.get_server_details(args.name)
    edit = ServerEdit(
        command=args.command if args.command else current.command,
        args=parse_list(args.args) if args.args is not None else list(current.args),
        env=parse_pairs(args.env) if args.env is not None else dict(current.env),
    )

    print(f"Updating server '{args.name}'...")
    return report_result(commands.update_server(args.name, edit))


def cmd_remove(commands: Commands, args: argparse.Namespace) -> int:
    print(f"mcpdesk remove v{__version__}")
    print()
    print(f"Removing server '{args.name}'...")
    return report_result(commands.delete_server(args.name))


def cmd_validate(commands: Commands, args: argparse.Namespace) -> int:
    """Execute validate command.

    ABOUTME: Parses the config and reports entry problems without writing
    ABOUTME: Missing commands on PATH are warnings only
    """
    print(f"mcpdesk validate v{__version__}")
    print()

    config_path = commands.config_path()
    print(f"Validating {config_path}...")
    print()

    servers = commands.load_servers()
    print("  ✓ JSON syntax valid")
    print(f"  ✓ {len(servers)} server(s) defined")
    print()

    errors = 0
    warnings = 0
    for server in servers:
        problems = validate_entry(server.name, server.to_edit())
        missing = validate_command_exists(server.command) if server.command else None
        if missing:
            problems.append(missing)
        for problem in problems:
            if problem.severity == "error":
                print(f"    ✗ {server.name}: {problem.message}")
                errors += 1
            else:
                print(f"    ⚠ {server.name}: {problem.message}")
                warnings += 1

    print()
    print(f"Validation complete: {errors} error(s), {warnings} warning(s)")
    return EXIT_CONFIG_ERROR if errors else EXIT_SUCCESS


def cmd_presets(commands: Commands, args: argparse.Namespace) -> int:
    if args.available:
        presets = commands.list_available_presets()
    else:
        presets = commands.list_presets()
    if args.category:
        presets = [p for p in presets if p.category == args.category]
    if args.kind:
        presets = [p for p in presets if p.kind.lower() == args.kind.lower()]

    for preset in presets:
        print_preset(preset)
        print()
    print(f"Total: {len(presets)} preset(s)")
    return EXIT_SUCCESS


def cmd_categories(commands: Commands, args: argparse.Namespace) -> int:
    for category in commands.list_preset_categories():
        print(category)
    return EXIT_SUCCESS


def cmd_kinds(commands: Commands, args: argparse.Namespace) -> int:
    for kind in commands.list_preset_kinds():
        print(kind)
    return EXIT_SUCCESS


def cmd_install(commands: Commands, args: argparse.Namespace) -> int:
    """Execute install command.

    ABOUTME: Keys from --key; missing required keys are prompted on a TTY
    """
    print(f"mcpdesk install v{__version__}")
    print()

    preset = commands.get_preset_by_name(args.preset)
    if preset is None:
        print(f"Error: Preset server '{args.preset}' not found")
        return EXIT_REFUSED

    secrets: dict[str, str] = {}
    for pair in args.key or []:
        if "=" not in pair:
            print(f"Error: --key expects KEY=VALUE, got '{pair}'")
            return EXIT_CONFIG_ERROR
        key, value = pair.split("=", 1)
        secrets[key.strip()] = value.strip()

    if sys.stdin.isatty():
        for key in preset.api_keys:
            if key.required and not secrets.get(key.name):
                if key.description:
                    print(f"  {key.description}")
                secrets[key.name] = input(f"{key.name}: ").strip()

    print(f"Installing preset '{preset.name}'...")
    return report_result(commands.install_preset(preset.name, secrets))


def cmd_backup(commands: Commands, args: argparse.Namespace) -> int:
    if args.action == "create":
        return report_result(commands.create_manual_backup())
    if args.action == "restore":
        return report_result(commands.restore_from_backup())

    info = commands.get_backup_info()
    if info is None:
        print("No backup found.")
        return EXIT_REFUSED
    print(f"Backup: {info.path}")
    print(f"  created: {info.created}")
    print(f"  size: {info.size} bytes")
    print(f"  valid: {'yes' if info.is_valid else 'no'}")
    return EXIT_SUCCESS


def cmd_settings(commands: Commands, args: argparse.Namespace) -> int:
    settings = commands.load_settings()
    if args.action == "show":
        print(f"Settings file: {commands.get_settings_path()}")
        print(f"  claudeConfigPath: {settings.claude_config_path or '(default)'}")
        print(f"  darkMode: {'on' if settings.dark_mode else 'off'}")
        return EXIT_SUCCESS

    if args.action == "set-path":
        settings.claude_config_path = args.value or ""
    elif args.action == "dark-mode":
        settings.dark_mode = args.value == "on"
    return report_result(commands.save_settings(settings))


def cmd_path(commands: Commands, args: argparse.Namespace) -> int:
    print(f"Config in use: {commands.config_path()}")
    print(f"OS default:    {commands.get_default_config_path()}")
    return EXIT_SUCCESS


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "add": cmd_add,
    "update": cmd_update,
    "remove": cmd_remove,
    "validate": cmd_validate,
    "presets": cmd_presets,
    "categories": cmd_categories,
    "kinds": cmd_kinds,
    "install": cmd_install,
    "backup": cmd_backup,
    "settings": cmd_settings,
    "path": cmd_path,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcpdesk",
        description="Manage MCP servers registered in the Claude desktop config"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mcpdesk v{__version__}"
    )
    parser.add_argument(
        "--config",
        help="Config file to edit (overrides settings and OS default)"
    )
    parser.add_argument(
        "--settings",
        help="Alternate mcpdesk settings file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="cmd", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List configured MCP servers")
    list_parser.add_argument("--show-secrets", action="store_true", help="Show env values")

    show_parser = subparsers.add_parser("show", help="Show one MCP server")
    show_parser.add_argument("name", help="Name of the MCP server")
    show_parser.add_argument("--show-secrets", action="store_true", help="Show env values")

    for name, help_text in (("add", "Add a new MCP server"), ("update", "Update an MCP server")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("name", help="Name of the MCP server")
        sub.add_argument("--command", help="Command to run (e.g., npx)")
        sub.add_argument("--args", help="Comma-separated arguments")
        sub.add_argument("--env", help="Comma-separated KEY=VALUE environment variables")

    remove_parser = subparsers.add_parser("remove", help="Remove an MCP server")
    remove_parser.add_argument("name", help="Name of the MCP server to remove")

    subparsers.add_parser("validate", help="Validate config without modifying it")

    presets_parser = subparsers.add_parser("presets", help="List preset servers")
    presets_parser.add_argument("--category", help="Only presets in this category")
    presets_parser.add_argument("--kind", help="Only presets of this kind (npx, uvx, docker, ...)")
    presets_parser.add_argument(
        "--available", action="store_true", help="Hide presets that are already installed"
    )

    subparsers.add_parser("categories", help="List preset categories")
    subparsers.add_parser("kinds", help="List preset kinds")

    install_parser = subparsers.add_parser("install", help="Install a preset server")
    install_parser.add_argument("preset", help="Name of the preset")
    install_parser.add_argument(
        "--key", action="append", help="API key as KEY=VALUE (repeatable)"
    )

    backup_parser = subparsers.add_parser("backup", help="Manage the config backup")
    backup_parser.add_argument("action", choices=["create", "info", "restore"])

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_parser.add_argument("action", choices=["show", "set-path", "dark-mode"])
    settings_parser.add_argument("value", nargs="?", help="Path, or on/off for dark-mode")

    subparsers.add_parser("path", help="Show which config file is used")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    handler = COMMANDS.get(args.cmd) if args.cmd else None
    if handler is None:
        parser.print_help()
        return EXIT_SUCCESS

    if args.cmd == "settings" and args.action == "dark-mode" and args.value not in ("on", "off"):
        parser.error("dark-mode expects 'on' or 'off'")

    commands = Commands(
        config_path=args.config,
        settings_path=Path(args.settings).expanduser() if args.settings else None,
    )

    try:
        return handler(commands, args)
    except ConfigError as e:
        return print_config_error(e)
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
