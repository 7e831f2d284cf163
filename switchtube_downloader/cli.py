"""Command-line interface (download, token management, version)."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import print as rprint
from rich.markup import escape

from . import __version__
from .config import DEFAULT_CONFIG_PATH, AppConfig, DownloadOptions
from .downloader import DownloadError, download
from .client import APIError
from .logging_utils import get_logger, set_verbose
from .selector import UserAbort
from .terminal import TerminalError
from .tokens import TokenAlreadyExistsError, TokenError, TokenManager

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 130


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="switchtube-dl", description="SwitchTube video / channel downloader"
    )
    p.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Settings file (default: {DEFAULT_CONFIG_PATH})",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", metavar="<command>")

    dl = sub.add_parser(
        "download",
        help="Download a video or channel",
        description=(
            "Download a video or channel. Automatically detects if input is a video "
            "or channel. You can also pass the whole URL instead of the ID."
        ),
    )
    dl.add_argument("media", metavar="<id|url>", help="Video or channel ID / URL")
    dl.add_argument(
        "-e",
        "--episode",
        action="store_true",
        help="Prefix the file with the episode number e.g. 01_OR_Mapping.mp4",
    )
    dl.add_argument("-s", "--skip", action="store_true", help="Skip video if it already exists")
    dl.add_argument("-f", "--force", action="store_true", help="Force overwrite if file already exists")
    dl.add_argument("-a", "--all", action="store_true", help="Download the whole content of a channel")
    dl.add_argument("-o", "--output", help="Output directory for downloaded files")
    dl.add_argument("-j", "--jobs", type=int, help="Max parallel downloads for channels")

    tok = sub.add_parser(
        "token",
        help="Manage the SwitchTube access token",
        description="Manage the SwitchTube access token stored in the system keyring",
    )
    tok.set_defaults(token_parser=tok)
    tok_sub = tok.add_subparsers(dest="token_command", metavar="<action>")
    tok_sub.add_parser("get", help="Show the stored access token")
    tok_sub.add_parser("set", help="Create and store a new access token")
    tok_sub.add_parser("delete", help="Delete the access token from the keyring")
    tok_sub.add_parser("validate", help="Validate the stored access token")

    sub.add_parser("version", help="Print the version number")
    return p


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.command is None:
        parser.print_help()
        return EXIT_OK
    if args.command == "version":
        print(__version__)
        return EXIT_OK

    if args.command == "download" and args.jobs is not None and args.jobs < 1:
        parser.error("--jobs must be at least 1")
    if args.command == "token" and args.token_command is None:
        args.token_parser.print_help()
        return EXIT_OK

    try:
        config = AppConfig.from_file(args.config)
        get_logger().debug("Loaded settings from %s", args.config)
        if args.command == "download":
            return _download(args, config)
        return _token(args, config)
    except (UserAbort, KeyboardInterrupt):
        rprint("\n[yellow]Aborted[/yellow]")
        return EXIT_ABORTED
    except TokenAlreadyExistsError:
        return EXIT_OK
    except (DownloadError, TokenError, APIError, TerminalError, OSError, ValueError) as e:
        rprint(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return EXIT_ERROR


def _download(args: argparse.Namespace, config: AppConfig) -> int:
    if args.jobs is not None:
        config.max_concurrency = args.jobs
    output = args.output.strip() if args.output else ""
    options = DownloadOptions(
        media=args.media,
        use_episode=args.episode,
        skip=args.skip,
        force=args.force,
        all=args.all,
        output=Path(output) if output else None,
    )
    download(options, config)
    return EXIT_OK


def _token(args: argparse.Namespace, config: AppConfig) -> int:
    tokens = TokenManager(config.keyring_service, config.base_url, config.timeout_seconds)
    action = args.token_command
    if action == "get":
        rprint(f"Token: {escape(tokens.get())}")
    elif action == "set":
        tokens.set()
    elif action == "delete":
        tokens.delete()
    elif action == "validate":
        tokens.validate()
    return EXIT_OK
