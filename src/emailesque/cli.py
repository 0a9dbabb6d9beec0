# =============================================================================
# Command-Line Interface
# =============================================================================
# A thin wrapper that turns flags into an options mapping and hands it to
# Emailesque. Default settings come from the config file (see config.py);
# flags given on the command line win over them.
#
# Examples:
#   emailesque --to a@example.com --from me@example.com \
#              --subject "Report" --message-file report.txt \
#              --attach out/report.pdf=Report.pdf
#
#   emailesque --profile work --type multi --text "Hi" --html "<b>Hi</b>" ...
#
#   emailesque --dry-run ...     # print the message instead of sending it
# =============================================================================

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from emailesque import __app_name__, __version__
from emailesque.config import Config, print_paths
from emailesque.exceptions import EmailesqueError
from emailesque.mailer import Emailesque


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Emailesque: send an email from the command line",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )
    parser.add_argument("--profile", help="Config profile to use")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the composed message instead of sending it",
    )

    # Message
    message = parser.add_argument_group("message")
    message.add_argument("--to", help="Recipients (comma-separated)")
    message.add_argument("--from", dest="sender", help="Sender address")
    message.add_argument("--cc", help="Carbon-copy recipients")
    message.add_argument("--bcc", help="Blind carbon-copy recipients")
    message.add_argument("--reply-to", help="Return-Path header value")
    message.add_argument("--subject", help="Subject line")
    message.add_argument("--message", help="Message body")
    message.add_argument("--message-file", type=Path, help="Read the message body from a file")
    message.add_argument("--text", help="Plain-text body (with --type multi)")
    message.add_argument("--html", help="HTML body (with --type multi)")
    message.add_argument("--type", choices=["text", "html", "multi"], help="Body type")
    message.add_argument(
        "--attach",
        action="append",
        default=[],
        metavar="PATH[=NAME]",
        help="Attach a file, optionally under another name (repeatable)",
    )
    message.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Add a header (repeatable)",
    )

    # Transport
    transport = parser.add_argument_group("transport")
    transport.add_argument("--driver", choices=["sendmail", "smtp", "qmail", "nntp"])
    transport.add_argument("--path", help="sendmail/qmail-inject executable")
    transport.add_argument("--host", help="SMTP or NNTP server")
    transport.add_argument("--port", type=int, help="Server port")
    transport.add_argument("--user", help="SMTP username (password comes from the keyring)")
    transport.add_argument("--ssl", action="store_true", default=None, help="Use implicit TLS")
    transport.add_argument("--tls", action="store_true", default=None, help="Use STARTTLS")

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> dict[str, Any]:
    """
    Turn parsed arguments into an options mapping.

    Only flags that were actually given end up in the mapping, so config
    file settings still apply for the rest.

    Raises:
        ValueError: If a --header value has no ":".
    """
    options: dict[str, Any] = {}

    for key, value in (
        ("to", args.to),
        ("from", args.sender),
        ("cc", args.cc),
        ("bcc", args.bcc),
        ("reply_to", args.reply_to),
        ("subject", args.subject),
        ("type", args.type),
        ("driver", args.driver),
        ("path", args.path),
        ("host", args.host),
        ("port", args.port),
        ("user", args.user),
        ("ssl", args.ssl),
        ("tls", args.tls),
        ("debug", args.debug or None),
    ):
        if value is not None:
            options[key] = value

    if args.text is not None or args.html is not None:
        options["message"] = {"text": args.text or "", "html": args.html or ""}
        options.setdefault("type", "multi")
    elif args.message_file is not None:
        options["message"] = args.message_file.read_text(encoding="utf-8")
    elif args.message is not None:
        options["message"] = args.message

    if args.header:
        headers = {}
        for header in args.header:
            name, sep, value = header.partition(":")
            if not sep:
                raise ValueError(f"Header must look like NAME:VALUE, got {header!r}")
            headers[name.strip()] = value.strip()
        options["headers"] = headers

    if args.attach:
        attachments = []
        for item in args.attach:
            path, _, name = item.partition("=")
            attachments.append((path, name or None))
        options["attach"] = attachments

    return options


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the emailesque command.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads settings from the config file
        4. Sends (or with --dry-run, prints) the message

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    try:
        mailer = Emailesque(Config.load(args.config).settings_for(args.profile))
        options = build_options(args)

        if args.dry_run:
            message, transport = mailer.prepare(options)
            print(f"# transport: {transport.describe()}")
            print(message.to_mime().as_string())
            return 0

        result = mailer.send(options)
    except (EmailesqueError, OSError, ValueError) as e:
        print(f"{__app_name__}: {e}", file=sys.stderr)
        return 1

    print(f"Sent {result.message_id} via {result.transport}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
