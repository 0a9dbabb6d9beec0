# =============================================================================
# Options
# =============================================================================
# Turns the loosely-typed options mapping callers hand us into a typed
# EmailOptions object.
#
# Pipeline:
#   1. merge_options()     - call-time options over stored settings
#   2. validate_options()  - mandatory fields, multipart shape
#   3. EmailOptions.from_mapping() - typed, defaulted view of the result
#
# Recognized keys:
#   to, from, cc, bcc, reply_to, subject, message, type, headers, attach,
#   driver, path, host, port, user, pass, ssl, tls, debug
# =============================================================================

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from emailesque.exceptions import (
    AttachmentError,
    InvalidMultipartBody,
    InvalidOptionError,
    MissingRequiredField,
    UnknownDriverError,
)


# Options that must be non-empty before we compose anything
REQUIRED_FIELDS = ("to", "from", "subject", "message")


class BodyType(Enum):
    """
    How the message option is turned into body parts.

    - TEXT: message is a plain-text string (the default)
    - HTML: message is an HTML string
    - MULTI: message is a mapping with "text" and "html" entries
    """
    TEXT = "text"
    HTML = "html"
    MULTI = "multi"

    @classmethod
    def parse(cls, value: Any) -> "BodyType":
        """
        Parse a type option, case-insensitively.

        Anything that isn't "html" or "multi" (including None) means TEXT.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "html":
                return cls.HTML
            if lowered == "multi":
                return cls.MULTI
        return cls.TEXT


class Driver(Enum):
    """The named transport kinds a driver option can select."""
    SENDMAIL = "sendmail"
    SMTP = "smtp"
    QMAIL = "qmail"
    NNTP = "nntp"

    @classmethod
    def parse(cls, value: Any) -> "Driver":
        """
        Parse a driver option, case-insensitively.

        Raises:
            UnknownDriverError: If the value doesn't name a known driver.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownDriverError(str(value)) from None


# =============================================================================
# Merging and Validation
# =============================================================================

def merge_options(
    settings: Mapping[str, Any] | None,
    options: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """
    Merge call-time options over stored settings.

    The call-time value wins whenever both define a key; keys found in only
    one side pass through. Neither input is modified.

    Args:
        settings: Defaults bound at construction time.
        options: Options for this one send.

    Returns:
        A new dictionary with the effective options.
    """
    merged: dict[str, Any] = {}
    if isinstance(settings, Mapping):
        merged.update(settings)
    if isinstance(options, Mapping):
        merged.update(options)
    return merged


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, Mapping)):
        return len(value) == 0
    return False


def validate_options(options: Mapping[str, Any]) -> None:
    """
    Check that the effective options can produce a message.

    Raises:
        MissingRequiredField: If to, from, subject or message is missing
            or empty (an empty mapping counts as an empty message).
        InvalidMultipartBody: If type is "multi" and message isn't a mapping
            with both "text" and "html" keys. Empty values are allowed.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_empty(options.get(name))]
    if missing:
        raise MissingRequiredField(missing)

    if BodyType.parse(options.get("type")) is BodyType.MULTI:
        message = options["message"]
        if not isinstance(message, Mapping):
            raise InvalidMultipartBody(
                "type 'multi' requires a message mapping, "
                f"got {type(message).__name__}"
            )
        absent = [key for key in ("text", "html") if key not in message]
        if absent:
            raise InvalidMultipartBody(
                f"type 'multi' message is missing: {', '.join(absent)}"
            )


# =============================================================================
# Attachment Normalization
# =============================================================================

def _is_path_like(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike))


def normalize_attachments(attach: Any) -> list[tuple[str, str | None]]:
    """
    Normalize the attach option to an ordered list of (path, name) pairs.

    Accepted shapes:
        - {"/path/to/file": "name.pdf", "/other/file": None}
        - [("/path/to/file", "name.pdf"), ("/other/file", None)]
        - ["/path/to/file", "name.pdf", "/other/file", None]

    The first element of a pair is always the filesystem path; the second
    is the display name. Empty names become None.
    """
    if not attach:
        return []

    if isinstance(attach, Mapping):
        pairs = list(attach.items())
    elif isinstance(attach, (list, tuple)):
        if all(item is None or _is_path_like(item) for item in attach):
            # Flat list: path, name, path, name, ...
            if len(attach) % 2:
                raise AttachmentError(
                    str(attach[-1]),
                    f"attach list must hold path/name pairs (got {len(attach)} items)",
                )
            pairs = list(zip(attach[0::2], attach[1::2]))
        else:
            pairs = []
            for item in attach:
                if _is_path_like(item):
                    pairs.append((item, None))
                else:
                    try:
                        path, name = item
                    except (TypeError, ValueError) as e:
                        raise AttachmentError(str(item), "expected a (path, name) pair") from e
                    pairs.append((path, name))
    else:
        # A single path
        pairs = [(attach, None)]

    for path, _ in pairs:
        if not _is_path_like(path):
            raise AttachmentError(str(path), "attachment path must be a string or path")

    return [(os.fspath(path), str(name) if name else None) for path, name in pairs]


# =============================================================================
# Typed Options
# =============================================================================

@dataclass
class EmailOptions:
    """
    Typed view of the effective options for one send.

    Built by from_mapping() after validation. Address fields are still the
    raw strings here; resolving them is the composer's job.

    Attributes:
        to: Recipient list (comma-separated).
        sender: Sender address (the "from" option).
        subject: Subject line.
        message: Body string, or a {"text": ..., "html": ...} mapping.
        body_type: How message becomes body parts.
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients.
        reply_to: Written literally as a Return-Path header.
        headers: Extra headers to add.
        attachments: (path, display name or None) pairs.
        driver: Driver name or Driver member; parsed when the transport is selected.
        path: Executable path for sendmail/qmail.
        host: SMTP or NNTP server hostname.
        port: Server port.
        user: SMTP username.
        password: SMTP password (the "pass" option).
        ssl: Use implicit TLS for SMTP.
        tls: Use STARTTLS for SMTP.
        debug: Log the SMTP conversation.
    """
    to: str
    sender: str
    subject: str
    message: str | Mapping[str, Any]
    body_type: BodyType = BodyType.TEXT
    cc: str | None = None
    bcc: str | None = None
    reply_to: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    attachments: list[tuple[str, str | None]] = field(default_factory=list)

    # Transport
    driver: str | Driver | None = None
    path: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    ssl: bool = False
    tls: bool = False
    debug: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "EmailOptions":
        """
        Validate an effective options mapping and build EmailOptions from it.

        Raises:
            MissingRequiredField: See validate_options().
            InvalidMultipartBody: See validate_options().
        """
        validate_options(options)

        headers = options.get("headers")
        if not isinstance(headers, Mapping):
            headers = {}

        port = options.get("port")
        if port:
            try:
                port = int(port)
            except (TypeError, ValueError) as e:
                raise InvalidOptionError("port", port) from e

        return cls(
            to=str(options["to"]),
            sender=str(options["from"]),
            subject=str(options["subject"]),
            message=options["message"],
            body_type=BodyType.parse(options.get("type")),
            cc=_optional_str(options.get("cc")),
            bcc=_optional_str(options.get("bcc")),
            reply_to=_optional_str(options.get("reply_to")),
            headers={str(k): str(v) for k, v in headers.items()},
            attachments=normalize_attachments(options.get("attach")),
            driver=options.get("driver") or None,
            path=_optional_str(options.get("path")),
            host=_optional_str(options.get("host")),
            port=port or None,
            user=_optional_str(options.get("user")),
            password=_optional_str(options.get("pass")),
            ssl=bool(options.get("ssl")),
            tls=bool(options.get("tls")),
            debug=bool(options.get("debug")),
        )


def _optional_str(value: Any) -> str | None:
    """Return str(value), or None for None and empty strings."""
    if value is None or value == "":
        return None
    return str(value)
