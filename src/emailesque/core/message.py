# =============================================================================
# Message Composition
# =============================================================================
# Builds a ComposedMessage from typed options:
#   - Resolves the to/from/cc/bcc address lists
#   - Picks the body parts (plain text, HTML, or both)
#   - Applies extra headers and attachments
#
# A ComposedMessage knows how to render itself as a MIME message, but it
# never sends itself; that's the transport's job.
#
# MIME structure produced by to_mime():
#   - Text only:            text/plain
#   - HTML only:            text/html
#   - Text + HTML:          multipart/alternative
#   - Any of the above with attachments: multipart/mixed wrapping the body
# =============================================================================

import logging
import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass, field
from email.encoders import encode_base64
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from pathlib import Path

from emailesque.core.addresses import address_list, resolve_addresses
from emailesque.core.options import BodyType, EmailOptions
from emailesque.exceptions import AttachmentError

logger = logging.getLogger(__name__)

# Default X-Mailer header (an extra "X-Mailer" header replaces it)
X_MAILER = "Emailesque"


@dataclass
class MessageAttachment:
    """
    A file attached to a composed message.

    Attributes:
        filename: Name shown to the recipient.
        content_type: MIME type (e.g., "application/pdf").
        data: Raw file contents.
    """
    filename: str
    content_type: str
    data: bytes


@dataclass
class ComposedMessage:
    """
    An outgoing message, before it's rendered to MIME.

    Address fields hold normalized, comma-joined address lists.

    Attributes:
        to: Recipients.
        sender: The From address.
        subject: Subject line.
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients (envelope only, never a header).
        text_body: Plain-text body part.
        html_body: HTML body part.
        headers: Extra (name, value) headers, in the order they were added.
        attachments: Attached files, in the order they were added.
    """
    to: str | None = None
    sender: str | None = None
    subject: str = ""
    cc: str | None = None
    bcc: str | None = None
    text_body: str | None = None
    html_body: str | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    attachments: list[MessageAttachment] = field(default_factory=list)

    @property
    def envelope_sender(self) -> str:
        """The bare address of the first sender."""
        senders = address_list(self.sender)
        return senders[0] if senders else ""

    @property
    def recipients(self) -> list[str]:
        """Every envelope recipient: To, then Cc, then Bcc."""
        return address_list(self.to) + address_list(self.cc) + address_list(self.bcc)

    def header(self, name: str, value: str) -> None:
        """Add an extra header."""
        self.headers.append((name, value))

    def attach(self, data: bytes, filename: str, content_type: str | None = None) -> None:
        """Attach raw bytes under the given file name."""
        if content_type is None:
            content_type = guess_content_type(filename)
        self.attachments.append(MessageAttachment(filename, content_type, data))

    def attach_file(self, path: str, name: str | None = None) -> None:
        """
        Attach a file from disk.

        Args:
            path: Filesystem path of the file to read.
            name: Name to show the recipient. Defaults to the file's basename.

        Raises:
            AttachmentError: If the file can't be read.
        """
        file_path = Path(path)
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise AttachmentError(str(path), e.strerror or str(e)) from e

        filename = name or file_path.name
        logger.debug(f"Attaching {path} as {filename} ({len(data)} bytes)")
        self.attach(data, filename)

    def to_mime(self) -> Message:
        """
        Render the message as a MIME message ready to send.

        Date, Message-ID and X-Mailer are generated here, so two renders of
        the same ComposedMessage differ only in those headers.
        """
        body = self._build_body()

        if self.attachments:
            msg = MIMEMultipart("mixed")
            msg.attach(body)
            for attachment in self.attachments:
                maintype, subtype = attachment.content_type.split("/", 1)
                part = MIMEBase(maintype, subtype)
                part.set_payload(attachment.data)
                encode_base64(part)
                part.add_header(
                    "Content-Disposition",
                    "attachment",
                    filename=attachment.filename,
                )
                msg.attach(part)
        else:
            msg = body

        # Set headers
        if self.sender:
            msg["From"] = self.sender
        if self.to:
            msg["To"] = self.to
        if self.cc:
            msg["Cc"] = self.cc
        # Note: BCC is not added to headers (that's the point of BCC)
        msg["Subject"] = self.subject
        msg["Date"] = formatdate(localtime=True)
        # Bare local names ("root") fall back to the local hostname
        sender = self.envelope_sender
        domain = sender.rpartition("@")[2] if "@" in sender else None
        msg["Message-ID"] = make_msgid(domain=domain)
        msg["X-Mailer"] = X_MAILER

        # Extra headers replace any header of the same name set above
        for name, _ in self.headers:
            del msg[name]
        for name, value in self.headers:
            msg[name] = value

        return msg

    def _build_body(self) -> Message:
        if self.text_body is not None and self.html_body is not None:
            body = MIMEMultipart("alternative")
            body.attach(MIMEText(self.text_body, "plain", "utf-8"))
            body.attach(MIMEText(self.html_body, "html", "utf-8"))
            return body
        if self.html_body is not None:
            return MIMEText(self.html_body, "html", "utf-8")
        return MIMEText(self.text_body or "", "plain", "utf-8")


def guess_content_type(filename: str) -> str:
    """Guess a MIME type from a file name, defaulting to octet-stream."""
    content_type, encoding = mimetypes.guess_type(filename)
    if content_type is None or encoding is not None:
        return "application/octet-stream"
    return content_type


# =============================================================================
# Composition Steps
# =============================================================================

def compose_body(composed: ComposedMessage, message, body_type: BodyType) -> None:
    """
    Set the body part(s) of a composed message.

    - MULTI: html and/or text parts from a {"text", "html"} mapping;
      an entry whose value is None is skipped.
    - HTML: the whole message as the HTML part.
    - TEXT: the whole message as the plain-text part.
    """
    if body_type is BodyType.MULTI:
        if isinstance(message, Mapping):
            if message.get("html") is not None:
                composed.html_body = str(message["html"])
            if message.get("text") is not None:
                composed.text_body = str(message["text"])
    elif body_type is BodyType.HTML:
        composed.html_body = str(message)
    else:
        composed.text_body = str(message)


def apply_headers(composed: ComposedMessage, headers: Mapping[str, str]) -> None:
    """Add every extra header to the composed message."""
    for name, value in headers.items():
        composed.header(name, value)


def apply_attachments(
    composed: ComposedMessage,
    attachments: list[tuple[str, str | None]],
) -> None:
    """
    Attach (path, name) pairs.

    The file at path is always what gets attached; name, when given, is
    what the recipient sees instead of the file's own name.
    """
    for path, name in attachments:
        composed.attach_file(path, name)


def compose_message(options: EmailOptions) -> ComposedMessage:
    """
    Build a ComposedMessage from validated options.

    Raises:
        AddressParseFailure: If an address field can't be parsed.
        AttachmentError: If an attachment can't be read.
    """
    composed = ComposedMessage(
        to=resolve_addresses(options.to, "to"),
        sender=resolve_addresses(options.sender, "from"),
        cc=resolve_addresses(options.cc, "cc"),
        bcc=resolve_addresses(options.bcc, "bcc"),
        subject=options.subject,
    )

    # reply_to goes out verbatim, without address parsing
    if options.reply_to:
        composed.header("Return-Path", options.reply_to)

    compose_body(composed, options.message, options.body_type)
    apply_headers(composed, options.headers)
    apply_attachments(composed, options.attachments)

    return composed
