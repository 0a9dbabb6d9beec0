# =============================================================================
# Mailer
# =============================================================================
# The two public entry points:
#
#   email({...})                    - one-shot send with no stored settings
#   Emailesque({...}).send({...})   - reusable sender with default settings
#
# A send is one blocking chain:
#   merge -> validate -> resolve addresses -> compose body -> headers and
#   attachments -> select transport -> deliver
#
# Nothing is sent unless every earlier step succeeds. Nothing is retried.
# =============================================================================

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from emailesque.config import Config
from emailesque.core import ComposedMessage, Driver, EmailOptions, compose_message, merge_options
from emailesque.transport import DeliveryResult, Transport, select_transport

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = Driver.SENDMAIL.value


class Emailesque:
    """
    A reusable sender bound to a set of default options.

    Settings given at construction are copied and frozen; each send()
    merges its own options over them, with the send() options winning.

    Usage:
        >>> mailer = Emailesque({"from": "news@example.com", "type": "html"})
        >>> mailer.send({
        ...     "to": "reader@example.com",
        ...     "subject": "Issue 12",
        ...     "message": "<h1>Hello</h1>",
        ... })

    Attributes:
        settings: Read-only mapping of the default options.
    """

    def __init__(self, settings: Mapping[str, Any] | None = None) -> None:
        """
        Initialize the sender.

        Args:
            settings: Default options. "driver" defaults to "sendmail".

        Raises:
            UnknownDriverError: If settings name an unknown driver.
        """
        stored = dict(settings) if isinstance(settings, Mapping) else {}
        if not stored.get("driver"):
            stored["driver"] = DEFAULT_DRIVER
        else:
            Driver.parse(stored["driver"])

        self._settings = MappingProxyType(stored)

    @property
    def settings(self) -> Mapping[str, Any]:
        return self._settings

    @classmethod
    def from_config(cls, profile: str | None = None, path: Path | None = None) -> "Emailesque":
        """
        Create a sender from the config file.

        Args:
            profile: Profile name; defaults to the file's default_profile.
            path: Config file; defaults to the XDG location.

        Raises:
            ConfigError: If the file is invalid or the profile doesn't exist.
        """
        return cls(Config.load(path).settings_for(profile))

    def prepare(
        self,
        options: Mapping[str, Any] | None = None,
        transport: Transport | None = None,
    ) -> tuple[ComposedMessage, Transport]:
        """
        Build the message and pick the transport without sending.

        Returns:
            (composed message, transport) pair.

        Raises:
            MissingRequiredField: If to, from, subject or message is missing.
            InvalidMultipartBody: If type is "multi" without a text/html mapping.
            AddressParseFailure: If an address field can't be parsed.
            AttachmentError: If an attachment can't be read.
            NoTransportConfigured: If there's no driver and no transport.
            UnknownDriverError: If the driver isn't recognized.
        """
        effective = EmailOptions.from_mapping(merge_options(self._settings, options))
        message = compose_message(effective)
        selected = select_transport(effective, transport)
        return message, selected

    def send(
        self,
        options: Mapping[str, Any] | None = None,
        transport: Transport | None = None,
    ) -> DeliveryResult:
        """
        Compose and deliver a message.

        Args:
            options: Options for this message, merged over the settings.
            transport: Explicit transport to use instead of the driver option.

        Returns:
            DeliveryResult describing the delivered message.

        Raises:
            EmailesqueError: See prepare(); delivery problems raise
                TransportFailure.
        """
        message, selected = self.prepare(options, transport)
        kind = getattr(selected, "kind", "") or type(selected).__name__
        logger.info(f"Sending {message.subject!r} to {message.to} via {kind}")
        return selected.deliver(message)

    def __repr__(self) -> str:
        return f"Emailesque(driver={self._settings.get('driver')!r})"


def email(options: Mapping[str, Any] | None = None, transport: Transport | None = None) -> DeliveryResult:
    """
    Send one message.

    Example:
        >>> email({
        ...     "to": "someone@example.com",
        ...     "from": "me@example.com",
        ...     "subject": "Hi",
        ...     "message": "Hello there",
        ... })

    Equivalent to Emailesque().send(options, transport).
    """
    return Emailesque().send(options, transport)
