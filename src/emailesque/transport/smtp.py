# =============================================================================
# SMTP Transport
# =============================================================================
# Delivers messages over SMTP using aiosmtplib.
#
# Emailesque's API is synchronous, so each delivery runs one short-lived
# event loop (asyncio.run) around aiosmtplib.send(). Don't call it from
# inside a running event loop.
#
# Connection security:
#   - ssl=True:  implicit TLS from the first byte (usually port 465)
#   - tls=True:  plain connection upgraded with STARTTLS (usually port 587)
#   - neither:   aiosmtplib upgrades opportunistically if the server offers it
#
# Passwords can come from the options or from the system keyring, under
# the service name "emailesque:<host>".
# =============================================================================

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import aiosmtplib
import keyring
from keyring.errors import KeyringError

from emailesque.exceptions import TransportFailure
from emailesque.transport.base import DeliveryResult, Transport

if TYPE_CHECKING:
    from emailesque.core import ComposedMessage

logger = logging.getLogger(__name__)


def keyring_service(host: str) -> str:
    """
    Returns the service name used for keyring password storage.

    Passwords can be managed with the keyring CLI:
        keyring set emailesque:smtp.example.com user@example.com
    """
    return f"emailesque:{host}"


def lookup_password(host: str, user: str) -> str | None:
    """
    Look up an SMTP password in the system keyring.

    Returns:
        The password, or None if there isn't one or no keyring is usable.
    """
    try:
        password = keyring.get_password(keyring_service(host), user)
    except KeyringError as e:
        logger.warning(f"Keyring unavailable, no password for {user}@{host}: {e}")
        return None

    if password:
        logger.debug(f"Using keyring password for {user} on {host}")
    return password


@dataclass
class SmtpTransport(Transport):
    """
    SMTP delivery configuration.

    Without username and password the transport relays anonymously.

    Attributes:
        host: SMTP server hostname.
        port: Server port. None lets aiosmtplib pick (465 with ssl,
              587 with tls, 25 otherwise).
        username: Login name for authentication.
        password: Login password.
        ssl: Connect with implicit TLS.
        tls: Upgrade the connection with STARTTLS.
        debug: Log the SMTP conversation at DEBUG level.
    """
    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    ssl: bool = False
    tls: bool = False
    debug: bool = False

    kind = "smtp"

    # Timeout for SMTP operations (seconds)
    TIMEOUT = 30

    @property
    def authenticated(self) -> bool:
        """True if the transport logs in before sending."""
        return bool(self.username and self.password)

    def parameters(self) -> list[tuple[str, Any]]:
        params: list[tuple[str, Any]] = [("host", self.host)]
        if self.port:
            params.append(("port", self.port))
        if self.username:
            params.append(("username", self.username))
        if self.password:
            params.append(("password", self.password))
        if self.ssl:
            params.append(("ssl", True))
        if self.tls:
            params.append(("tls", True))
        if self.debug:
            params.append(("debug", True))
        return params

    def deliver(self, message: "ComposedMessage") -> DeliveryResult:
        mime = message.to_mime()
        recipients = message.recipients
        hostname = self.host or "localhost"

        if self.debug:
            logging.getLogger("aiosmtplib").setLevel(logging.DEBUG)

        logger.info(f"Sending email via SMTP {hostname}:{self.port or 'default'} "
                    f"to {', '.join(recipients)}")

        try:
            errors, response = asyncio.run(self._send(mime, message.envelope_sender, recipients))
        except aiosmtplib.SMTPAuthenticationError as e:
            raise TransportFailure(
                self.kind, f"authentication failed for {self.username}: {e}"
            ) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise TransportFailure(self.kind, f"{hostname}: {e}") from e

        for address, error in errors.items():
            logger.warning(f"Server refused recipient {address}: {error}")

        logger.info(f"Email sent successfully: {mime['Message-ID']}")
        return DeliveryResult(
            transport=self.kind,
            message_id=mime["Message-ID"],
            recipients=recipients,
            response=str(response),
        )

    async def _send(self, mime, sender: str, recipients: list[str]):
        """Run one aiosmtplib.send() call."""
        return await aiosmtplib.send(
            mime,
            sender=sender or None,
            recipients=recipients,
            hostname=self.host or "localhost",
            port=self.port,
            username=self.username if self.authenticated else None,
            password=self.password if self.authenticated else None,
            use_tls=self.ssl,
            start_tls=True if self.tls and not self.ssl else None,
            timeout=self.TIMEOUT,
        )
