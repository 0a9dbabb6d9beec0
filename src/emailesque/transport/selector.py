# =============================================================================
# Transport Selection
# =============================================================================
# Picks the transport for one send. First match wins:
#
#   explicit transport  -> used as-is, driver ignored
#   sendmail            -> SendmailTransport (path or first well-known location)
#   smtp                -> SmtpTransport, authenticated when host, user
#                          and pass are all known, else host only
#   qmail               -> QmailTransport (path or first well-known location)
#   nntp                -> NntpTransport (host only)
#   no driver           -> NoTransportConfigured
#   anything else       -> UnknownDriverError
# =============================================================================

import logging

from emailesque.core.options import Driver, EmailOptions
from emailesque.exceptions import NoTransportConfigured
from emailesque.transport.base import Transport
from emailesque.transport.local import QmailTransport, SendmailTransport
from emailesque.transport.nntp import NntpTransport
from emailesque.transport.smtp import SmtpTransport, lookup_password

logger = logging.getLogger(__name__)


def select_transport(options: EmailOptions, transport: Transport | None = None) -> Transport:
    """
    Choose and configure the transport for a send.

    Args:
        options: Effective options for this send.
        transport: Explicit transport; bypasses the driver option entirely.

    Returns:
        The configured transport.

    Raises:
        NoTransportConfigured: If there's no driver and no transport.
        UnknownDriverError: If the driver option isn't recognized.
    """
    if transport is not None:
        logger.debug(f"Using explicit transport {transport!r}")
        return transport

    if not options.driver:
        raise NoTransportConfigured()

    driver = Driver.parse(options.driver)

    if driver is Driver.SENDMAIL:
        selected = SendmailTransport.resolve(options.path)
    elif driver is Driver.SMTP:
        selected = _smtp_transport(options)
    elif driver is Driver.QMAIL:
        selected = QmailTransport.resolve(options.path)
    else:
        selected = NntpTransport(host=options.host)

    logger.debug(f"Selected transport {selected.describe()}")
    return selected


def _smtp_transport(options: EmailOptions) -> SmtpTransport:
    password = options.password
    if options.host and options.user and not password:
        password = lookup_password(options.host, options.user)

    if options.host and options.user and password:
        return SmtpTransport(
            host=options.host,
            port=options.port,
            username=options.user,
            password=password,
            ssl=options.ssl,
            tls=options.tls,
            debug=options.debug,
        )

    # Anonymous relay
    return SmtpTransport(host=options.host)
