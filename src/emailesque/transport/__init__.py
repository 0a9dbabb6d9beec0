# =============================================================================
# Transport Module
# =============================================================================
# Delivers composed messages.
#
# Transports:
#   - SendmailTransport: pipe into a local sendmail binary
#   - QmailTransport:    pipe into qmail-inject
#   - SmtpTransport:     SMTP via aiosmtplib (SSL/STARTTLS, optional auth)
#   - NntpTransport:     post to a news server
#
# select_transport() maps the driver option onto one of these.
# =============================================================================

from emailesque.transport.base import DeliveryResult, Transport
from emailesque.transport.local import (
    QMAIL_PATHS,
    SENDMAIL_PATHS,
    LocalProcessTransport,
    QmailTransport,
    SendmailTransport,
    find_executable,
)
from emailesque.transport.nntp import NntpTransport
from emailesque.transport.selector import select_transport
from emailesque.transport.smtp import SmtpTransport, lookup_password

__all__ = [
    "DeliveryResult",
    "LocalProcessTransport",
    "NntpTransport",
    "QMAIL_PATHS",
    "QmailTransport",
    "SENDMAIL_PATHS",
    "SendmailTransport",
    "SmtpTransport",
    "Transport",
    "find_executable",
    "lookup_password",
    "select_transport",
]
