# =============================================================================
# Emailesque: Lightweight To-The-Point Email
# =============================================================================
#
# Emailesque turns a flat mapping of options into a sent email:
#
#   from emailesque import email
#
#   email({
#       "to": "someone@example.com",
#       "from": "me@example.com",
#       "subject": "Hello",
#       "message": "Plain-text body",
#   })
#
# Features:
#   - Plain-text, HTML, or text + HTML (multipart/alternative) bodies
#   - Attachments and extra headers
#   - sendmail, qmail, SMTP (SSL/STARTTLS, auth) and NNTP transports
#   - Reusable senders with default settings (Emailesque class)
#   - Optional TOML config file with named profiles
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "emailesque"

from emailesque.core import BodyType, ComposedMessage, Driver
from emailesque.exceptions import (
    AddressParseFailure,
    AttachmentError,
    ConfigError,
    EmailesqueError,
    InvalidMultipartBody,
    InvalidOptionError,
    MissingRequiredField,
    NoTransportConfigured,
    TransportFailure,
    UnknownDriverError,
)
from emailesque.mailer import Emailesque, email
from emailesque.transport import (
    DeliveryResult,
    NntpTransport,
    QmailTransport,
    SendmailTransport,
    SmtpTransport,
    Transport,
)

__all__ = [
    "AddressParseFailure",
    "AttachmentError",
    "BodyType",
    "ComposedMessage",
    "ConfigError",
    "DeliveryResult",
    "Driver",
    "Emailesque",
    "EmailesqueError",
    "InvalidMultipartBody",
    "InvalidOptionError",
    "MissingRequiredField",
    "NntpTransport",
    "NoTransportConfigured",
    "QmailTransport",
    "SendmailTransport",
    "SmtpTransport",
    "Transport",
    "TransportFailure",
    "UnknownDriverError",
    "__version__",
    "__app_name__",
    "email",
]
