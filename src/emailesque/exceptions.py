# =============================================================================
# Exceptions
# =============================================================================
# Every error Emailesque raises derives from EmailesqueError, so callers can
# catch the whole family with one except clause.
#
# Validation errors (MissingRequiredField, InvalidMultipartBody) are raised
# before anything is composed or sent. Delivery errors (TransportFailure)
# wrap the underlying library exception with `raise ... from e` and are
# never retried.
# =============================================================================


class EmailesqueError(Exception):
    """Base exception for all Emailesque errors."""
    pass


# =============================================================================
# Validation
# =============================================================================

class MissingRequiredField(EmailesqueError):
    """
    Raised when a mandatory option is absent or empty.

    Attributes:
        fields: Names of the missing options, in the order they were checked.
    """

    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            "cannot send mail without a sender, recipient, subject and message "
            f"(missing: {', '.join(self.fields)})"
        )


class InvalidMultipartBody(EmailesqueError):
    """Raised when type is 'multi' but the message isn't a text/html mapping."""

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message
            or "type 'multi' requires a message mapping with 'text' and 'html' keys"
        )


class AddressParseFailure(EmailesqueError):
    """
    Raised when an address field can't be parsed.

    Attributes:
        field: The option name ("to", "from", "cc" or "bcc").
        value: The raw value that failed to parse.
    """

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Could not parse {field!r} address list: {value!r}")


class InvalidOptionError(EmailesqueError):
    """
    Raised when an option has a value of the wrong shape.

    Attributes:
        option: The option name (e.g., "port").
        value: The value that was rejected.
    """

    def __init__(self, option: str, value: object) -> None:
        self.option = option
        self.value = value
        super().__init__(f"Invalid value for {option!r}: {value!r}")


class AttachmentError(EmailesqueError):
    """Raised when an attachment file can't be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot attach {path!r}: {reason}")


# =============================================================================
# Transport
# =============================================================================

class UnknownDriverError(EmailesqueError):
    """Raised when the driver option names a transport we don't know."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(
            f"Unknown driver {driver!r} (expected sendmail, smtp, qmail or nntp)"
        )


class NoTransportConfigured(EmailesqueError):
    """Raised when there is neither a driver nor an explicit transport."""

    def __init__(self) -> None:
        super().__init__("No driver configured and no transport supplied")


class TransportFailure(EmailesqueError):
    """
    Raised when the transport fails to deliver a message.

    Attributes:
        driver: Kind of transport that failed ("smtp", "sendmail", ...).
    """

    def __init__(self, driver: str, message: str) -> None:
        self.driver = driver
        super().__init__(f"{driver} delivery failed: {message}")


# =============================================================================
# Configuration
# =============================================================================

class ConfigError(EmailesqueError):
    """Raised when there's an error loading or parsing configuration."""
    pass
