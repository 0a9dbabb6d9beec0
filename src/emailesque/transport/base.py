# =============================================================================
# Transport Base
# =============================================================================
# Every transport is a small dataclass holding its configuration (passed by
# value, never through module-level state) plus a deliver() method.
#
# parameters() exposes the configuration as an ordered list of (key, value)
# pairs, which is what gets logged and what tests compare against.
# =============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from emailesque.core import ComposedMessage


@dataclass
class DeliveryResult:
    """
    Outcome of a successful delivery.

    Failed deliveries raise TransportFailure instead of returning a result.

    Attributes:
        transport: Kind of transport that delivered the message.
        message_id: Message-ID header of the delivered message.
        recipients: Envelope recipients.
        response: Whatever the transport reported back (server reply,
                  process output). May be empty.
    """
    transport: str
    message_id: str
    recipients: list[str] = field(default_factory=list)
    response: str = ""

    @property
    def success(self) -> bool:
        """Always True; kept so results can be checked like a flag."""
        return True


class Transport(ABC):
    """
    Base class for transports.

    Subclasses set `kind` and implement parameters() and deliver(). Any
    object with a deliver(message) method can also be passed as an
    explicit transport override.
    """

    kind: str = ""

    @abstractmethod
    def parameters(self) -> list[tuple[str, Any]]:
        """Return the transport configuration as ordered (key, value) pairs."""

    @abstractmethod
    def deliver(self, message: "ComposedMessage") -> DeliveryResult:
        """
        Deliver a composed message.

        Raises:
            TransportFailure: If delivery fails.
        """

    def describe(self) -> str:
        """One-line description with secrets masked, for logging."""
        params = ", ".join(
            f"{key}={'***' if key == 'password' else value}"
            for key, value in self.parameters()
        )
        return f"{self.kind}({params})"
