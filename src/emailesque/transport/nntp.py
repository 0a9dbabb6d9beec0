# =============================================================================
# NNTP Transport
# =============================================================================
# Posts a message to a news server with nntplib (RFC 3977 POST command).
#
# nntplib was removed from the standard library in Python 3.13; on those
# interpreters the standard-nntplib distribution provides the same module.
#
# The caller provides the Newsgroups header through the headers option;
# the server rejects articles without one.
# =============================================================================

import logging
import nntplib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from emailesque.exceptions import TransportFailure
from emailesque.transport.base import DeliveryResult, Transport

if TYPE_CHECKING:
    from emailesque.core import ComposedMessage

logger = logging.getLogger(__name__)

NNTP_PORT = nntplib.NNTP_PORT


@dataclass
class NntpTransport(Transport):
    """
    NNTP posting configuration.

    Attributes:
        host: News server hostname.
        port: News server port.
    """
    host: str | None = None
    port: int = NNTP_PORT

    kind = "nntp"

    # Timeout for socket operations (seconds)
    TIMEOUT = 30

    def parameters(self) -> list[tuple[str, Any]]:
        return [("host", self.host)]

    def deliver(self, message: "ComposedMessage") -> DeliveryResult:
        if not self.host:
            raise TransportFailure(self.kind, "no news server host configured")

        mime = message.to_mime()

        logger.info(f"Posting article to NNTP {self.host}:{self.port}")
        try:
            with nntplib.NNTP(self.host, self.port, timeout=self.TIMEOUT) as server:
                logger.debug(f"NNTP <<< {server.getwelcome()}")
                response = server.post(mime.as_bytes())
        except nntplib.NNTPError as e:
            raise TransportFailure(self.kind, f"server rejected article: {e}") from e
        except (OSError, EOFError) as e:
            raise TransportFailure(self.kind, f"{self.host}:{self.port}: {e}") from e

        logger.info(f"Article posted: {mime['Message-ID']}")
        return DeliveryResult(
            transport=self.kind,
            message_id=mime["Message-ID"],
            recipients=[],
            response=response,
        )
