# =============================================================================
# Local Process Transports
# =============================================================================
# Deliver by piping the rendered message into a local mail program:
#   - sendmail:     <path> -i -f <sender> -- <recipients...>
#   - qmail-inject: <path> -f<sender> <recipients...>
#
# Recipients are passed on the command line rather than read from headers,
# so Bcc recipients get the message without appearing in it.
# =============================================================================

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from emailesque.exceptions import TransportFailure
from emailesque.transport.base import DeliveryResult, Transport

if TYPE_CHECKING:
    from emailesque.core import ComposedMessage

logger = logging.getLogger(__name__)

# Well-known executable locations, searched in order
SENDMAIL_PATHS = ("/usr/bin/sendmail", "/usr/sbin/sendmail", "/usr/lib/sendmail")
QMAIL_PATHS = ("/var/qmail/bin/qmail-inject", "/usr/sbin/qmail-inject")


def find_executable(candidates: tuple[str, ...]) -> str:
    """
    Return the first candidate path that exists as a file.

    Returns:
        The path, or "" if none of them exist.
    """
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return ""


@dataclass
class LocalProcessTransport(Transport):
    """
    Base for transports that run a local program.

    Attributes:
        path: Executable to run. Empty means none was found.
    """
    path: str = ""

    # Timeout for the mail program (seconds)
    TIMEOUT = 30

    def parameters(self) -> list[tuple[str, Any]]:
        return [("path", self.path)]

    def command(self, message: "ComposedMessage") -> list[str]:
        """Build the argument list for the mail program."""
        raise NotImplementedError

    def deliver(self, message: "ComposedMessage") -> DeliveryResult:
        if not self.path:
            raise TransportFailure(self.kind, f"no {self.kind} executable found")

        mime = message.to_mime()
        recipients = message.recipients
        command = self.command(message)

        logger.info(f"Piping message to {self.path} for {', '.join(recipients)}")
        try:
            completed = subprocess.run(
                command,
                input=mime.as_bytes(),
                capture_output=True,
                timeout=self.TIMEOUT,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportFailure(
                self.kind, f"{self.path} timed out after {self.TIMEOUT}s"
            ) from e
        except OSError as e:
            raise TransportFailure(self.kind, f"cannot run {self.path}: {e}") from e

        output = (completed.stderr or completed.stdout or b"").decode(
            "utf-8", errors="replace"
        ).strip()
        if completed.returncode != 0:
            raise TransportFailure(
                self.kind,
                f"{self.path} exited with status {completed.returncode}: {output}",
            )

        logger.info(f"Message handed to {self.kind}: {mime['Message-ID']}")
        return DeliveryResult(
            transport=self.kind,
            message_id=mime["Message-ID"],
            recipients=recipients,
            response=output,
        )


@dataclass
class SendmailTransport(LocalProcessTransport):
    """Deliver through a sendmail-compatible binary."""

    kind = "sendmail"

    @classmethod
    def resolve(cls, path: str | None = None) -> "SendmailTransport":
        """Use the given path, or the first well-known sendmail that exists."""
        return cls(path=path or find_executable(SENDMAIL_PATHS))

    def command(self, message: "ComposedMessage") -> list[str]:
        # -i: a lone "." line doesn't end the message
        command = [self.path, "-i"]
        if message.envelope_sender:
            command += ["-f", message.envelope_sender]
        return command + ["--", *message.recipients]


@dataclass
class QmailTransport(LocalProcessTransport):
    """Deliver through qmail-inject."""

    kind = "qmail"

    @classmethod
    def resolve(cls, path: str | None = None) -> "QmailTransport":
        """Use the given path, or the first well-known qmail-inject that exists."""
        return cls(path=path or find_executable(QMAIL_PATHS))

    def command(self, message: "ComposedMessage") -> list[str]:
        command = [self.path]
        if message.envelope_sender:
            command.append(f"-f{message.envelope_sender}")
        return command + message.recipients
