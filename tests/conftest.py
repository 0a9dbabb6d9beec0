# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the Emailesque test suite.
#
# Nothing here touches the network, the system keyring or a real sendmail:
# those are monkeypatched per test.
# =============================================================================

import pytest
import tempfile
from pathlib import Path

from emailesque.transport import DeliveryResult, Transport


class RecordingTransport(Transport):
    """Transport that keeps delivered messages instead of sending them."""

    kind = "recording"

    def __init__(self) -> None:
        self.delivered = []

    def parameters(self):
        return []

    def deliver(self, message):
        self.delivered.append(message)
        return DeliveryResult(
            transport=self.kind,
            message_id=f"<{len(self.delivered)}@test>",
            recipients=message.recipients,
        )


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from the user's config directory and keyring."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setattr("keyring.get_password", lambda service, user: None)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def recording_transport():
    """A transport that records what it's asked to deliver."""
    return RecordingTransport()


@pytest.fixture
def sample_options():
    """The four mandatory options, nothing else."""
    return {
        "to": "recipient@example.com",
        "from": "Test Sender <sender@example.com>",
        "subject": "Test Subject",
        "message": "This is a test email body.",
    }


@pytest.fixture
def sample_files(temp_dir):
    """A couple of files to attach."""
    report = temp_dir / "report.pdf"
    report.write_bytes(b"%PDF-1.4 fake report\x00\xff")
    notes = temp_dir / "notes.txt"
    notes.write_text("line one\nline two\n")
    return {"report": report, "notes": notes}
