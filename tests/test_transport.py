import nntplib
import subprocess

import aiosmtplib
import pytest

from emailesque.core.message import ComposedMessage
from emailesque.core.options import EmailOptions
from emailesque.exceptions import (
    NoTransportConfigured,
    TransportFailure,
    UnknownDriverError,
)
from emailesque.transport import (
    NntpTransport,
    QmailTransport,
    SendmailTransport,
    SmtpTransport,
    find_executable,
    select_transport,
)


def make_options(sample_options, **extra):
    return EmailOptions.from_mapping({**sample_options, **extra})


@pytest.fixture
def composed():
    return ComposedMessage(
        to="a@x.com,b@y.com",
        sender="Me <me@example.com>",
        bcc="hidden@z.com",
        subject="Hello",
        text_body="Body\n.leading dot\n",
    )


# =============================================================================
# Selection
# =============================================================================

def test_sendmail_searches_well_known_paths(sample_options, monkeypatch):
    monkeypatch.setattr(
        "emailesque.transport.local.os.path.isfile",
        lambda path: path == "/usr/sbin/sendmail",
    )

    transport = select_transport(make_options(sample_options, driver="sendmail"))

    assert isinstance(transport, SendmailTransport)
    assert transport.path == "/usr/sbin/sendmail"


def test_sendmail_explicit_path_wins(sample_options, monkeypatch):
    monkeypatch.setattr("emailesque.transport.local.os.path.isfile", lambda path: True)

    transport = select_transport(make_options(sample_options, driver="Sendmail", path="/opt/bin/sendmail"))

    assert transport.parameters() == [("path", "/opt/bin/sendmail")]


def test_sendmail_without_executable_has_empty_path(sample_options, monkeypatch):
    monkeypatch.setattr("emailesque.transport.local.os.path.isfile", lambda path: False)

    transport = select_transport(make_options(sample_options, driver="sendmail"))

    assert transport.path == ""


def test_find_executable_order(temp_dir):
    first = temp_dir / "first"
    second = temp_dir / "second"
    second.write_text("")
    assert find_executable((str(first), str(second))) == str(second)
    assert find_executable((str(first),)) == ""


def test_smtp_authenticated(sample_options):
    transport = select_transport(
        make_options(
            sample_options,
            driver="smtp",
            host="smtp.example.com",
            user="u",
            **{"pass": "p"},
            ssl=True,
        )
    )

    assert isinstance(transport, SmtpTransport)
    assert transport.authenticated
    assert transport.parameters() == [
        ("host", "smtp.example.com"),
        ("username", "u"),
        ("password", "p"),
        ("ssl", True),
    ]


def test_smtp_host_only(sample_options):
    transport = select_transport(make_options(sample_options, driver="SMTP", host="smtp.example.com"))

    assert transport.parameters() == [("host", "smtp.example.com")]
    assert not transport.authenticated


def test_smtp_without_password_is_anonymous(sample_options):
    transport = select_transport(
        make_options(sample_options, driver="smtp", host="smtp.example.com", user="u", port=2525)
    )

    assert transport.parameters() == [("host", "smtp.example.com")]


def test_smtp_password_from_keyring(sample_options, monkeypatch):
    calls = []

    def fake_get_password(service, user):
        calls.append((service, user))
        return "from-keyring"

    monkeypatch.setattr("keyring.get_password", fake_get_password)

    transport = select_transport(
        make_options(sample_options, driver="smtp", host="smtp.example.com", user="u", port=587, tls=True)
    )

    assert calls == [("emailesque:smtp.example.com", "u")]
    assert transport.parameters() == [
        ("host", "smtp.example.com"),
        ("port", 587),
        ("username", "u"),
        ("password", "from-keyring"),
        ("tls", True),
    ]


def test_qmail_uses_path(sample_options):
    transport = select_transport(make_options(sample_options, driver="qmail", path="/var/qmail/bin/qmail-inject"))

    assert isinstance(transport, QmailTransport)
    assert transport.path == "/var/qmail/bin/qmail-inject"


def test_qmail_searches_well_known_paths(sample_options, monkeypatch):
    monkeypatch.setattr(
        "emailesque.transport.local.os.path.isfile",
        lambda path: path == "/usr/sbin/qmail-inject",
    )

    transport = select_transport(make_options(sample_options, driver="qmail"))

    assert isinstance(transport, QmailTransport)
    assert transport.path == "/usr/sbin/qmail-inject"


def test_qmail_prefers_var_qmail(sample_options, monkeypatch):
    monkeypatch.setattr("emailesque.transport.local.os.path.isfile", lambda path: True)

    transport = select_transport(make_options(sample_options, driver="qmail"))

    assert transport.path == "/var/qmail/bin/qmail-inject"


def test_qmail_without_executable_has_empty_path(sample_options, monkeypatch):
    monkeypatch.setattr("emailesque.transport.local.os.path.isfile", lambda path: False)

    transport = select_transport(make_options(sample_options, driver="qmail"))

    assert transport.path == ""


def test_nntp_uses_host_only(sample_options):
    transport = select_transport(make_options(sample_options, driver="nntp", host="news.example.com", user="u"))

    assert isinstance(transport, NntpTransport)
    assert transport.parameters() == [("host", "news.example.com")]


def test_explicit_transport_beats_driver(sample_options, recording_transport):
    options = make_options(sample_options, driver="smtp", host="smtp.example.com")
    assert select_transport(options, recording_transport) is recording_transport


def test_explicit_transport_beats_unknown_driver(sample_options, recording_transport):
    options = make_options(sample_options, driver="carrier-pigeon")
    assert select_transport(options, recording_transport) is recording_transport


def test_unknown_driver(sample_options):
    with pytest.raises(UnknownDriverError):
        select_transport(make_options(sample_options, driver="carrier-pigeon"))


def test_no_driver(sample_options):
    with pytest.raises(NoTransportConfigured):
        select_transport(make_options(sample_options))


def test_describe_masks_password():
    transport = SmtpTransport(host="h", username="u", password="secret")
    assert transport.describe() == "smtp(host=h, username=u, password=***)"


# =============================================================================
# Local process delivery
# =============================================================================

class FakeCompleted:
    def __init__(self, returncode=0, stdout=b"", stderr=b""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def test_sendmail_delivery_command(composed, monkeypatch):
    seen = {}

    def fake_run(command, input, **kwargs):
        seen["command"] = command
        seen["input"] = input
        return FakeCompleted()

    monkeypatch.setattr("emailesque.transport.local.subprocess.run", fake_run)

    result = SendmailTransport(path="/usr/sbin/sendmail").deliver(composed)

    assert seen["command"] == [
        "/usr/sbin/sendmail", "-i", "-f", "me@example.com", "--",
        "a@x.com", "b@y.com", "hidden@z.com",
    ]
    assert b"Subject: Hello" in seen["input"]
    assert b"hidden@z.com" not in seen["input"]
    assert result.transport == "sendmail"
    assert result.recipients == ["a@x.com", "b@y.com", "hidden@z.com"]
    assert result.message_id.startswith("<")


def test_qmail_delivery_command(composed, monkeypatch):
    seen = {}

    def fake_run(command, input, **kwargs):
        seen["command"] = command
        return FakeCompleted()

    monkeypatch.setattr("emailesque.transport.local.subprocess.run", fake_run)

    QmailTransport(path="/var/qmail/bin/qmail-inject").deliver(composed)

    assert seen["command"] == [
        "/var/qmail/bin/qmail-inject", "-fme@example.com",
        "a@x.com", "b@y.com", "hidden@z.com",
    ]


def test_sendmail_without_path_fails(composed):
    with pytest.raises(TransportFailure) as excinfo:
        SendmailTransport(path="").deliver(composed)
    assert excinfo.value.driver == "sendmail"


def test_sendmail_nonzero_exit_fails(composed, monkeypatch):
    monkeypatch.setattr(
        "emailesque.transport.local.subprocess.run",
        lambda command, input, **kwargs: FakeCompleted(returncode=75, stderr=b"queue full"),
    )

    with pytest.raises(TransportFailure, match="queue full"):
        SendmailTransport(path="/usr/sbin/sendmail").deliver(composed)


def test_sendmail_missing_binary_fails(composed, monkeypatch):
    def fake_run(command, input, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr("emailesque.transport.local.subprocess.run", fake_run)

    with pytest.raises(TransportFailure) as excinfo:
        SendmailTransport(path="/nowhere/sendmail").deliver(composed)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_sendmail_timeout_fails(composed, monkeypatch):
    def fake_run(command, input, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr("emailesque.transport.local.subprocess.run", fake_run)

    with pytest.raises(TransportFailure, match="timed out"):
        SendmailTransport(path="/usr/sbin/sendmail").deliver(composed)


# =============================================================================
# SMTP delivery
# =============================================================================

def test_smtp_delivery_arguments(composed, monkeypatch):
    seen = {}

    async def fake_send(message, **kwargs):
        seen["message"] = message
        seen.update(kwargs)
        return {}, "250 OK queued"

    monkeypatch.setattr("aiosmtplib.send", fake_send)

    transport = SmtpTransport(host="smtp.example.com", port=465, username="u", password="p", ssl=True)
    result = transport.deliver(composed)

    assert seen["hostname"] == "smtp.example.com"
    assert seen["port"] == 465
    assert seen["username"] == "u"
    assert seen["password"] == "p"
    assert seen["use_tls"] is True
    assert seen["start_tls"] is None
    assert seen["sender"] == "me@example.com"
    assert seen["recipients"] == ["a@x.com", "b@y.com", "hidden@z.com"]
    assert seen["message"]["Bcc"] is None
    assert result.transport == "smtp"
    assert result.response == "250 OK queued"


def test_smtp_anonymous_delivery(composed, monkeypatch):
    seen = {}

    async def fake_send(message, **kwargs):
        seen.update(kwargs)
        return {}, "250 OK"

    monkeypatch.setattr("aiosmtplib.send", fake_send)

    SmtpTransport(host="relay.example.com").deliver(composed)

    assert seen["username"] is None
    assert seen["password"] is None
    assert seen["port"] is None


def test_smtp_starttls(composed, monkeypatch):
    seen = {}

    async def fake_send(message, **kwargs):
        seen.update(kwargs)
        return {}, "250 OK"

    monkeypatch.setattr("aiosmtplib.send", fake_send)

    SmtpTransport(host="smtp.example.com", tls=True).deliver(composed)

    assert seen["start_tls"] is True
    assert seen["use_tls"] is False


def test_smtp_failure_is_wrapped(composed, monkeypatch):
    async def fake_send(message, **kwargs):
        raise aiosmtplib.SMTPConnectError("Connection refused")

    monkeypatch.setattr("aiosmtplib.send", fake_send)

    with pytest.raises(TransportFailure) as excinfo:
        SmtpTransport(host="smtp.example.com").deliver(composed)
    assert excinfo.value.driver == "smtp"
    assert isinstance(excinfo.value.__cause__, aiosmtplib.SMTPConnectError)


def test_smtp_auth_failure_is_wrapped(composed, monkeypatch):
    async def fake_send(message, **kwargs):
        raise aiosmtplib.SMTPAuthenticationError(535, "bad credentials")

    monkeypatch.setattr("aiosmtplib.send", fake_send)

    with pytest.raises(TransportFailure, match="authentication failed for u"):
        SmtpTransport(host="smtp.example.com", username="u", password="p").deliver(composed)


# =============================================================================
# NNTP delivery
# =============================================================================

class FakeNewsServer:
    """Stands in for nntplib.NNTP; records the posted article."""

    def __init__(self, host, port, timeout=None, error=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.error = error
        self.posted = None
        self.closed = False
        FakeNewsServer.last = self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def getwelcome(self):
        return "200 news.example.com ready"

    def post(self, data):
        if self.error is not None:
            raise self.error
        self.posted = data
        return "240 article received"


def test_nntp_post(composed, monkeypatch):
    monkeypatch.setattr("emailesque.transport.nntp.nntplib.NNTP", FakeNewsServer)
    composed.header("Newsgroups", "comp.lang.python")

    result = NntpTransport(host="news.example.com").deliver(composed)

    server = FakeNewsServer.last
    assert (server.host, server.port, server.timeout) == ("news.example.com", 119, 30)
    assert b"Newsgroups: comp.lang.python" in server.posted
    assert b".leading dot" in server.posted
    assert server.closed
    assert result.transport == "nntp"
    assert result.response == "240 article received"
    assert result.recipients == []


def test_nntp_rejected_post(composed, monkeypatch):
    def rejecting_server(host, port, timeout=None):
        return FakeNewsServer(
            host, port, timeout, error=nntplib.NNTPTemporaryError("440 posting not permitted")
        )

    monkeypatch.setattr("emailesque.transport.nntp.nntplib.NNTP", rejecting_server)

    with pytest.raises(TransportFailure, match="440") as excinfo:
        NntpTransport(host="news.example.com").deliver(composed)
    assert isinstance(excinfo.value.__cause__, nntplib.NNTPTemporaryError)


def test_nntp_connection_refused(composed, monkeypatch):
    def refusing_server(host, port, timeout=None):
        raise ConnectionRefusedError(111, "Connection refused")

    monkeypatch.setattr("emailesque.transport.nntp.nntplib.NNTP", refusing_server)

    with pytest.raises(TransportFailure, match="news.example.com:119") as excinfo:
        NntpTransport(host="news.example.com").deliver(composed)
    assert excinfo.value.driver == "nntp"


def test_nntp_without_host(composed):
    with pytest.raises(TransportFailure):
        NntpTransport().deliver(composed)
