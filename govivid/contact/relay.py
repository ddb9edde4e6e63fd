"""
Contact form mail relay.

Wraps a single outbound SMTP transport. The transport is verified at startup;
if that fails the relay stays "not ready" and retries once whenever a contact
message needs to go out.
"""
import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable, Optional, Protocol

from govivid.shared.config import ConfigError, SmtpSettings

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def verify(self) -> None: ...

    def send(self, message: EmailMessage) -> None: ...


class SmtpTransport:
    """smtplib-backed transport. A new connection is opened per operation."""

    def __init__(self, settings: SmtpSettings):
        missing = [
            key for key, value in (
                ("SMTP_HOST", settings.host),
                ("SMTP_PORT", settings.port),
                ("SMTP_SECURE", settings.secure),
                ("SMTP_USER", settings.user),
                ("SMTP_PASS", settings.password),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required env: {', '.join(missing)}")

        self.host = settings.host
        self.port = int(settings.port)
        # 465 uses implicit TLS, 587 upgrades with STARTTLS
        self.secure = settings.secure == "true"
        self.user = settings.user
        self.password = settings.password
        self.timeout = settings.timeout

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.secure:
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            client.ehlo()
            if not self.secure and client.has_extn("starttls"):
                client.starttls(context=context)
                client.ehlo()
            client.login(self.user, self.password)
        except Exception:
            client.close()
            raise
        return client

    def verify(self) -> None:
        """Connect and authenticate, raising on any failure."""
        client = self._connect()
        client.quit()

    def send(self, message: EmailMessage) -> None:
        client = self._connect()
        try:
            client.send_message(message)
        finally:
            client.quit()


TransportFactory = Callable[[SmtpSettings], Transport]


def format_text_body(name: str, email: str, message: str) -> str:
    return f"Name: {name}\nEmail: {email}\n\n{message}"


def format_html_body(name: str, email: str, subject: str, message: str) -> str:
    paragraphs = html.escape(message).replace("\n", "<br>")
    return (
        "<h2>New contact form submission</h2>"
        f"<p><strong>Name:</strong> {html.escape(name)}</p>"
        f"<p><strong>Email:</strong> {html.escape(email)}</p>"
        f"<p><strong>Subject:</strong> {html.escape(subject)}</p>"
        f"<p>{paragraphs}</p>"
    )


class MailRelay:
    """Holds the current transport and rebuilds it when it is missing."""

    def __init__(self, settings: SmtpSettings, transport_factory: Optional[TransportFactory] = None):
        self.settings = settings
        self.transport_factory = transport_factory or SmtpTransport
        self.transport: Optional[Transport] = None

    @property
    def ready(self) -> bool:
        return self.transport is not None

    def initialize(self) -> bool:
        """Create and verify a transport. Failures are logged, never raised."""
        try:
            transport = self.transport_factory(self.settings)
            transport.verify()
        except Exception as e:
            logger.error(f"SMTP setup/verify failed: {type(e).__name__}: {e}")
            self.transport = None
            return False

        self.transport = transport
        logger.info("SMTP: ready")
        return True

    def ensure_ready(self) -> bool:
        """Try one re-initialisation if the transport isn't available."""
        if self.ready:
            return True
        logger.info("SMTP transport not ready, retrying initialisation")
        return self.initialize()

    def build_message(self, name: str, email: str, subject: str, message: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.sender
        msg["To"] = self.settings.to
        msg["Reply-To"] = email
        msg["Subject"] = subject or f"New message from {name}"
        domain = (self.settings.sender or "").rpartition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(format_text_body(name, email, message))
        msg.add_alternative(format_html_body(name, email, subject, message), subtype="html")
        return msg

    def send_contact(self, name: str, email: str, subject: str, message: str) -> str:
        """Send a contact message and return its Message-ID."""
        transport = self.transport
        if transport is None:
            raise RuntimeError("Mail transport not initialised")

        msg = self.build_message(name, email, subject, message)
        transport.send(msg)
        message_id = str(msg["Message-ID"])
        logger.info(f"Email sent: {message_id}")
        return message_id
