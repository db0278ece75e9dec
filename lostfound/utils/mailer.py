import os
import logging
import smtplib
import ssl
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class LogNotifier:
    """Stands in for SMTP when no server is configured."""

    def send(self, to: str, subject: str, html: str):
        logger.info("Email (not configured) to=%s subject=%r", to, subject)


class SmtpNotifier:
    def __init__(self, host: str, port: int, user: str = None, password: str = None, sender: str = None):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or f'"Lost & Found Desk" <{user or "noreply@example.com"}>'

    def send(self, to: str, subject: str, html: str):
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        context = ssl.create_default_context()

        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                self._deliver(server, msg)
        else:
            with smtplib.SMTP(self.host, self.port) as server:
                server.starttls(context=context)
                self._deliver(server, msg)

        logger.info("Email sent to %s via %s:%s", to, self.host, self.port)

    def _deliver(self, server: smtplib.SMTP, msg: EmailMessage):
        if self.user and self.password:
            server.login(self.user, self.password)
        server.send_message(msg)


def get_notifier():
    host = os.getenv("SMTP_HOST")
    if not host:
        return LogNotifier()

    return SmtpNotifier(
        host=host,
        port=int(os.getenv("SMTP_PORT") or 587),
        user=os.getenv("SMTP_USER"),
        password=os.getenv("SMTP_PASS"),
        sender=os.getenv("SMTP_FROM"),
    )
