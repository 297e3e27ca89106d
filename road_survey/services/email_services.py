import logging
import smtplib
from email.mime.text import MIMEText

from fastapi import Request

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Road Survey"
WELCOME_TEMPLATE = (
    "Hi {fullname},\n\n"
    "Your surveyor account {surveyor_id} has been created. "
    "You can now log in to the Road Survey app and start capturing road damage.\n\n"
    "Road Survey Team"
)


class Mailer:
    def __init__(self, host: str, port: int, user: str | None, password: str | None,
                 from_email: str | None, use_ssl: bool = True) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email or user
        self.use_ssl = use_ssl

    @classmethod
    def from_settings(cls, settings) -> "Mailer | None":
        if not settings.SMTP_HOST:
            logger.warning("SMTP not configured. Outbound email disabled.")
            return None
        return cls(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USER,
            settings.SMTP_PASS,
            settings.FROM_EMAIL,
            use_ssl=settings.SMTP_USE_SSL,
        )

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port)
        server = smtplib.SMTP(self.host, self.port)
        server.starttls()
        return server

    def send(self, to_email: str, subject: str, text: str) -> None:
        msg = MIMEText(text)
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email

        with self._connect() as server:
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)
        logger.info("Sent '%s' to %s", subject, to_email)


def send_welcome_email(mailer: Mailer, to_email: str, fullname: str, surveyor_id: str) -> None:
    body = WELCOME_TEMPLATE.format(fullname=fullname, surveyor_id=surveyor_id)
    mailer.send(to_email, WELCOME_SUBJECT, body)


def get_mailer(request: Request) -> Mailer | None:
    return request.app.state.mailer
