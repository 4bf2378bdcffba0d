import asyncio
import logging
import re
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from predictsafe.core.config import settings
from predictsafe.services.email_templates import RenderedEmail

TAG_RE = re.compile(r"<[^>]*>")


def html_to_text(html: str) -> str:
    """Plain-text part: the HTML with tags stripped."""
    text = TAG_RE.sub("", html)
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


class EmailService:
    """SMTP sender. Without credentials a send is logged and skipped."""

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_name = settings.EMAIL_FROM_NAME
        self.logger = logging.getLogger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def build_message(self, to_email: str, email: RenderedEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.user))
        msg["To"] = to_email
        msg["Subject"] = email.subject
        msg.set_content(html_to_text(email.html))
        msg.add_alternative(email.html, subtype="html")
        return msg

    def _send_raw_email(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(msg)

    async def send(self, to_email: str, email: RenderedEmail) -> bool:
        """Send one templated email. Returns False when nothing was sent."""
        if not self.configured:
            self.logger.warning(f"SMTP credentials not configured, skipping email to {to_email}: {email.subject}")
            return False
        msg = self.build_message(to_email, email)
        # smtplib blocks, keep it off the event loop
        await asyncio.to_thread(self._send_raw_email, msg)
        self.logger.info(f"Email sent to {to_email}: {email.subject}")
        return True


email_service = EmailService()
