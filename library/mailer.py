"""Outgoing mail for libraryapi."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import List, Protocol

from .config import MailConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class EmailService(Protocol):
    def send_mails(self, message: str, recipients: List[str]) -> None:
        ...


class SmtpEmailService:
    """Send one plain-text message to many recipients over SMTP."""

    def __init__(self, config: MailConfig):
        self.config = config

    def build_message(self, message: str, recipients: List[str]) -> EmailMessage:
        mail = EmailMessage()
        mail["From"] = self.config.sender
        mail["To"] = ", ".join(recipients)
        mail["Subject"] = self.config.subject
        mail.set_content(message)
        return mail

    def send_mails(self, message: str, recipients: List[str]) -> None:
        mail = self.build_message(message, recipients)
        with smtplib.SMTP(self.config.host, self.config.port) as smtp:
            if self.config.use_tls:
                smtp.starttls()
            if self.config.login_enabled:
                smtp.login(self.config.username, self.config.password)
            smtp.send_message(mail)
        logger.info(f"Mail sent to {len(recipients)} recipient(s) via {self.config.host}")
