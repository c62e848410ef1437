"""Outbound transactional email."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from labelvault.core.exceptions import DependencyFailure
from labelvault.core.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str
    text: str


class Mailer:
    backend = "base"

    async def send_email(self, to: str, subject: str, html: str, text: str) -> None:
        raise NotImplementedError


class ZeptoMailer(Mailer):
    """Sends mail through the ZeptoMail HTTP API."""

    backend = "zeptomail"

    def __init__(
        self,
        api_key: str,
        url: str,
        from_address: str,
        from_name: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.from_address = from_address
        self.from_name = from_name
        self.timeout = timeout
        self.transport = transport

    async def send_email(self, to: str, subject: str, html: str, text: str) -> None:
        payload = {
            "from": {"address": self.from_address, "name": self.from_name},
            "to": [{"email_address": {"address": to}}],
            "subject": subject,
            "htmlbody": html,
            "textbody": text,
        }
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"ZeptoMail request to {to} failed: {e}")
            raise DependencyFailure(f"Email delivery failed: {e}")

        if response.status_code >= 400:
            logger.error(f"ZeptoMail rejected mail to {to}: {response.status_code} {response.text}")
            raise DependencyFailure(f"ZeptoMail failed: {response.text}")

        logger.info(f"Sent email '{subject}' to {to}")


class LogMailer(Mailer):
    """Records mail instead of sending it."""

    backend = "log"

    def __init__(self):
        self.outbox: List[SentEmail] = []

    async def send_email(self, to: str, subject: str, html: str, text: str) -> None:
        self.outbox.append(SentEmail(to=to, subject=subject, html=html, text=text))
        logger.info(f"MOCK EMAIL: '{subject}' to {to}")


_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    """Get the configured mailer instance."""
    global _mailer
    if _mailer is None:
        settings = get_settings()
        if settings.email_backend == "zeptomail":
            if not settings.zeptomail_api_key:
                raise DependencyFailure("ZeptoMail selected but no API key configured")
            _mailer = ZeptoMailer(
                api_key=settings.zeptomail_api_key,
                url=settings.zeptomail_url,
                from_address=settings.email_from_address,
                from_name=settings.email_from_name,
            )
        else:
            _mailer = LogMailer()
    return _mailer
