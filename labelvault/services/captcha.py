"""Human verification for the login form."""

import logging
from typing import Optional

import httpx

from labelvault.core.settings import get_settings

logger = logging.getLogger(__name__)


class CaptchaVerifier:
    backend = "base"

    def __init__(self, bypass_token: Optional[str] = None):
        self.bypass_token = bypass_token

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        raise NotImplementedError


class TurnstileVerifier(CaptchaVerifier):
    """Cloudflare Turnstile siteverify client."""

    backend = "turnstile"

    def __init__(
        self,
        secret_key: str,
        verify_url: str,
        bypass_token: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(bypass_token)
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.timeout = timeout
        self.transport = transport

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        if not token:
            return False

        data = {"secret": self.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.verify_url, data=data)
            success = bool(response.json().get("success"))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Turnstile verification request failed: {e}")
            success = False

        if not success and self.bypass_token and token == self.bypass_token:
            logger.warning("Accepted captcha bypass token")
            return True
        return success


class StaticCaptchaVerifier(CaptchaVerifier):
    """Accepts only the configured bypass token; used without a Turnstile secret."""

    backend = "static"

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> bool:
        return bool(token) and token == self.bypass_token


_captcha_verifier: Optional[CaptchaVerifier] = None


def get_captcha_verifier() -> CaptchaVerifier:
    """Get the configured captcha verifier."""
    global _captcha_verifier
    if _captcha_verifier is None:
        settings = get_settings()
        if settings.captcha_backend == "turnstile" and settings.turnstile_secret_key:
            _captcha_verifier = TurnstileVerifier(
                secret_key=settings.turnstile_secret_key,
                verify_url=settings.turnstile_verify_url,
                bypass_token=settings.captcha_bypass_token,
            )
        else:
            if settings.captcha_backend == "turnstile":
                logger.warning("Turnstile selected without a secret key, using static verifier")
            _captcha_verifier = StaticCaptchaVerifier(settings.captcha_bypass_token)
    return _captcha_verifier
