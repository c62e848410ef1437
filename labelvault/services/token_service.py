"""Signed bearer tokens for user sessions."""

import hmac
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import jwk, jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

from labelvault.core.exceptions import InvalidSignature, MalformedToken
from labelvault.core.settings import get_settings
from labelvault.models.user import User

logger = logging.getLogger(__name__)

SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class TokenService:
    """
    Issues and verifies compact HS256 tokens.

    A token is ``header.payload.signature`` with every part base64url
    encoded and the signature an HMAC-SHA256 over ``header.payload``.
    Tokens carry no expiry; verification only proves they were issued
    with the current secret.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self._signing_key = jwk.construct(secret_key, algorithm)

    def issue(self, claims: Dict[str, Any]) -> str:
        """Sign a claim set."""
        return jwt.encode(dict(claims), self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Return the claims of a token signed with our secret.

        Raises:
            MalformedToken: token is not three base64url JSON segments
            InvalidSignature: signature does not match the content
        """
        if not token or not isinstance(token, str):
            raise MalformedToken("Token is empty")

        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise MalformedToken("Token must have exactly three segments")

        header_segment, payload_segment, signature_segment = parts
        header = self._decode_segment(header_segment, "header")
        claims = self._decode_segment(payload_segment, "payload")

        if header.get("alg") != self.algorithm:
            raise InvalidSignature(f"Unsupported signing algorithm: {header.get('alg')}")

        signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
        try:
            expected = base64url_encode(self._signing_key.sign(signing_input)).decode("ascii")
        except JOSEError as e:
            logger.error(f"Failed to compute token signature: {e}")
            raise InvalidSignature("Token signature could not be verified")

        if not hmac.compare_digest(expected, signature_segment):
            raise InvalidSignature("Token signature is invalid")

        return claims

    def issue_for_user(self, user: User) -> str:
        """Build the session claims for a user and sign them."""
        claims = {
            "sub": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "labelId": user.label_id,
            "artistId": user.artist_id,
            "permissions": user.granted_permissions(),
            "iat": int(datetime.now(timezone.utc).timestamp()),
        }
        token = self.issue(claims)
        logger.info(f"Issued session token for user {user.id}")
        return token

    @staticmethod
    def _decode_segment(segment: str, name: str) -> Dict[str, Any]:
        if not SEGMENT_PATTERN.match(segment):
            raise MalformedToken(f"Token {name} is not base64url encoded")
        try:
            decoded = json.loads(base64url_decode(segment.encode("ascii")))
        except (ValueError, TypeError) as e:
            raise MalformedToken(f"Token {name} is not valid JSON: {e}")
        if not isinstance(decoded, dict):
            raise MalformedToken(f"Token {name} must be a JSON object")
        return decoded


_token_service: Optional[TokenService] = None


def get_token_service() -> TokenService:
    """Get the process-wide token service built from settings."""
    global _token_service
    if _token_service is None:
        settings = get_settings()
        _token_service = TokenService(settings.jwt_secret_key, settings.jwt_algorithm)
    return _token_service
