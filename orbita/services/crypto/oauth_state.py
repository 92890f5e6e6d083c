"""
Signed OAuth state tokens

The state parameter of an OAuth authorization-code flow carries the id of
the project that started the flow. Tokens are self-contained:

    <subject>:<timestampMillis>:<hmacSha256Hex>

Nothing is stored server-side, so verification is a pure function of the
token, the signing secret and the current time.
"""

import hashlib
import hmac
import logging
import time
from typing import Callable, Optional

from .errors import ConfigurationError, ExpiredOrInvalidStateError

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class OAuthStateSigner:
    """
    Issues and verifies HMAC-signed, time-boxed OAuth state tokens
    """

    DEFAULT_TTL_SECONDS = 600  # 10 minutes
    SEPARATOR = ":"

    def __init__(
        self,
        secret: Optional[str],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize OAuthStateSigner

        Args:
            secret: HMAC signing secret
            ttl_seconds: Validity window of issued tokens
            clock: Callable returning the current time in epoch milliseconds

        Raises:
            ConfigurationError: If the secret is empty
            ValueError: If the TTL is not positive
        """
        if not secret:
            raise ConfigurationError("OAuth state signing secret is not configured")
        if ttl_seconds <= 0:
            raise ValueError("State TTL must be positive")

        self._secret = secret.encode("utf-8")
        self._ttl_millis = ttl_seconds * 1000
        self._clock = clock or _now_millis

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_millis // 1000

    def issue(self, subject: str) -> str:
        """
        Issue a state token for a subject.

        Args:
            subject: Identifier to carry through the redirect (a project id)

        Returns:
            Token in subject:timestamp:signature form

        Raises:
            ValueError: If the subject is empty or contains the separator
        """
        if not subject:
            raise ValueError("State subject must not be empty")
        if self.SEPARATOR in subject:
            raise ValueError("State subject must not contain ':'")

        payload = f"{subject}{self.SEPARATOR}{self._clock()}"
        return f"{payload}{self.SEPARATOR}{self._sign(payload)}"

    def verify(self, token: Optional[str]) -> Optional[str]:
        """
        Verify a state token echoed back by the authorization server.

        Args:
            token: Untrusted token string

        Returns:
            The subject if the token is authentic and fresh, None otherwise
        """
        if not token:
            return self._reject("missing")

        parts = token.split(self.SEPARATOR)
        if len(parts) != 3:
            return self._reject("malformed")

        subject, timestamp, signature = parts
        if not subject or not timestamp or not signature:
            return self._reject("malformed")

        expected = self._sign(f"{subject}{self.SEPARATOR}{timestamp}")
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            return self._reject("bad_signature")

        if not (timestamp.isascii() and timestamp.isdigit()):
            return self._reject("malformed")

        if self._clock() - int(timestamp) > self._ttl_millis:
            return self._reject("expired")

        return subject

    def require(self, token: Optional[str]) -> str:
        """
        Verify a state token, raising instead of returning None.

        Raises:
            ExpiredOrInvalidStateError: If verification fails
        """
        subject = self.verify(token)
        if subject is None:
            raise ExpiredOrInvalidStateError("Invalid or expired state")
        return subject

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    @staticmethod
    def _reject(reason: str) -> None:
        logger.debug(f"OAuth state rejected: {reason}")
        return None
