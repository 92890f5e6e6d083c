"""
Health check endpoints for liveness and readiness probes.
"""
from datetime import datetime
from typing import Any, Callable, Dict

from .logging import get_logger
from .services.crypto import ConfigurationError

logger = get_logger()


class HealthChecker:
    """
    Health checker for the Orbita secrets service.

    Provides:
    - Liveness checks (is the service running?)
    - Readiness checks (is the key material configured?)
    """

    def __init__(
        self,
        cipher_provider: Callable[[], Any],
        signer_provider: Callable[[], Any],
        service_name: str = "orbita-secrets",
        version: str = "0.1.0",
    ):
        self.service_name = service_name
        self.version = version
        self._cipher_provider = cipher_provider
        self._signer_provider = signer_provider

    def liveness(self) -> Dict[str, Any]:
        """
        Liveness check - basic health check.

        Returns:
            dict: Health status with service info and timestamp
        """
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }

    def readiness(self) -> Dict[str, Any]:
        """
        Readiness check.

        Checks:
        - ENCRYPTION_KEY decodes to a 32-byte AES key
        - OAUTH_STATE_SECRET is set

        Returns:
            dict: Readiness status with detailed check results
        """
        checks = {
            "encryption_key": self._check(self._cipher_provider, "encryption_key"),
            "oauth_state_secret": self._check(self._signer_provider, "oauth_state_secret"),
        }
        ready = all(check["status"] == "ok" for check in checks.values())

        return {
            "status": "ready" if ready else "not_ready",
            "service": self.service_name,
            "version": self.version,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "checks": checks,
        }

    @staticmethod
    def _check(provider: Callable[[], Any], name: str) -> Dict[str, Any]:
        try:
            provider()
        except ConfigurationError as e:
            logger.warning("readiness_check_failed", check=name, error=str(e))
            return {"status": "error", "error": str(e)}
        return {"status": "ok"}
