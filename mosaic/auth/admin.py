"""Shared-secret authorization for privileged operations."""

import logging

from mosaic.auth.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AdminAuthorizer:
    """Checks a caller-supplied credential against the admin secret hash.

    With no secret configured every credential is refused, so deletion is
    disabled rather than open.
    """

    def __init__(self, secret_hash: str = ""):
        self.secret_hash = secret_hash

    @classmethod
    def from_settings(cls, settings) -> "AdminAuthorizer":
        if settings.admin_secret_hash:
            return cls(settings.admin_secret_hash)
        if settings.admin_secret:
            return cls(hash_password(settings.admin_secret))
        logger.warning("No admin secret configured; deletion is disabled")
        return cls()

    @property
    def enabled(self) -> bool:
        return bool(self.secret_hash)

    def __call__(self, credential: str | None) -> bool:
        if not self.enabled or not credential:
            return False
        return verify_password(credential, self.secret_hash)
