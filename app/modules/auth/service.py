import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class AuthService:
    """Static shared-secret check used by both HTTP routes and socket handshakes."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def authenticate(self, presented_key: Optional[str]) -> bool:
        """True only when a secret is configured and the presented key matches it"""
        if not self.api_key:
            logger.debug("API_KEY is not configured; rejecting client")
            return False
        if not presented_key:
            return False
        return hmac.compare_digest(presented_key.encode(), self.api_key.encode())
