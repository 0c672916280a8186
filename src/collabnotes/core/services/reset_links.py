"""Password reset link construction and delivery."""

from urllib.parse import urlencode
from uuid import UUID

from ...config import get_settings
from ..logging import get_logger
from .interfaces import ResetLinkSender

logger = get_logger(__name__)


def build_reset_link(user_id: UUID, token: str) -> str:
    settings = get_settings()
    query = urlencode({"userId": str(user_id), "token": token})
    return f"{settings.client_url.rstrip('/')}/auth/reset-password?{query}"


class LoggingResetLinkSender(ResetLinkSender):
    """
    Default sender: records that a link was issued.

    The link itself is only written to the log in debug mode so local
    development can complete the flow without a mail server.
    """

    async def send(self, email: str, link: str) -> None:
        extra = {"recipient": email}
        if get_settings().debug:
            extra["reset_link"] = link
        logger.info("Password reset link issued", extra=extra)


def get_reset_link_sender() -> ResetLinkSender:
    """FastAPI dependency; override to plug in real delivery."""
    return LoggingResetLinkSender()
