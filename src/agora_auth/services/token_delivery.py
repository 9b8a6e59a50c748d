"""Hand-off of password-reset and verification tokens to the user.

The auth subsystem never sends mail itself. The application injects a
``TokenDelivery`` that knows how to reach the user (mail provider,
message queue, ...).
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from agora_auth.repositories import UserData
from agora_auth.schemas import TokenPurpose

logger = logging.getLogger(__name__)


class TokenDelivery(ABC):
    @abstractmethod
    async def deliver(
        self,
        user: UserData,
        purpose: TokenPurpose,
        token: str,
        expires_at: datetime,
    ) -> None:
        """
        Get a freshly issued single-use token to ``user``.

        Parameters
        ----------
        user
            Recipient
        purpose
            What the token can be redeemed for
        token
            The raw token; it is not stored anywhere else
        expires_at
            When the token stops being accepted
        """


class LoggingTokenDelivery(TokenDelivery):
    """Delivery used when no transport is configured: logs the issue, drops the token."""

    async def deliver(
        self,
        user: UserData,
        purpose: TokenPurpose,
        token: str,
        expires_at: datetime,
    ) -> None:
        logger.warning(
            "No token delivery configured; %s token for user %s (expires %s) not sent",
            purpose.value,
            user.id,
            expires_at.isoformat(),
        )
