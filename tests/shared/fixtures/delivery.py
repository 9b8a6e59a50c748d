"""Token delivery that keeps what it was asked to send."""

from dataclasses import dataclass, field
from datetime import datetime

from agora_auth import TokenDelivery, TokenPurpose, UserData


@dataclass(frozen=True)
class DeliveredToken:
    user: UserData
    purpose: TokenPurpose
    token: str
    expires_at: datetime


@dataclass
class RecordingTokenDelivery(TokenDelivery):
    sent: list[DeliveredToken] = field(default_factory=list)

    async def deliver(
        self,
        user: UserData,
        purpose: TokenPurpose,
        token: str,
        expires_at: datetime,
    ) -> None:
        self.sent.append(DeliveredToken(user, purpose, token, expires_at))

    def last(self, purpose: TokenPurpose) -> DeliveredToken:
        return [item for item in self.sent if item.purpose == purpose][-1]
