"""Unit tests for the default token delivery."""

from datetime import timedelta
from uuid import uuid4

import pytest

from agora_auth import LoggingTokenDelivery, TokenPurpose, UserData, UserRole
from agora_auth.shared.time import utc_now


class TestLoggingTokenDelivery:
    @pytest.mark.asyncio
    async def test_logs_issue_without_the_token(self, caplog):
        now = utc_now()
        user = UserData(
            id=uuid4(),
            email="buyer@example.com",
            password_hash=None,
            role=UserRole.BUYER,
            name=None,
            email_verified=False,
            created_at=now,
            updated_at=now,
        )

        with caplog.at_level("WARNING", logger="agora_auth.services.token_delivery"):
            await LoggingTokenDelivery().deliver(
                user,
                TokenPurpose.PASSWORD_RESET,
                "raw-secret-token",
                now + timedelta(hours=1),
            )

        assert "password_reset" in caplog.text
        assert str(user.id) in caplog.text
        assert "raw-secret-token" not in caplog.text
