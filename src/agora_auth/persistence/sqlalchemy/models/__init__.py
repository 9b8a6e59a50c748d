from agora_auth.persistence.sqlalchemy.models.one_time_token_model import (
    OneTimeTokenModel,
)
from agora_auth.persistence.sqlalchemy.models.refresh_session_model import (
    RefreshSessionModel,
)
from agora_auth.persistence.sqlalchemy.models.user_model import UserModel

__all__ = ["OneTimeTokenModel", "RefreshSessionModel", "UserModel"]
