from agora_auth.persistence.sqlalchemy.repositories.one_time_token_repository import (
    OneTimeTokenRepositorySQLAlchemy,
)
from agora_auth.persistence.sqlalchemy.repositories.refresh_session_repository import (
    RefreshSessionRepositorySQLAlchemy,
)
from agora_auth.persistence.sqlalchemy.repositories.user_repository import (
    UserRepositorySQLAlchemy,
)

__all__ = [
    "OneTimeTokenRepositorySQLAlchemy",
    "RefreshSessionRepositorySQLAlchemy",
    "UserRepositorySQLAlchemy",
]
