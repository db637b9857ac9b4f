# netchat/storage/credentials.py
from typing import Optional

from pydantic import BaseModel, ValidationError

from netchat.storage.local import LocalStorage

TOKEN_KEY = "token"
USER_KEY = "user"


class User(BaseModel):
    id: str
    username: str


class CredentialStore:
    """Bearer token and user record issued at login."""

    def __init__(self, storage: LocalStorage):
        self._storage = storage

    @property
    def token(self) -> Optional[str]:
        token = self._storage.get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    @property
    def user(self) -> Optional[User]:
        raw = self._storage.get(USER_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return User.model_validate(raw)
        except ValidationError:
            return None

    def save(self, token: str, user: User) -> None:
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, user.model_dump())

    def clear(self) -> None:
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)
