# netchat/session/encryption.py
from dataclasses import dataclass
from typing import Optional

from netchat.common.config import MIN_PASSWORD_LENGTH
from netchat.common.errors import ValidationError


@dataclass
class EncryptionToggle:
    """Password-gated on/off switch; one for the room, one for PMs."""

    enabled: bool = False
    password: Optional[str] = None

    def enable(self, password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password too short - minimum {MIN_PASSWORD_LENGTH} characters"
            )
        self.password = password
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False
        self.password = None

    reset = disable
