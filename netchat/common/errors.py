# netchat/common/errors.py
"""
Error taxonomy for the chat client.

Recoverable errors are absorbed where they happen and shown as a transient
notice. SessionTerminated subclasses end the whole session.
"""


class NetChatError(Exception):
    pass


class RecoverableError(NetChatError):
    pass


class SessionTerminated(NetChatError):
    pass


class AuthError(SessionTerminated):
    """Credential missing, invalid or expired."""


class DuplicatePreemptionError(SessionTerminated):
    """Another login for the same identity took over this session."""


class ValidationError(RecoverableError):
    """Rejected locally before any network call."""


class RevealFailure(RecoverableError):
    """Remote reveal reported a wrong password or corrupted token."""


class NetworkError(RecoverableError):
    pass


class InvalidKeyError(NetChatError):
    """Cipher invoked without a password (contract violation)."""
