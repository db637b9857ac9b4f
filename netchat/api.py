# netchat/api.py
"""
HTTP collaborators: image upload, remote reveal, session termination.

Every call carries the bearer token. Transport-level failures become
NetworkError; a 401 becomes AuthError. Nothing here retries.
"""
import logging
import mimetypes
import os
from typing import Callable, Optional, Tuple

import requests

from netchat.common.config import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES
from netchat.common.errors import AuthError, NetworkError, RevealFailure, ValidationError

log = logging.getLogger(__name__)


def validate_image(path: str) -> Tuple[bytes, str]:
    """Local size/type gate; returns (data, content_type)."""
    content_type, _ = mimetypes.guess_type(path)
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed.")
    try:
        if os.path.getsize(path) > MAX_IMAGE_BYTES:
            raise ValidationError("Image too large. Maximum size is 5MB.")
        with open(path, "rb") as f:
            return f.read(), content_type
    except OSError as e:
        raise ValidationError(f"Cannot read image: {e}") from e


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token_source: Callable[[], Optional[str]],
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token_source = token_source
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        token = self._token_source()
        if not token:
            raise AuthError("Authentication required")
        return {"Authorization": f"Bearer {token}"}

    def _post(self, path: str, **kwargs) -> requests.Response:
        headers = self._headers()
        try:
            resp = self._session.post(
                f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            log.warning("POST %s failed: %s", path, e)
            raise NetworkError("Request failed - please try again") from e
        if resp.status_code == 401:
            raise AuthError("Invalid token")
        return resp

    def _reply(self, resp: requests.Response) -> dict:
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkError(f"Unexpected reply from server (HTTP {resp.status_code})") from e
        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected reply from server (HTTP {resp.status_code})")
        return data

    def upload_image(self, filename: str, data: bytes, content_type: str) -> str:
        reply = self._reply(self._post(
            "/api/upload/image",
            files={"image": (os.path.basename(filename), data, content_type)},
        ))
        if not reply.get("success") or not reply.get("imageUrl"):
            raise NetworkError(reply.get("message") or "Failed to upload image")
        return reply["imageUrl"]

    def reveal(self, token: str, password: str) -> str:
        reply = self._reply(self._post(
            "/api/decrypt",
            json={"encryptedMessage": token, "password": password},
        ))
        if not reply.get("success"):
            raise RevealFailure(reply.get("message") or "Decryption failed - wrong password?")
        return reply.get("decryptedMessage", "")

    def logout(self) -> None:
        """Best effort; the server treats repeats as no-ops."""
        self._post("/api/auth/logout")
