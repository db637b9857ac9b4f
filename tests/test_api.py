"""Unit tests for the HTTP collaborators."""
from unittest.mock import Mock

import pytest
import requests

from netchat.api import ApiClient, validate_image
from netchat.common.errors import AuthError, NetworkError, RevealFailure, ValidationError


def reply(status=200, payload=None):
    resp = Mock(status_code=status)
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ApiClient("http://chat.test/", lambda: "tok", timeout=3, session=session)


class TestReveal:
    def test_success(self, client, session):
        session.post.return_value = reply(payload={"success": True, "decryptedMessage": "hello"})
        assert client.reveal("Kk3abW8=", "abcd") == "hello"
        session.post.assert_called_once_with(
            "http://chat.test/api/decrypt",
            headers={"Authorization": "Bearer tok"},
            timeout=3,
            json={"encryptedMessage": "Kk3abW8=", "password": "abcd"},
        )

    def test_structured_failure(self, client, session):
        session.post.return_value = reply(payload={"success": False, "message": "Wrong password"})
        with pytest.raises(RevealFailure, match="Wrong password"):
            client.reveal("x", "abcd")

    def test_transport_failure(self, client, session):
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(NetworkError):
            client.reveal("x", "abcd")

    def test_non_json_reply(self, client, session):
        session.post.return_value = reply(502, ValueError("no json"))
        with pytest.raises(NetworkError, match="502"):
            client.reveal("x", "abcd")

    def test_unauthorized(self, client, session):
        session.post.return_value = reply(401, {"success": False})
        with pytest.raises(AuthError):
            client.reveal("x", "abcd")

    def test_no_token(self, session):
        client = ApiClient("http://chat.test", lambda: None, session=session)
        with pytest.raises(AuthError):
            client.reveal("x", "abcd")
        session.post.assert_not_called()


class TestUpload:
    def test_success(self, client, session):
        session.post.return_value = reply(payload={"success": True, "imageUrl": "/uploads/a.png"})
        assert client.upload_image("/tmp/a.png", b"png", "image/png") == "/uploads/a.png"
        _, kwargs = session.post.call_args
        assert kwargs["files"] == {"image": ("a.png", b"png", "image/png")}

    def test_rejected(self, client, session):
        session.post.return_value = reply(payload={"success": False, "message": "quota"})
        with pytest.raises(NetworkError, match="quota"):
            client.upload_image("a.png", b"", "image/png")


class TestLogout:
    def test_ignores_reply_body(self, client, session):
        session.post.return_value = reply(204, ValueError("empty"))
        client.logout()
        assert session.post.call_args.args == ("http://chat.test/api/auth/logout",)


class TestValidateImage:
    def test_accepts_png(self, tmp_path):
        path = tmp_path / "cat.png"
        path.write_bytes(b"\x89PNG")
        assert validate_image(str(path)) == (b"\x89PNG", "image/png")

    def test_rejects_type(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hi")
        with pytest.raises(ValidationError, match="Invalid file type"):
            validate_image(str(path))

    def test_rejects_size(self, tmp_path):
        path = tmp_path / "big.gif"
        with open(path, "wb") as f:
            f.truncate(5 * 1024 * 1024 + 1)
        with pytest.raises(ValidationError, match="too large"):
            validate_image(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError):
            validate_image(str(tmp_path / "gone.jpg"))

    def test_unreadable_path(self, tmp_path):
        path = tmp_path / "dir.png"
        path.mkdir()
        with pytest.raises(ValidationError, match="Cannot read image"):
            validate_image(str(path))
