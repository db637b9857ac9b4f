# netchat/crypto/keystream.py
"""
Password keystream obfuscation for message bodies.

NOT encryption: the key is a 32-bit rolling hash of the password and the
transform is a byte-wise XOR. It must stay bit-compatible with the server's
reveal endpoint, so do not swap in a real cipher here.

    seed  = abs(int32(31 * seed + code_unit))   for each UTF-16 unit of password
    k[i]  = (seed >> ((i * 7) % 32)) & 0xFF
    token = base64(utf8(text) XOR k)
"""
import re

from netchat.common import utils
from netchat.common.errors import InvalidKeyError

_B64_ALPHABET = re.compile(r"[^A-Za-z0-9+/]")


def _int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _code_units(password: str):
    data = password.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def derive_seed(password: str) -> int:
    if not password:
        raise InvalidKeyError("password required")
    seed = 0
    for unit in _code_units(password):
        seed = _int32((seed << 5) - seed + unit)
    # abs(-2**31) wraps back to -2**31 once shifted as int32
    return _int32(abs(seed))


def keystream(password: str, length: int) -> bytes:
    seed = derive_seed(password)
    return bytes((seed >> ((i * 7) % 32)) & 0xFF for i in range(length))


def _xor(data: bytes, password: str) -> bytes:
    key = keystream(password, len(data))
    return bytes(b ^ k for b, k in zip(data, key))


def _lenient_b64decode(token: str) -> bytes:
    cleaned = _B64_ALPHABET.sub("", token)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    return utils.b64decode(cleaned)


def obfuscate(text: str, password: str) -> str:
    return utils.b64encode(_xor(text.encode("utf-8"), password))


def reveal(token: str, password: str) -> str:
    """
    Inverse of obfuscate() for the same password.

    A wrong password or a damaged token does not raise; the result is just
    garbage (undecodable bytes become U+FFFD).
    """
    if not password:
        raise InvalidKeyError("password required")
    return _xor(_lenient_b64decode(token), password).decode("utf-8", errors="replace")
