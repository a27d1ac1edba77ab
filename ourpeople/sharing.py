"""Pack a snapshot into a URL-safe token so a family can be shared as a link."""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from .schemas import Snapshot
from .utils import logger

SHARE_VERSION = 1
SHARE_PARAM = "share"


def encode_share(snapshot: Snapshot) -> str:
    payload = snapshot.dict()
    payload["version"] = SHARE_VERSION
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    token = base64.urlsafe_b64encode(zlib.compress(raw, 9)).decode("ascii")
    return token.rstrip("=")


def decode_share(token: str) -> Optional[Snapshot]:
    """Inverse of :func:`encode_share`; malformed tokens yield ``None``."""

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = zlib.decompress(base64.urlsafe_b64decode(padded.encode("ascii")))
        payload = json.loads(raw.decode("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError("share payload is not an object")
        version = payload.get("version", SHARE_VERSION)
        if version > SHARE_VERSION:
            raise ValueError(f"unsupported share version {version}")
        return Snapshot.from_dict(payload)
    except (binascii.Error, zlib.error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        logger.debug("Failed to parse shared data: %s", exc)
        return None


def create_share_link(snapshot: Snapshot, base_url: str) -> str:
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({SHARE_PARAM: encode_share(snapshot)})}"


def shared_data_from_url(url: str) -> Optional[Snapshot]:
    values = parse_qs(urlsplit(url).query).get(SHARE_PARAM)
    if not values:
        return None
    return decode_share(values[0])


__all__ = [
    "SHARE_VERSION",
    "encode_share",
    "decode_share",
    "create_share_link",
    "shared_data_from_url",
]
