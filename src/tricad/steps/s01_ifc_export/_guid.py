"""IFC GlobalId generation — random and content-deterministic.

Both flavours draw 22 characters from the IFC base64 alphabet. The
deterministic flavour lets repeated exports of the same element keep the
same GlobalId, so viewers can diff or merge successive models.
"""

from __future__ import annotations

import secrets

IFC_GUID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_$"
IFC_GUID_LENGTH = 22

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF


def random_guid() -> str:
    """22 independent, uniformly drawn alphabet characters from the OS CSPRNG."""
    return "".join(IFC_GUID_ALPHABET[b & 63] for b in secrets.token_bytes(IFC_GUID_LENGTH))


def _fnv1a_32(seed: str) -> int:
    # UTF-16 code units, so ids match those produced by browser-side exporters
    data = seed.encode("utf-16-le")
    h = _FNV_OFFSET
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & _MASK32
    return h


def deterministic_guid(seed: str) -> str:
    """Stable GlobalId for ``seed``: FNV-1a hash feeding a xorshift32 stream."""
    x = _fnv1a_32(seed) or 1
    out = []
    for _ in range(IFC_GUID_LENGTH):
        x ^= (x << 13) & _MASK32
        x ^= x >> 17
        x ^= (x << 5) & _MASK32
        out.append(IFC_GUID_ALPHABET[x & 63])
    return "".join(out)
