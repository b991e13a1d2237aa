"""Encoders for command request payloads."""

from __future__ import annotations

import re
import struct
from collections.abc import Iterable, Mapping

from .define import HOST_DEBUG_POINT_CLOUD_PORT, MAX_COMMAND_BUFFER_SIZE

_SN_SIZE = 16
_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _header(count: int) -> bytes:
    if count > 0xFFFF:
        raise ValueError(f"too many keys: {count}")
    return struct.pack("<HH", count, 0)


def _check_size(payload: bytes) -> bytes:
    if len(payload) > MAX_COMMAND_BUFFER_SIZE:
        raise ValueError(
            f"request of {len(payload)} bytes exceeds {MAX_COMMAND_BUFFER_SIZE}"
        )
    return payload


def encode_key_values(params) -> bytes:
    """Encode key/value parameters: a count header then key, length, value for each."""
    pairs = list(params.items()) if isinstance(params, Mapping) else list(params)
    parts = [_header(len(pairs))]
    for key, value in pairs:
        value = bytes(value)
        if len(value) > 0xFFFF:
            raise ValueError(f"value for key {key} is too long")
        parts.append(struct.pack("<HH", int(key), len(value)))
        parts.append(value)
    return _check_size(b"".join(parts))


def encode_key_list(keys: Iterable[int]) -> bytes:
    """Encode a list of keys to query: a count header then each key."""
    keys = [int(key) for key in keys]
    body = b"".join(struct.pack("<H", key) for key in keys)
    return _check_size(_header(len(keys)) + body)


def encode_u8_param(key: int, value: int) -> bytes:
    """Encode a single one-byte parameter."""
    if not 0 <= int(value) <= 0xFF:
        raise ValueError(f"value {value} does not fit in one byte")
    return encode_key_values([(key, bytes([int(value)]))])


def encode_u32_param(key: int, value: int) -> bytes:
    """Encode a single four-byte unsigned parameter."""
    if not 0 <= int(value) <= 0xFFFFFFFF:
        raise ValueError(f"value {value} does not fit in four bytes")
    return encode_key_values([(key, struct.pack("<I", int(value)))])


def _parse_octets(host_ip: str) -> bytes:
    octets = [0, 0, 0, 0]
    for index, part in enumerate(host_ip.split(".")[:4]):
        match = _LEADING_DIGITS.match(part)
        if match is None:
            break
        octets[index] = int(match.group(1)) & 0xFF
    return bytes(octets)


def encode_debug_point_cloud(enable: bool, host_ip: str) -> bytes:
    """Encode the debug point cloud control request."""
    return (
        struct.pack("<B", 1 if enable else 0)
        + _parse_octets(host_ip)
        + struct.pack("<HH", HOST_DEBUG_POINT_CLOUD_PORT, 0)
    )


def encode_reboot(timeout: int) -> bytes:
    """Encode the reboot request carrying its timeout."""
    if not 0 <= int(timeout) <= 0xFFFF:
        raise ValueError(f"timeout {timeout} out of range")
    return struct.pack("<H", int(timeout))


def encode_reset(sn: str) -> bytes:
    """Encode the reset request carrying the device serial number."""
    raw = sn.encode("ascii")
    if len(raw) > _SN_SIZE:
        raise ValueError(f"serial number longer than {_SN_SIZE} bytes: {sn!r}")
    return raw.ljust(_SN_SIZE, b"\x00")