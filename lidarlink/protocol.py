"""Framing of command packets: header layout, checksums, packing and parsing."""

from __future__ import annotations

import struct
import zlib

from .define import MAX_COMMAND_BUFFER_SIZE, PROTOCOL_LIDAR_SDK, CommPacket

SOF = 0xAA
SDK_VERSION = 0

# sof, version, length, seq_num, cmd_id, cmd_type, sender_type, rsvd[6], crc16_h, crc32_d
_HEADER = struct.Struct("<BBHIHBB6sHI")
_CRC16_SPAN = 18  # header bytes covered by the header checksum
HEADER_LEN = _HEADER.size
PREAMBLE_LEN = _HEADER.size


class ProtocolError(ValueError):
    """A packet could not be packed or did not pass validation."""


def _make_crc16_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte << 8
        for _ in range(8):
            crc = ((crc << 1) ^ 0x1021) if crc & 0x8000 else (crc << 1)
            crc &= 0xFFFF
        table.append(crc)
    return tuple(table)


_CRC16_TABLE = _make_crc16_table()


def crc16_ccitt(data: bytes) -> int:
    """CRC-16/CCITT (polynomial 0x1021, initial value 0xFFFF, not reflected)."""
    crc = 0xFFFF
    for byte in data:
        crc = ((crc << 8) & 0xFFFF) ^ _CRC16_TABLE[((crc >> 8) ^ byte) & 0xFF]
    return crc


def crc32(data: bytes) -> int:
    """Standard reflected CRC-32 as used for the packet payload."""
    return zlib.crc32(data) & 0xFFFFFFFF


class SdkProtocol:
    """Encodes and decodes the framed command protocol."""

    preamble_len = PREAMBLE_LEN
    wrapper_len = HEADER_LEN

    def pack(self, packet: CommPacket, max_size: int = MAX_COMMAND_BUFFER_SIZE) -> bytes:
        """Frame a packet, computing both checksums."""
        if packet.protocol != PROTOCOL_LIDAR_SDK:
            raise ProtocolError(f"unsupported protocol {packet.protocol}")
        data = bytes(packet.data)
        length = len(data) + HEADER_LEN
        if length > max_size:
            raise ProtocolError(f"packet of {length} bytes exceeds limit of {max_size}")
        if length > 0xFFFF:
            raise ProtocolError(f"packet of {length} bytes does not fit the length field")
        head = _HEADER.pack(
            SOF,
            SDK_VERSION,
            length,
            packet.seq_num & 0xFFFF,
            packet.cmd_id & 0xFFFF,
            packet.cmd_type & 0xFF,
            packet.sender_type & 0xFF,
            bytes(6),
            0,
            0,
        )
        header_crc = crc16_ccitt(head[:_CRC16_SPAN])
        data_crc = crc32(data) if data else 0
        head = head[:_CRC16_SPAN] + struct.pack("<HI", header_crc, data_crc)
        return head + data

    def parse_packet(self, data: bytes) -> CommPacket:
        """Decode a framed packet without verifying its checksums."""
        if len(data) < HEADER_LEN:
            raise ProtocolError(f"packet needs {HEADER_LEN} bytes, got {len(data)}")
        _, version, length, seq_num, cmd_id, cmd_type, sender_type, _, _, _ = (
            _HEADER.unpack_from(data)
        )
        if length < HEADER_LEN or length > len(data):
            raise ProtocolError(f"invalid packet length {length}")
        return CommPacket(
            protocol=PROTOCOL_LIDAR_SDK,
            version=version,
            seq_num=seq_num,
            cmd_id=cmd_id,
            cmd_type=cmd_type,
            sender_type=sender_type,
            data=bytes(data[HEADER_LEN:length]),
        )

    def packet_len(self, data: bytes) -> int:
        """Return the length field of a framed packet."""
        if len(data) < 4:
            raise ProtocolError("too few bytes to read the packet length")
        return struct.unpack_from("<H", data, 2)[0]

    def check_preamble(self, data: bytes) -> bool:
        """Validate start byte, version, length and both checksums."""
        if len(data) < PREAMBLE_LEN:
            return False
        sof, version, length, *_rest, header_crc, data_crc = _HEADER.unpack_from(data)
        if sof != SOF or version != SDK_VERSION:
            return False
        if length < PREAMBLE_LEN or length > len(data):
            return False
        if header_crc != crc16_ccitt(bytes(data[:_CRC16_SPAN])):
            return False
        payload = bytes(data[HEADER_LEN:length])
        expected = crc32(payload) if payload else 0
        return data_crc == expected


class CommPort:
    """Packs outgoing packets and validates and parses incoming ones."""

    def __init__(self, protocol: SdkProtocol | None = None) -> None:
        self._protocol = protocol or SdkProtocol()

    def pack(self, packet: CommPacket, max_size: int = MAX_COMMAND_BUFFER_SIZE) -> bytes:
        """Frame a packet for sending."""
        return self._protocol.pack(packet, max_size)

    def parse(self, data: bytes) -> CommPacket:
        """Validate and decode a received packet."""
        if not self._protocol.check_preamble(data):
            raise ProtocolError("comm port preamble check failed")
        return self._protocol.parse_packet(data)