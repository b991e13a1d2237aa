"""Packet framing, CRC checks and request encoding for networked lidar devices."""

__version__ = "0.1.0"