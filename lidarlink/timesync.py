"""Time synchronisation from NMEA RMC sentences."""

from __future__ import annotations

import struct
import time

_RMC_SYNC_TIME_TYPE = 2
_RMC_REQUEST = struct.Struct("<BQ")
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def split_fields(text: str, sep: str) -> list[str]:
    """Split like reading delimited fields from a stream.

    Empty inner fields are kept; a single trailing empty field is not produced.
    """
    if not sep:
        raise ValueError("separator must not be empty")
    parts = text.split(sep)
    if parts[-1] == "":
        parts.pop()
    return parts


def string_to_timestamp(fmt: str, date: str) -> int:
    """Seconds since the epoch of ``date``, read with ``fmt`` as local standard time."""
    parsed = time.strptime(date, fmt)
    fields = tuple(parsed)[:8] + (0,)
    return int(time.mktime(time.struct_time(fields)))


def parse_gprmc(gprmc) -> int:
    """Return the UTC time of an RMC sentence in nanoseconds.

    Raises ValueError when the sentence lacks the time or date fields.
    """
    if isinstance(gprmc, (bytes, bytearray)):
        gprmc = bytes(gprmc).decode("ascii", errors="replace")
    fields = split_fields(gprmc, ",")
    if len(fields) < 10 or len(fields[1]) < 6 or len(fields[9]) < 6:
        raise ValueError(f"gprmc check failed. gprmc is : {gprmc}")
    date_field, time_field = fields[9], fields[1]
    year = date_field[4:]
    month = date_field[2:4]
    day = date_field[0:2]
    hour = time_field[0:2]
    minute = time_field[2:4]
    second = time_field[4:6]
    text = f"20{year}-{month}-{day} {hour}:{minute}:{second}"
    return string_to_timestamp(_DATETIME_FORMAT, text) * 1000 * 1000 * 1000


def encode_rmc_sync_time(rmc) -> bytes:
    """Encode the RMC time sync request: sync type then the time in nanoseconds."""
    return _RMC_REQUEST.pack(_RMC_SYNC_TIME_TYPE, parse_gprmc(rmc))