import struct

import pytest

from lidarlink.timesync import (
    encode_rmc_sync_time,
    parse_gprmc,
    split_fields,
    string_to_timestamp,
)

RMC = "$GPRMC,083559.00,A,4717.11437,N,00833.91522,E,0.004,77.52,091202,,,A*57"
FMT = "%Y-%m-%d %H:%M:%S"


def test_split_keeps_inner_empty_fields():
    assert split_fields("a,b,,c", ",") == ["a", "b", "", "c"]


def test_split_drops_trailing_empty_field():
    assert split_fields("a,b,", ",") == ["a", "b"]


def test_split_empty_string():
    assert split_fields("", ",") == []


def test_split_rmc_field_count():
    fields = split_fields(RMC, ",")
    assert fields[1] == "083559.00"
    assert fields[9] == "091202"


def test_string_to_timestamp_day_difference():
    first = string_to_timestamp(FMT, "2023-01-01 00:00:00")
    second = string_to_timestamp(FMT, "2023-01-02 00:00:00")
    assert second - first == 86400


def test_string_to_timestamp_rejects_bad_date():
    with pytest.raises(ValueError):
        string_to_timestamp(FMT, "not a date")


def test_parse_gprmc_matches_timestamp():
    expected = string_to_timestamp(FMT, "2002-12-09 08:35:59")
    assert parse_gprmc(RMC) == expected * 10**9


def test_parse_gprmc_accepts_bytes():
    assert parse_gprmc(RMC.encode("ascii")) == parse_gprmc(RMC)


def test_parse_gprmc_seconds_step():
    later = RMC.replace("083559.00", "083600.00")
    assert parse_gprmc(later) - parse_gprmc(RMC) == 10**9


def test_parse_gprmc_too_few_fields():
    with pytest.raises(ValueError):
        parse_gprmc("$GPRMC,083559.00,A")


def test_parse_gprmc_short_time_field():
    with pytest.raises(ValueError):
        parse_gprmc(RMC.replace("083559.00", "0835"))


def test_encode_rmc_sync_time_layout():
    payload = encode_rmc_sync_time(RMC)
    assert len(payload) == 9
    assert payload[0] == 2
    assert struct.unpack_from("<Q", payload, 1)[0] == parse_gprmc(RMC)


def test_encode_rmc_sync_time_invalid():
    with pytest.raises(ValueError):
        encode_rmc_sync_time("garbage")