import struct

import pytest

from lidarlink.build_request import (
    RequestBuildError,
    build_set_host_imu_data_ip_info_request,
    build_set_host_point_data_ip_info_request,
    build_set_host_state_info_ip_cfg_request,
    build_set_lidar_ip_info_request,
    build_update_lidar_cfg_request,
    build_update_mid360_lidar_cfg_request,
    build_update_view_lidar_cfg_request,
    ip_to_u8,
)
from lidarlink.define import (
    HAP_IMU_PORT,
    HAP_POINT_DATA_PORT,
    MID360_LIDAR_IMU_DATA_PORT,
    MID360_LIDAR_POINT_CLOUD_PORT,
    MID360_LIDAR_PUSH_MSG_PORT,
    PA_LIDAR_POINT_CLOUD_PORT,
    DeviceType,
    HostIpConfig,
    HostNetInfo,
    LivoxLidarCfg,
    LivoxLidarIpInfo,
    ParamKey,
    ViewLidarIpInfo,
)


def _decode(payload):
    count, _ = struct.unpack_from("<HH", payload, 0)
    offset = 4
    items = []
    while offset < len(payload):
        key, length = struct.unpack_from("<HH", payload, offset)
        offset += 4
        items.append((key, payload[offset:offset + length]))
        offset += length
    assert offset == len(payload)
    return count, items


def _host_value(value):
    host_port, lidar_port = struct.unpack("<HH", value[4:])
    return list(value[:4]), host_port, lidar_port


def _cfg(dev_type, host_ip="192.168.1.5", multicast_ip=""):
    return LivoxLidarCfg(
        device_type=dev_type,
        host_net_info=HostNetInfo(
            host_ip=host_ip,
            multicast_ip=multicast_ip,
            push_msg_port=56201,
            point_data_port=56301,
            imu_data_port=56401,
        ),
    )


def test_ip_to_u8_basic():
    assert ip_to_u8("192.168.1.10", ".") == bytes([192, 168, 1, 10])


def test_ip_to_u8_custom_separator():
    assert ip_to_u8("10-0-0-7", "-") == bytes([10, 0, 0, 7])


def test_ip_to_u8_trailing_separator_tolerated():
    assert ip_to_u8("1.2.3.4.", ".") == bytes([1, 2, 3, 4])


def test_ip_to_u8_accepts_256_as_wrapped():
    assert ip_to_u8("256.1.1.1", ".")[0] == 0


@pytest.mark.parametrize(
    "src", ["1.2.3", "1.2.3.4.5", "300.1.1.1", "-1.2.3.4", "a.b.c.d", "", "1..2.3"]
)
def test_ip_to_u8_rejects(src):
    with pytest.raises(RequestBuildError):
        ip_to_u8(src, ".")


def test_ip_to_u8_empty_separator():
    with pytest.raises(RequestBuildError):
        ip_to_u8("1.2.3.4", "")


def test_point_data_request_wire_bytes():
    payload = build_set_host_point_data_ip_info_request(
        HostIpConfig("192.168.1.50", 56301, 56300)
    )
    assert payload == bytes.fromhex("010000000600080 0c0a80132eddbecdb".replace(" ", ""))


@pytest.mark.parametrize(
    "builder, key",
    [
        (build_set_host_state_info_ip_cfg_request, ParamKey.STATE_INFO_HOST_IP_CFG),
        (build_set_host_point_data_ip_info_request, ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG),
        (build_set_host_imu_data_ip_info_request, ParamKey.LIDAR_IMU_HOST_IP_CFG),
    ],
)
def test_single_host_requests_round_trip(builder, key):
    count, items = _decode(builder(HostIpConfig("10.1.2.3", 40000, 41000)))
    assert count == 1
    assert items[0][0] == key
    assert _host_value(items[0][1]) == ([10, 1, 2, 3], 40000, 41000)


def test_single_host_request_bad_ip():
    with pytest.raises(RequestBuildError):
        build_set_host_imu_data_ip_info_request(HostIpConfig("10.1.2", 1, 2))


def test_single_host_request_bad_port():
    with pytest.raises(RequestBuildError):
        build_set_host_state_info_ip_cfg_request(HostIpConfig("10.1.2.3", 70000, 2))


def test_set_lidar_ip_info():
    count, items = _decode(
        build_set_lidar_ip_info_request(
            LivoxLidarIpInfo("192.168.1.100", "255.255.255.0", "192.168.1.1")
        )
    )
    assert count == 1
    key, value = items[0]
    assert key == ParamKey.LIDAR_IP_CFG
    assert value == bytes([192, 168, 1, 100, 255, 255, 255, 0, 192, 168, 1, 1])


def test_set_lidar_ip_info_bad_gateway():
    with pytest.raises(RequestBuildError):
        build_set_lidar_ip_info_request(
            LivoxLidarIpInfo("192.168.1.100", "255.255.255.0", "bad")
        )


def test_view_request_for_hap_has_point_and_imu():
    info = ViewLidarIpInfo(
        handle=1,
        dev_type=DeviceType.INDUSTRIAL_HAP,
        host_ip="192.168.1.5",
        lidar_point_port=57000,
        lidar_imu_data_port=58000,
        host_point_port=57001,
        host_imu_data_port=58001,
    )
    count, items = _decode(build_update_view_lidar_cfg_request(info))
    assert count == 2
    assert [key for key, _ in items] == [
        ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG,
        ParamKey.LIDAR_IMU_HOST_IP_CFG,
    ]
    assert _host_value(items[0][1]) == ([192, 168, 1, 5], 57001, 57000)
    assert _host_value(items[1][1]) == ([192, 168, 1, 5], 58001, 58000)


def test_view_request_for_pa_has_point_only():
    info = ViewLidarIpInfo(
        dev_type=DeviceType.PA, host_ip="10.0.0.2", lidar_point_port=10000, host_point_port=10005
    )
    count, items = _decode(build_update_view_lidar_cfg_request(info))
    assert count == 1
    assert items[0][0] == ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG
    assert _host_value(items[0][1]) == ([10, 0, 0, 2], 10005, 10000)


def test_update_lidar_cfg_hap_ports():
    count, items = _decode(build_update_lidar_cfg_request(_cfg(DeviceType.INDUSTRIAL_HAP)))
    assert count == 2
    assert _host_value(items[0][1]) == ([192, 168, 1, 5], 56301, HAP_POINT_DATA_PORT)
    assert _host_value(items[1][1]) == ([192, 168, 1, 5], 56401, HAP_IMU_PORT)


def test_update_lidar_cfg_mid360_ports():
    _, items = _decode(build_update_lidar_cfg_request(_cfg(DeviceType.MID360)))
    assert _host_value(items[0][1])[2] == MID360_LIDAR_POINT_CLOUD_PORT
    assert _host_value(items[1][1])[2] == MID360_LIDAR_IMU_DATA_PORT


def test_update_lidar_cfg_pa_point_only():
    count, items = _decode(build_update_lidar_cfg_request(_cfg(DeviceType.PA)))
    assert count == 1
    assert _host_value(items[0][1])[2] == PA_LIDAR_POINT_CLOUD_PORT


def test_update_lidar_cfg_uses_multicast():
    _, items = _decode(
        build_update_lidar_cfg_request(
            _cfg(DeviceType.MID360, multicast_ip="224.1.1.5")
        )
    )
    assert all(_host_value(value)[0] == [224, 1, 1, 5] for _, value in items)


def test_update_lidar_cfg_unknown_type():
    with pytest.raises(RequestBuildError):
        build_update_lidar_cfg_request(_cfg(DeviceType.AVIA))


def test_update_lidar_cfg_bad_ip():
    with pytest.raises(RequestBuildError):
        build_update_lidar_cfg_request(_cfg(DeviceType.MID360, host_ip="1.2.3"))


def test_update_mid360_cfg_three_keys():
    count, items = _decode(build_update_mid360_lidar_cfg_request(_cfg(DeviceType.MID360)))
    assert count == 3
    assert [key for key, _ in items] == [
        ParamKey.STATE_INFO_HOST_IP_CFG,
        ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG,
        ParamKey.LIDAR_IMU_HOST_IP_CFG,
    ]
    assert _host_value(items[0][1]) == ([192, 168, 1, 5], 56201, MID360_LIDAR_PUSH_MSG_PORT)
    assert _host_value(items[1][1]) == ([192, 168, 1, 5], 56301, MID360_LIDAR_POINT_CLOUD_PORT)
    assert _host_value(items[2][1]) == ([192, 168, 1, 5], 56401, MID360_LIDAR_IMU_DATA_PORT)


def test_update_mid360_cfg_multicast_target():
    _, items = _decode(
        build_update_mid360_lidar_cfg_request(
            _cfg(DeviceType.MID360, multicast_ip="224.1.1.5")
        )
    )
    assert {tuple(_host_value(value)[0]) for _, value in items} == {(224, 1, 1, 5)}


def test_update_mid360_cfg_requires_valid_host_ip_even_with_multicast():
    with pytest.raises(RequestBuildError):
        build_update_mid360_lidar_cfg_request(
            _cfg(DeviceType.MID360, host_ip="", multicast_ip="224.1.1.5")
        )