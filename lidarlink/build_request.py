"""Builders for the configuration requests that point a lidar at the host."""

from __future__ import annotations

import logging
import re
import struct

from .define import (
    HAP_IMU_PORT,
    HAP_POINT_DATA_PORT,
    MID360_LIDAR_IMU_DATA_PORT,
    MID360_LIDAR_POINT_CLOUD_PORT,
    MID360_LIDAR_PUSH_MSG_PORT,
    PA_LIDAR_POINT_CLOUD_PORT,
    DeviceType,
    HostIpConfig,
    LivoxLidarCfg,
    LivoxLidarIpInfo,
    ParamKey,
    ViewLidarIpInfo,
)
from .requests import encode_key_values

logger = logging.getLogger(__name__)

_INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")
_OCTET_LIMIT = 256


class RequestBuildError(ValueError):
    """A configuration request could not be built from the given settings."""


def _parse_int(text: str, src: str) -> int:
    match = _INTEGER_PREFIX.match(text)
    if match is None:
        raise RequestBuildError(f"ip to u8 failed, the ip:{src}, bad field {text!r}")
    return int(match.group(1))


def ip_to_u8(src: str, sep: str = ".") -> bytes:
    """Split an address into its four octets.

    Each field is read as a leading integer; values from 0 to 256 are accepted
    and stored modulo 256. Exactly four fields must be present; one trailing
    separator is tolerated.
    """
    if not sep:
        raise RequestBuildError("separator must not be empty")
    fields = src.split(sep)
    if fields and fields[-1] == "":
        fields.pop()
    octets = []
    for text in fields:
        value = _parse_int(text, src)
        if value < 0 or value > _OCTET_LIMIT:
            raise RequestBuildError(
                f"ip to u8 failed, the ip:{src}, the fault val:{value}"
            )
        octets.append(value & 0xFF)
    if len(octets) != 4:
        raise RequestBuildError(
            f"ip to u8 failed, the ip:{src}, the val size:{len(octets)}"
        )
    return bytes(octets)


def _port(value: int) -> bytes:
    try:
        return struct.pack("<H", value)
    except struct.error as exc:
        raise RequestBuildError(f"port {value!r} out of range") from exc


def _host_ip_value(host_ip: str, host_port: int, lidar_port: int) -> bytes:
    return ip_to_u8(host_ip, ".") + _port(host_port) + _port(lidar_port)


def _target_ip(lidar_cfg: LivoxLidarCfg) -> str:
    net = lidar_cfg.host_net_info
    return net.multicast_ip if net.multicast_ip else net.host_ip


def build_update_view_lidar_cfg_request(view_info: ViewLidarIpInfo) -> bytes:
    """Request that sends point (and, except on PA, IMU) data to a viewing host."""
    params = [
        (
            ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG,
            _host_ip_value(
                view_info.host_ip, view_info.host_point_port, view_info.lidar_point_port
            ),
        )
    ]
    if view_info.dev_type != DeviceType.PA:
        params.append(
            (
                ParamKey.LIDAR_IMU_HOST_IP_CFG,
                _host_ip_value(
                    view_info.host_ip,
                    view_info.host_imu_data_port,
                    view_info.lidar_imu_data_port,
                ),
            )
        )
    return encode_key_values(params)


def build_update_mid360_lidar_cfg_request(lidar_cfg: LivoxLidarCfg) -> bytes:
    """Request that points state, point and IMU streams of a Mid-360 at the host."""
    net = lidar_cfg.host_net_info
    # The host address is always validated, even when a multicast target is used.
    ip_to_u8(net.host_ip, ".")
    target = _target_ip(lidar_cfg)
    params = [
        (
            ParamKey.STATE_INFO_HOST_IP_CFG,
            _host_ip_value(target, net.push_msg_port, MID360_LIDAR_PUSH_MSG_PORT),
        ),
        (
            ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG,
            _host_ip_value(target, net.point_data_port, MID360_LIDAR_POINT_CLOUD_PORT),
        ),
        (
            ParamKey.LIDAR_IMU_HOST_IP_CFG,
            _host_ip_value(target, net.imu_data_port, MID360_LIDAR_IMU_DATA_PORT),
        ),
    ]
    return encode_key_values(params)


_POINT_PORTS = {
    DeviceType.INDUSTRIAL_HAP: HAP_POINT_DATA_PORT,
    DeviceType.MID360: MID360_LIDAR_POINT_CLOUD_PORT,
    DeviceType.PA: PA_LIDAR_POINT_CLOUD_PORT,
}

_IMU_PORTS = {
    DeviceType.INDUSTRIAL_HAP: HAP_IMU_PORT,
    DeviceType.MID360: MID360_LIDAR_IMU_DATA_PORT,
}


def build_update_lidar_cfg_request(lidar_cfg: LivoxLidarCfg) -> bytes:
    """Request that points point (and, except on PA, IMU) data at the host."""
    net = lidar_cfg.host_net_info
    target = _target_ip(lidar_cfg)
    ip_bytes = ip_to_u8(target, ".")
    dev_type = lidar_cfg.device_type

    lidar_point_port = _POINT_PORTS.get(dev_type)
    if lidar_point_port is None:
        raise RequestBuildError(f"unknown device type {dev_type}")
    params = [
        (
            ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG,
            ip_bytes + _port(net.point_data_port) + _port(lidar_point_port),
        )
    ]
    if dev_type == DeviceType.PA:
        return encode_key_values(params)

    lidar_imu_port = _IMU_PORTS.get(dev_type)
    if lidar_imu_port is None:
        raise RequestBuildError(f"unknown device type {dev_type}")
    params.append(
        (
            ParamKey.LIDAR_IMU_HOST_IP_CFG,
            ip_bytes + _port(net.imu_data_port) + _port(lidar_imu_port),
        )
    )
    return encode_key_values(params)


def build_set_lidar_ip_info_request(ip_info: LivoxLidarIpInfo) -> bytes:
    """Request that sets the lidar's own address, netmask and gateway."""
    value = (
        ip_to_u8(ip_info.ip_addr, ".")
        + ip_to_u8(ip_info.net_mask, ".")
        + ip_to_u8(ip_info.gw_addr, ".")
    )
    return encode_key_values([(ParamKey.LIDAR_IP_CFG, value)])


def _single_host_request(key: ParamKey, cfg: HostIpConfig) -> bytes:
    value = _host_ip_value(cfg.host_ip_addr, cfg.host_port, cfg.lidar_port)
    return encode_key_values([(key, value)])


def build_set_host_state_info_ip_cfg_request(cfg: HostIpConfig) -> bytes:
    """Request that sets where state information is pushed."""
    return _single_host_request(ParamKey.STATE_INFO_HOST_IP_CFG, cfg)


def build_set_host_point_data_ip_info_request(cfg: HostIpConfig) -> bytes:
    """Request that sets where point data is sent."""
    return _single_host_request(ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG, cfg)


def build_set_host_imu_data_ip_info_request(cfg: HostIpConfig) -> bytes:
    """Request that sets where IMU data is sent."""
    return _single_host_request(ParamKey.LIDAR_IMU_HOST_IP_CFG, cfg)