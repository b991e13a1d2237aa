"""Protocol constants, identifiers and configuration records shared by the SDK."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

DEFAULT_TIMEOUT_MS = 1000
MAX_COMMAND_BUFFER_SIZE = 1400

PROTOCOL_LIDAR_SDK = 0

DETECTION_PORT = 56000
DETECTION_LISTEN_PORT = 56001
HOST_DEBUG_POINT_CLOUD_PORT = 44332

HAP_CMD_PORT = 56000
HAP_PUSH_MSG_PORT = 56000
HAP_POINT_DATA_PORT = 57000
HAP_IMU_PORT = 58000
HAP_LOG_PORT = 59000
HAP_DEBUG_POINT_CLOUD_PORT = 60000
HAP_LIDAR_CMD_PORT = 56000

LOG_PORT = 0

MID360_LIDAR_CMD_PORT = 56100
MID360_LIDAR_PUSH_MSG_PORT = 56200
MID360_LIDAR_POINT_CLOUD_PORT = 56300
MID360_LIDAR_IMU_DATA_PORT = 56400
MID360_LIDAR_LOG_PORT = 56500
MID360_LIDAR_DEBUG_POINT_CLOUD_PORT = 60301

MID360_HOST_CMD_PORT = 56101
MID360_HOST_PUSH_MSG_PORT = 56201
MID360_HOST_POINT_CLOUD_PORT = 56301
MID360_HOST_IMU_DATA_PORT = 56401
MID360_HOST_LOG_PORT = 56501

PA_LIDAR_CMD_PORT = 9347
PA_LIDAR_POINT_CLOUD_PORT = 10000
PA_LIDAR_FAULT_PORT = 10001
PA_LIDAR_LOG_PORT = 1002
PA_HOST_FAULT_PORT = 42867


class CommandId(IntEnum):
    """Command identifiers carried in the packet header."""

    LIDAR_SEARCH = 0x0000
    LIDAR_WORK_MODE_CONTROL = 0x0100
    LIDAR_GET_INTERNAL_INFO = 0x0101
    LIDAR_PUSH_MSG = 0x0102
    LIDAR_REBOOT_DEVICE = 0x0200
    LIDAR_RESET_DEVICE = 0x0201
    LIDAR_SET_PPS_SYNC = 0x0202
    LIDAR_PUSH_LOG = 0x0300
    LIDAR_COLLECTION_LOG = 0x0301
    LIDAR_LOG_SYS_TIME_SYNC = 0x0302
    LIDAR_DEBUG_POINT_CLOUD_CONTROL = 0x0303
    GENERAL_REQUEST_UPGRADE = 0x0400
    GENERAL_XFER_FIRMWARE = 0x0401
    GENERAL_COMPLETE_XFER_FIRMWARE = 0x0402
    GENERAL_REQUEST_UPGRADE_PROGRESS = 0x0403
    GENERAL_REQUEST_FIRMWARE_INFO = 0xFF


class CommandType(IntEnum):
    """Whether a packet is a command or the acknowledgement of one."""

    CMD = 0
    ACK = 1


class SendType(IntEnum):
    """Which side sent a packet."""

    HOST_SEND = 0
    LIDAR_SEND = 1


class HostSocketType(IntEnum):
    """Kinds of host sockets."""

    CMD = 0
    PUSH = 1
    POINT_CLOUD = 2
    IMU_DATA = 3
    LOG = 4
    FAULT = 5


class DeviceType(IntEnum):
    """Lidar device types."""

    HUB = 0
    MID40 = 1
    TELE = 2
    HORIZON = 3
    MID70 = 6
    AVIA = 7
    MID360 = 9
    INDUSTRIAL_HAP = 10
    HAP = 15
    PA = 16


class ParamKey(IntEnum):
    """Keys of the key/value parameters used in control and query commands."""

    PCL_DATA_TYPE = 0x0000
    PATTERN_MODE = 0x0001
    DUAL_EMIT_EN = 0x0002
    POINT_SEND_EN = 0x0003
    LIDAR_IP_CFG = 0x0004
    STATE_INFO_HOST_IP_CFG = 0x0005
    LIDAR_POINT_DATA_HOST_IP_CFG = 0x0006
    LIDAR_IMU_HOST_IP_CFG = 0x0007
    CTL_HOST_IP_CFG = 0x0008
    LOG_HOST_IP_CFG = 0x0009
    VEHICLE_SPEED = 0x0010
    ENVIRONMENT_TEMP = 0x0011
    INSTALL_ATTITUDE = 0x0012
    BLIND_SPOT_SET = 0x0013
    FRAME_RATE = 0x0014
    FOV_CFG0 = 0x0015
    FOV_CFG1 = 0x0016
    FOV_CFG_EN = 0x0017
    DETECT_MODE = 0x0018
    FUNC_IO_CFG = 0x0019
    WORK_MODE = 0x001A
    GLASS_HEAT = 0x001B
    IMU_DATA_EN = 0x001C
    FUSA_EN = 0x001D
    FORCE_HEAT_EN = 0x001E
    WORK_MODE_AFTER_BOOT = 0x0020
    LOG_PARAM_SET = 0x7FFF
    SN = 0x8000
    PRODUCT_INFO = 0x8001
    VERSION_APP = 0x8002
    VERSION_LOADER = 0x8003
    VERSION_HARDWARE = 0x8004
    MAC = 0x8005
    CUR_WORK_STATE = 0x8006
    CORE_TEMP = 0x8007
    POWER_UP_CNT = 0x8008
    LOCAL_TIME_NOW = 0x8009
    LAST_SYNC_TIME = 0x800A
    TIME_OFFSET = 0x800B
    TIME_SYNC_TYPE = 0x800C
    STATUS_CODE = 0x800D
    LIDAR_DIAG_STATUS = 0x800E
    LIDAR_FLASH_STATUS = 0x800F
    FW_TYPE = 0x8010
    HMS_CODE = 0x8011
    CUR_GLASS_HEAT_STATE = 0x8012
    ROI_MODE = 0xFFFE
    LIDAR_DIAG_INFO_QUERY = 0xFFFF


class LidarStatus(IntEnum):
    """Result codes handed to command callbacks."""

    SEND_FAILED = -9
    HANDLER_IMPL_NOT_EXIST = -8
    INVALID_HANDLE = -7
    CHANNEL_NOT_EXIST = -6
    NOT_ENOUGH_MEMORY = -5
    TIMEOUT = -4
    NOT_SUPPORTED = -3
    NOT_CONNECTED = -2
    FAILURE = -1
    SUCCESS = 0


@dataclass
class CommPacket:
    """A decoded command packet, independent of the wire framing."""

    protocol: int = PROTOCOL_LIDAR_SDK
    version: int = 0
    seq_num: int = 0
    cmd_id: int = 0
    cmd_type: int = CommandType.CMD
    sender_type: int = SendType.HOST_SEND
    data: bytes = b""

    @property
    def data_len(self) -> int:
        return len(self.data)


@dataclass
class LivoxLidarNetInfo:
    """Network settings of a lidar."""

    lidar_ipaddr: str = ""
    lidar_subnet_mask: str = ""
    lidar_gateway: str = ""
    cmd_data_port: int = 0
    push_msg_port: int = 0
    point_data_port: int = 0
    imu_data_port: int = 0
    log_data_port: int = 0


@dataclass
class HostNetInfo:
    """Network settings of the host that receives lidar data."""

    host_ip: str = ""
    multicast_ip: str = ""
    cmd_data_port: int = 0
    push_msg_port: int = 0
    point_data_port: int = 0
    imu_data_port: int = 0
    log_data_port: int = 0


@dataclass
class LivoxLidarCfg:
    """Full configuration of one lidar as given by the user."""

    device_type: int = 0
    lidar_net_info: LivoxLidarNetInfo = field(default_factory=LivoxLidarNetInfo)
    host_net_info: HostNetInfo = field(default_factory=HostNetInfo)
    cmd_key_set: list[int] = field(default_factory=list)


@dataclass
class ViewLidarIpInfo:
    """Addressing used when the host only views a lidar."""

    handle: int = 0
    dev_type: int = 0
    host_ip: str = ""
    lidar_cmd_port: int = 0
    lidar_point_port: int = 0
    lidar_imu_data_port: int = 0
    host_point_port: int = 0
    host_imu_data_port: int = 0


@dataclass
class LivoxLidarIpInfo:
    """Static IP settings to write to a lidar."""

    ip_addr: str = ""
    net_mask: str = ""
    gw_addr: str = ""


@dataclass
class HostIpConfig:
    """Host address and the port pair used for one data stream."""

    host_ip_addr: str = ""
    host_port: int = 0
    lidar_port: int = 0


_DETECTION_FORMAT = struct.Struct("<BB16s4BH")


@dataclass
class DetectionData:
    """Payload of a search acknowledgement sent by a lidar."""

    ret_code: int = 0
    dev_type: int = 0
    sn: str = ""
    lidar_ip: tuple[int, int, int, int] = (0, 0, 0, 0)
    cmd_port: int = 0

    SIZE = _DETECTION_FORMAT.size

    @classmethod
    def from_bytes(cls, data: bytes) -> DetectionData:
        """Decode the packed payload; extra trailing bytes are ignored."""
        if len(data) < _DETECTION_FORMAT.size:
            raise ValueError(
                f"detection data needs {_DETECTION_FORMAT.size} bytes, got {len(data)}"
            )
        ret_code, dev_type, raw_sn, a, b, c, d, cmd_port = _DETECTION_FORMAT.unpack_from(data)
        sn = raw_sn.split(b"\x00", 1)[0].decode("ascii", errors="replace")
        return cls(ret_code, dev_type, sn, (a, b, c, d), cmd_port)

    def to_bytes(self) -> bytes:
        """Encode into the packed wire layout."""
        raw_sn = self.sn.encode("ascii")
        if len(raw_sn) > 16:
            raise ValueError(f"serial number longer than 16 bytes: {self.sn!r}")
        if len(self.lidar_ip) != 4:
            raise ValueError(f"lidar ip must have 4 octets: {self.lidar_ip!r}")
        try:
            return _DETECTION_FORMAT.pack(
                self.ret_code, self.dev_type, raw_sn, *self.lidar_ip, self.cmd_port
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @property
    def ip(self) -> str:
        """The lidar address in dotted form."""
        return ".".join(str(octet) for octet in self.lidar_ip)