# lidarlink

lidarlink encodes and decodes the command protocol that networked lidar units
use. It frames command packets and checks their CRCs. It builds the key/value
request payloads that configure a lidar. It also turns an NMEA RMC sentence
into a time-sync request. It uses only the standard library.

## Installation

```
pip install lidarlink
```

To run the tests:

```
pip install "lidarlink[test]"
pytest
```

## Modules

### `lidarlink.define`

This module holds the shared constants and records.

- **Port numbers.** These include `DETECTION_PORT`, `HAP_CMD_PORT`,
  `MID360_LIDAR_POINT_CLOUD_PORT`, `PA_LIDAR_FAULT_PORT` and the others.
- **Buffer limit.** `MAX_COMMAND_BUFFER_SIZE` is 1400.
- **Enums.** The integer enums are `CommandId`, `CommandType`, `SendType`,
  `HostSocketType`, `DeviceType`, `ParamKey` and `LidarStatus`.
- **Dataclasses.** These are `CommPacket`, `LivoxLidarNetInfo`, `HostNetInfo`,
  `LivoxLidarCfg`, `ViewLidarIpInfo`, `LivoxLidarIpInfo` and `HostIpConfig`.
- **`DetectionData`.** This is the payload of a search acknowledgement.
  - `DetectionData.from_bytes()` decodes it and ignores extra trailing bytes.
  - `to_bytes()` encodes it back.
  - The `ip` property gives the lidar address in dotted form.

### `lidarlink.protocol`

- **`crc16_ccitt(data)`** computes CRC-16/CCITT with polynomial 0x1021 and an
  initial value of 0xFFFF.
- **`crc32(data)`** computes the standard CRC-32.
- **`SdkProtocol`** handles the 24-byte header.
  - `pack()` frames a `CommPacket`.
  - `parse_packet()` decodes a frame without checking its CRCs.
  - `check_preamble()` checks the start byte, version, length and both CRCs.
  - `packet_len()` reads the length field.
- **`CommPort`** wraps `SdkProtocol`.
  - `pack()` frames a packet.
  - `parse()` checks the preamble first, then decodes.
- **Errors.** A frame that cannot be packed or does not pass the checks raises
  `ProtocolError`, a subclass of `ValueError`.

### `lidarlink.requests`

These functions encode request payloads.

- `encode_key_values(params)` takes a mapping or a sequence of pairs.
- `encode_key_list(keys)` encodes a list of keys to query.
- `encode_u8_param(key, value)` encodes one one-byte parameter.
- `encode_u32_param(key, value)` encodes one four-byte unsigned parameter.
- `encode_debug_point_cloud(enable, host_ip)` encodes the debug point cloud
  control request.
- `encode_reboot(timeout)` encodes the reboot request.
- `encode_reset(sn)` encodes the reset request. It pads the serial number to
  16 bytes.

A payload longer than `MAX_COMMAND_BUFFER_SIZE` raises `ValueError`. So does a
value out of range.

### `lidarlink.build_request`

- **`ip_to_u8(src, sep=".")`** splits an address into four octets and returns
  them as `bytes`.
  - Each field is read as a leading integer.
  - Values from 0 to 256 are accepted and stored modulo 256.
  - One trailing separator is allowed.
- **Builders.** Each of these returns a payload that points a lidar's data
  streams at the host:
  - `build_update_view_lidar_cfg_request`
  - `build_update_lidar_cfg_request`
  - `build_update_mid360_lidar_cfg_request`
- **IP settings.** `build_set_lidar_ip_info_request` sets the lidar's own
  address, netmask and gateway.
- **Per-stream settings.** Each of these sets one stream's host address and
  ports from a `HostIpConfig`:
  - `build_set_host_state_info_ip_cfg_request`
  - `build_set_host_point_data_ip_info_request`
  - `build_set_host_imu_data_ip_info_request`
- **Device types.** PA devices get only the point data entry. An unknown device
  type raises `RequestBuildError`.
- **Errors.** A malformed address or an out-of-range port also raises
  `RequestBuildError`.

### `lidarlink.timesync`

- **`parse_gprmc(sentence)`** returns the time of an RMC sentence in
  nanoseconds.
  - It accepts `str` or `bytes`.
  - The date and time fields are read through `time.mktime`, so they are taken
    as local time.
  - A sentence without usable time and date fields raises `ValueError`.
- **`encode_rmc_sync_time(sentence)`** packs the sync type (2) and the
  nanosecond time into the request payload.
- **`split_fields()`** and **`string_to_timestamp()`** are the helpers that
  `parse_gprmc()` uses.

## Example

```python
from lidarlink.define import CommPacket, CommandId, CommandType, ParamKey, SendType
from lidarlink.protocol import CommPort
from lidarlink.requests import encode_u8_param

payload = encode_u8_param(ParamKey.WORK_MODE, 0x01)
packet = CommPacket(
    seq_num=1,
    cmd_id=CommandId.LIDAR_WORK_MODE_CONTROL,
    cmd_type=CommandType.CMD,
    sender_type=SendType.HOST_SEND,
    data=payload,
)

port = CommPort()
frame = port.pack(packet, 1400)
assert port.parse(frame).data == payload
```

## What it does not do

lidarlink works only with bytes and records. It does not:

- open sockets or send or receive datagrams;
- discover devices;
- hand out sequence numbers;
- track outstanding commands;
- match acknowledgements to their commands;
- time out commands or run callbacks.

An application that talks to a lidar must do these itself. It builds the
payloads and frames with this package, and checks the frames it receives with
`CommPort.parse()`.