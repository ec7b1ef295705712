"""Decoder for the PARAM.SFO key/value table embedded in packages.

Layout (little-endian), relative to the start of the table::

    0x00  magic "\\0PSF" + version 01 01 00 00
    0x08  u32 key table offset
    0x0C  u32 data table offset
    0x10  u32 entry count
    0x14  entries, 16 bytes each:
            +0 u16 key offset  +2 u16 value type  +4 u32 value size
            +8 u32 max size    +12 u32 data offset
"""
from __future__ import annotations

import struct
from typing import Dict, Iterator, List

import structlog

from .models import ParameterEntry, Value, ValueType

log = structlog.stdlib.get_logger()

SFO_MAGIC = b"\x00PSF\x01\x01\x00\x00"
HEADER_SIZE = 20
ENTRY_SIZE = 16

_HEADER = struct.Struct("<III")       # key table, data table, count (at +8)
_ENTRY = struct.Struct("<HHIII")


def iter_entries(buffer: bytes) -> Iterator[ParameterEntry]:
    """Yield every decodable entry; bad entries are skipped, never fatal."""
    if len(buffer) < HEADER_SIZE:
        return
    key_table_offset, data_offset, count = _HEADER.unpack_from(buffer, 8)
    key_table = buffer[key_table_offset:]

    for i in range(count):
        entry_offset = HEADER_SIZE + i * ENTRY_SIZE
        if entry_offset + ENTRY_SIZE > len(buffer):
            # count is untrusted; everything past here is out of range too
            log.debug("Entry header outside table", index=i, count=count)
            return
        key_offset, value_type, value_size, _max, rel_offset = _ENTRY.unpack_from(buffer, entry_offset)

        if key_offset >= len(key_table):
            log.debug("Key offset outside table", index=i, key_offset=key_offset)
            continue
        key_end = key_table.find(b"\x00", key_offset)
        if key_end == -1:
            key_end = len(key_table)
        key = key_table[key_offset:key_end].decode("utf-8", errors="replace")

        start = data_offset + rel_offset
        if start + value_size > len(buffer):
            log.debug("Value outside table", key=key, offset=start, size=value_size)
            continue

        if value_type == ValueType.UTF8_STRING:
            raw = buffer[start:start + value_size]
            value: Value = raw.decode("utf-8", errors="replace").replace("\x00", "")
        elif value_type == ValueType.UINT32:
            if start + 4 > len(buffer):
                log.debug("Integer value outside table", key=key, offset=start)
                continue
            value = struct.unpack_from("<I", buffer, start)[0]
        else:
            log.debug("Unsupported value type", key=key, value_type=hex(value_type))
            continue

        yield ParameterEntry(key=key, type=ValueType(value_type), value=value)


def parse_param_table(buffer: bytes) -> Dict[str, Value]:
    """Decode a table into ``{key: value}``; the last duplicate key wins."""
    return {e.key: e.value for e in iter_entries(buffer)}


def build_param_table(entries: List[ParameterEntry]) -> bytes:
    """Serialize entries into a table image (the inverse of parse_param_table).

    Strings are written NUL-terminated and padded to 4 bytes.
    """
    keys = bytearray()
    data = bytearray()
    index = bytearray()
    for e in entries:
        if e.type == ValueType.UINT32:
            raw = struct.pack("<I", int(e.value))
        else:
            raw = str(e.value).encode("utf-8") + b"\x00"
        size = len(raw)
        padded = raw + b"\x00" * (-len(raw) % 4)
        index += _ENTRY.pack(len(keys), int(e.type), size, len(padded), len(data))
        keys += e.key.encode("utf-8") + b"\x00"
        data += padded

    keys += b"\x00" * (-len(keys) % 4)
    key_table_offset = HEADER_SIZE + len(index)
    data_offset = key_table_offset + len(keys)
    header = SFO_MAGIC + _HEADER.pack(key_table_offset, data_offset, len(entries))
    return bytes(header + index + keys + data)
