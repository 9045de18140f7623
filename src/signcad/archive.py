"""Minimal store-only ZIP container.

Only what 3MF packages need: uncompressed members, no timestamps, no
extra fields, no comments.  Layout per member is a 30-byte local header,
the name, the raw data; then one 46-byte central directory record per
member and a 22-byte end-of-directory record.

    blob = build_archive([("a.txt", b"hello")])
    for entry in read_directory(blob):
        print(entry.name, entry.offset, hex(entry.crc))
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Tuple, Union

CRC_POLYNOMIAL = 0xEDB88320

LOCAL_SIGNATURE = 0x04034B50
CENTRAL_SIGNATURE = 0x02014B50
END_SIGNATURE = 0x06054B50
ZIP_VERSION = 20

_LOCAL = struct.Struct('<IHHHHHIIIHH')
_CENTRAL = struct.Struct('<IHHHHHHIIIHHHHHII')
_END = struct.Struct('<IHHHHIIH')


def _crc_table() -> Tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (c >> 1) ^ CRC_POLYNOMIAL if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _crc_table()


def crc32(data: bytes, crc: int = 0) -> int:
    """CRC-32 (IEEE) of ``data``, continuing from ``crc`` if given."""
    c = crc ^ 0xFFFFFFFF
    for byte in data:
        c = CRC_TABLE[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


@dataclass(frozen=True)
class ArchiveEntry:
    """Central directory view of one member."""

    name: str
    crc: int
    size: int
    offset: int


Files = Union[Mapping[str, bytes], Iterable[Tuple[str, bytes]]]


def build_archive(files: Files) -> bytes:
    """Pack ``files`` (name -> bytes, in order) into a stored ZIP."""

    items = list(files.items()) if isinstance(files, Mapping) else list(files)
    body = bytearray()
    entries: List[Tuple[bytes, ArchiveEntry]] = []

    for name, data in items:
        data = bytes(data)
        raw_name = name.encode('utf-8')
        entry = ArchiveEntry(name, crc32(data), len(data), len(body))
        body += _LOCAL.pack(LOCAL_SIGNATURE, ZIP_VERSION, 0, 0, 0, 0,
                            entry.crc, entry.size, entry.size, len(raw_name), 0)
        body += raw_name
        body += data
        entries.append((raw_name, entry))

    directory = bytearray()
    for raw_name, entry in entries:
        directory += _CENTRAL.pack(CENTRAL_SIGNATURE, ZIP_VERSION, ZIP_VERSION, 0, 0, 0, 0,
                                   entry.crc, entry.size, entry.size, len(raw_name),
                                   0, 0, 0, 0, 0, entry.offset)
        directory += raw_name

    end = _END.pack(END_SIGNATURE, 0, 0, len(entries), len(entries),
                    len(directory), len(body), 0)
    return bytes(body + directory + end)


def read_directory(blob: bytes) -> List[ArchiveEntry]:
    """Parse the central directory of an archive made by :func:`build_archive`."""

    if len(blob) < _END.size:
        raise ValueError("archive too small")
    (sig, _, _, _, count, size, offset, _) = _END.unpack_from(blob, len(blob) - _END.size)
    if sig != END_SIGNATURE:
        raise ValueError("end of central directory record not found")

    entries = []
    pos = offset
    for _ in range(count):
        fields = _CENTRAL.unpack_from(blob, pos)
        if fields[0] != CENTRAL_SIGNATURE:
            raise ValueError(f"bad central directory record at {pos}")
        name_len = fields[10]
        name = blob[pos + _CENTRAL.size:pos + _CENTRAL.size + name_len].decode('utf-8')
        entries.append(ArchiveEntry(name, fields[7], fields[9], fields[16]))
        pos += _CENTRAL.size + name_len + fields[11] + fields[12]
    if pos != offset + size:
        raise ValueError("central directory size mismatch")
    return entries


def read_member(blob: bytes, entry: ArchiveEntry) -> bytes:
    """Return the stored bytes of ``entry``, checking its local header."""

    fields = _LOCAL.unpack_from(blob, entry.offset)
    if fields[0] != LOCAL_SIGNATURE:
        raise ValueError(f"bad local header for {entry.name}")
    start = entry.offset + _LOCAL.size + fields[9] + fields[10]
    return blob[start:start + entry.size]


__all__ = ['crc32', 'build_archive', 'read_directory', 'read_member', 'ArchiveEntry']
