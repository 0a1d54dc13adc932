"""
HwrX — Humminbird record layouts

Every Humminbird record is a 4-byte big-endian signature followed by a
fixed-size big-endian body. The layouts below describe those bodies field by
field; RecordLayout packs and unpacks them without relying on any in-memory
struct alignment.
"""

from __future__ import annotations
import re
import struct
from enum import IntEnum
from typing import Dict, Iterable, Tuple, Any

WPT_NAME_LEN = 12
RTE_NAME_LEN = 20
TRK_NAME_LEN = 20
MAX_RTE_POINTS = 50

TRK_FILE_LEN = 131080
TRK_OLD_FILE_LEN = 8048


class HumminbirdError(ValueError):
    """Fatal problem with a Humminbird stream. Nothing is returned after this."""


class Magic(IntEnum):
    """Record signatures: format, version and (mostly) record length."""
    TRK = 0x01030000
    TRK_OLD = 0x01021F70
    WPT = 0x02020024
    WPT2 = 0x02030024  # New for 2013, no visible difference
    RTE = 0x03030088


_CODE_RE = re.compile(r"^(\d*)([a-zA-Z])$")


def _split_code(code: str) -> Tuple[int, str]:
    m = _CODE_RE.match(code)
    if not m:
        raise ValueError(f"Bad field code: {code!r}")
    return int(m.group(1) or 1), m.group(2)


class RecordLayout:
    """A fixed big-endian record described as ordered (field, struct code) pairs.

    Repeated numeric fields such as "50H" unpack to a tuple; "12s" fields
    unpack to raw bytes.
    """

    def __init__(self, name: str, fields: Iterable[Tuple[str, str]]):
        self.name = name
        self.fields = tuple(fields)
        self._struct = struct.Struct(">" + "".join(code for _, code in self.fields))
        self._offsets: Dict[str, int] = {}
        pos = 0
        for field, code in self.fields:
            self._offsets[field] = pos
            pos += struct.calcsize(">" + code)

    @property
    def size(self) -> int:
        return self._struct.size

    def offset(self, field: str) -> int:
        return self._offsets[field]

    def unpack(self, data: bytes) -> Dict[str, Any]:
        if len(data) != self.size:
            raise HumminbirdError(f"{self.name} record needs {self.size} bytes, got {len(data)}")
        values = iter(self._struct.unpack(data))
        record: Dict[str, Any] = {}
        for field, code in self.fields:
            count, kind = _split_code(code)
            if kind == "s" or count == 1:
                record[field] = next(values)
            else:
                record[field] = tuple(next(values) for _ in range(count))
        return record

    def pack(self, values: Dict[str, Any]) -> bytes:
        flat = []
        for field, code in self.fields:
            count, kind = _split_code(code)
            value = values.get(field)
            if kind == "s":
                flat.append(value or b"")
            elif count == 1:
                flat.append(value or 0)
            else:
                items = list(value or ())
                if len(items) > count:
                    raise HumminbirdError(f"{self.name}.{field} holds at most {count} entries")
                flat.extend(items + [0] * (count - len(items)))
        return self._struct.pack(*flat)


WAYPOINT = RecordLayout("waypoint", [
    ("num", "H"),      # Always ascending in the file
    ("zero", "H"),
    ("status", "B"),
    ("icon", "B"),
    ("depth", "H"),    # centimeters
    ("time", "I"),     # unix time, UTC
    ("east", "i"),
    ("north", "i"),
    ("name", f"{WPT_NAME_LEN}s"),
])

ROUTE = RecordLayout("route", [
    ("num", "H"),
    ("zero", "H"),
    ("status", "B"),
    ("u0", "B"),
    ("u1", "B"),
    ("count", "b"),
    ("time", "I"),
    ("name", f"{RTE_NAME_LEN}s"),
    ("points", f"{MAX_RTE_POINTS}H"),
])

TRACK_HEADER = RecordLayout("track header", [
    ("trk_num", "H"),
    ("zero", "H"),
    ("num_points", "H"),
    ("unknown", "H"),  # Always zero so far
    ("time", "I"),
    ("start_east", "i"),
    ("start_north", "i"),
    ("end_east", "i"),
    ("end_north", "i"),
    ("sw_east", "i"),  # bounding box, south-west corner
    ("sw_north", "i"),
    ("ne_east", "i"),  # north-east corner
    ("ne_north", "i"),
    ("name", f"{TRK_NAME_LEN}s"),
])

TRACK_POINT = RecordLayout("track point", [
    ("delta_east", "h"),
    ("delta_north", "h"),
    ("depth", "H"),
])

TRACK_HEADER_OLD = RecordLayout("old track header", [
    ("trk_num", "H"),
    ("zero", "H"),
    ("num_points", "H"),
    ("unknown", "H"),
    ("time", "I"),
    ("start_east", "i"),
    ("start_north", "i"),
    ("end_east", "i"),
    ("end_north", "i"),
])

TRACK_POINT_OLD = RecordLayout("old track point", [
    ("delta_east", "h"),
    ("delta_north", "h"),
])


def decode_name(raw: bytes) -> str:
    """Fixed-width NUL/space padded name to str."""
    return raw.split(b"\x00")[0].rstrip(b" ").decode("latin-1")


def encode_name(name: str, width: int) -> bytes:
    """Leaves room for the terminating NUL, like the device does."""
    return name.encode("latin-1", errors="replace")[:width - 1]


class ByteReader:
    """Sequential cursor over an in-memory Humminbird stream."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    @property
    def eof(self) -> bool:
        return self.offset >= len(self.data)

    def tell(self) -> int:
        return self.offset

    def seek(self, offset: int):
        self.offset = offset

    def read(self, size: int, what: str = "record") -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise HumminbirdError(f"Unexpected end of file reading {what}!")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def read_u32(self) -> int:
        return struct.unpack(">I", self.read(4, "record header"))[0]

    def read_record(self, layout: RecordLayout) -> Dict[str, Any]:
        return layout.unpack(self.read(layout.size, layout.name))
