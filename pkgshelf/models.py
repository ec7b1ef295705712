from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Dict, Optional, Union

Value = Union[str, int]


class ValueType(IntEnum):
    UTF8_STRING = 0x0204
    UINT32 = 0x0404


@dataclass
class PackageFile:
    path: Path
    category: str
    size: int
    created: float          # epoch seconds (birth time where available)


@dataclass
class ParameterEntry:
    key: str
    type: ValueType
    value: Value


@dataclass(frozen=True)
class GameRecord:
    package_url: str
    region: Optional[str]
    title_id: str
    title: str
    version: Value
    release_date: str
    size: str
    cover_url: str

    def to_catalog_entry(self) -> Dict[str, object]:
        return {
            "region": self.region,
            "title_id": self.title_id,
            "name": self.title,
            "version": self.version,
            "release": self.release_date,
            "size": self.size,
            "min_fw": None,
            "cover_url": self.cover_url,
        }


@dataclass
class CategoryReport:
    category: str
    candidates: int = 0
    recorded: int = 0
    skipped: int = 0        # no table / no title id
    failed: int = 0         # I/O failures


@dataclass
class ScanReport:
    categories: Dict[str, CategoryReport] = field(default_factory=dict)

    @property
    def recorded(self) -> int:
        return sum(c.recorded for c in self.categories.values())

    @property
    def failed(self) -> int:
        return sum(c.failed for c in self.categories.values())
