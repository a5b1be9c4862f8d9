"""Typed per-browser option objects stored under their capability key."""

import copy
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from ..errors import ConfigurationError


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


@dataclass
class BrowserOptions:
    """
    Base class for browser option objects.

    Subclasses declare ``WIRE_NAMES`` (python attribute -> wire field name).
    Unknown wire fields survive a round trip through ``extra``.

    Merge rules, applied field by field:
      - lists: ordered union
      - dicts: shallow update
      - scalars: the addition wins when it is set
    """

    KEY: ClassVar[str] = ""
    WIRE_NAMES: ClassVar[Dict[str, str]] = {}

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "BrowserOptions":
        by_wire = {wire: attr for attr, wire in cls.WIRE_NAMES.items()}
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for name, value in mapping.items():
            attr = by_wire.get(name)
            if attr is None:
                extra[name] = copy.deepcopy(value)
            else:
                kwargs[attr] = copy.deepcopy(value)
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out = copy.deepcopy(self.extra)
        for attr, wire in self.WIRE_NAMES.items():
            value = getattr(self, attr)
            if not _is_empty(value):
                out[wire] = copy.deepcopy(value)
        return out

    def copy(self) -> "BrowserOptions":
        return copy.deepcopy(self)

    def _merge_value(self, mine: Any, theirs: Any) -> Any:
        if _is_empty(theirs):
            return copy.deepcopy(mine)
        if isinstance(mine, list) and isinstance(theirs, list):
            merged = list(copy.deepcopy(mine))
            for item in theirs:
                if item not in merged:
                    merged.append(copy.deepcopy(item))
            return merged
        if isinstance(mine, dict) and isinstance(theirs, dict):
            merged = copy.deepcopy(mine)
            merged.update(copy.deepcopy(theirs))
            return merged
        return copy.deepcopy(theirs)

    def merge(self, other: "BrowserOptions") -> "BrowserOptions":
        """Return a new object with ``other`` merged over this one."""
        if type(other) is not type(self):
            raise ConfigurationError(
                f"cannot merge {type(other).__name__} into {type(self).__name__} at {self.KEY!r}"
            )
        values = {
            f.name: self._merge_value(getattr(self, f.name), getattr(other, f.name))
            for f in fields(self)
        }
        return type(self)(**values)

    def conflicts(self, other: "BrowserOptions") -> List[str]:
        """Wire names of scalar fields set to different values on both sides."""
        clashes = []
        for attr, wire in self.WIRE_NAMES.items():
            mine, theirs = getattr(self, attr), getattr(other, attr)
            if isinstance(mine, (list, dict)) or _is_empty(mine) or _is_empty(theirs):
                continue
            if mine != theirs:
                clashes.append(wire)
        for name, value in other.extra.items():
            if name in self.extra and self.extra[name] != value and not isinstance(value, (list, dict)):
                clashes.append(name)
        return clashes


@dataclass
class ChromeOptions(BrowserOptions):
    KEY: ClassVar[str] = "goog:chromeOptions"
    WIRE_NAMES: ClassVar[Dict[str, str]] = {
        "args": "args",
        "binary": "binary",
        "extensions": "extensions",
        "prefs": "prefs",
        "debugger_address": "debuggerAddress",
        "exclude_switches": "excludeSwitches",
    }

    args: List[str] = field(default_factory=list)
    binary: Optional[str] = None
    extensions: List[str] = field(default_factory=list)
    prefs: Dict[str, Any] = field(default_factory=dict)
    debugger_address: Optional[str] = None
    exclude_switches: List[str] = field(default_factory=list)

    def add_argument(self, arg: str) -> None:
        if arg not in self.args:
            self.args.append(arg)


@dataclass
class FirefoxOptions(BrowserOptions):
    KEY: ClassVar[str] = "moz:firefoxOptions"
    WIRE_NAMES: ClassVar[Dict[str, str]] = {
        "args": "args",
        "binary": "binary",
        "profile": "profile",
        "prefs": "prefs",
        "log": "log",
    }

    args: List[str] = field(default_factory=list)
    binary: Optional[str] = None
    # Base64-encoded zip of a profile directory.
    profile: Optional[str] = None
    prefs: Dict[str, Any] = field(default_factory=dict)
    log: Dict[str, Any] = field(default_factory=dict)

    def add_argument(self, arg: str) -> None:
        if arg not in self.args:
            self.args.append(arg)

    def set_log_level(self, level: str) -> None:
        self.log = {"level": level}


__all__ = [
    "BrowserOptions",
    "ChromeOptions",
    "FirefoxOptions",
]
