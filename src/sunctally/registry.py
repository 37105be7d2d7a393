"""Known function identifiers reported by the compatibility harness."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

import yaml

from .exceptions import RegistryError

# Duplicates are intentional: the harness catalog lists some names twice.
SUNC_FUNCTIONS: tuple[str, ...] = (
    "checkcaller", "debug.getconstants", "debug.getinfo", "debug.getlocal", "debug.getlocals",
    "debug.getregistry", "debug.getstack", "debug.getupvalue", "debug.getupvalues",
    "debug.setconstant", "debug.setlocal", "debug.setupvalue", "debug.traceback", "getgc",
    "getgenv", "getloadedmodules", "getrenv", "getrunningscripts", "getsenv",
    "getthreadidentity", "setthreadidentity", "syn_checkcaller", "syn_getgenv", "syn_getrenv",
    "syn_getsenv", "syn_getloadedmodules", "syn_getrunningscripts", "clonefunction", "cloneref",
    "compareinstances", "crypt.decrypt", "crypt.encrypt", "crypt.generatebytes",
    "crypt.generatekey", "crypt.hash", "debug.getconstant", "debug.setconstant",
    "debug.setstack", "fireclickdetector", "fireproximityprompt", "firesignal", "firetouch",
    "getcallingscript", "getconnections", "getcustomasset", "gethiddenproperty", "gethui",
    "getinstances", "getnilinstances", "getproperties", "getrawmetatable", "getscriptbytecode",
    "getscriptclosure", "getscripthash", "getsenv", "getspecialinfo", "hookfunction",
    "hookmetamethod", "iscclosure", "islclosure", "isexecutorclosure", "loadstring",
    "newcclosure", "readfile", "writefile", "appendfile", "makefolder", "delfolder", "delfile",
    "isfile", "isfolder", "listfiles", "request", "http_request", "syn_request",
    "WebSocket.connect", "Drawing.new", "isrenderobj", "getrenderproperty",
    "setrenderproperty", "cleardrawcache", "getsynasset", "getcustomasset", "saveinstance",
    "messagebox", "setclipboard", "getclipboard", "toclipboard", "queue_on_teleport",
    "syn_queue_on_teleport", "debug.getproto", "getrawmetatable", "getnamecallmethod",
    "filtergc", "getfunctionhash", "setreadonly", "isreadonly", "getfenv", "setfenv",
    "getupvalue", "setupvalue", "getupvalues", "setupvalues", "getconstant", "getconstants",
    "setconstant", "setconstants", "getprotos", "getproto", "setproto", "getstack", "setstack",
    "getlocal", "setlocal", "getlocals", "setlocals", "getregistry",
)


def match_order_key(name: str) -> tuple[int, str]:
    """Sort key placing longer names first, ties broken lexicographically."""
    return (-len(name), name)


class FunctionRegistry:
    """Immutable, case-insensitive set of known function names."""

    __slots__ = ("_names", "_ordered")

    def __init__(self, names: Iterable[str]) -> None:
        normalized: set[str] = set()
        for name in names:
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Function names must be non-empty strings, got {name!r}")
            normalized.add(name.strip().lower())
        self._names = frozenset(normalized)
        self._ordered = tuple(sorted(self._names, key=match_order_key))

    @classmethod
    def default(cls) -> FunctionRegistry:
        """Registry built from the harness's built-in function catalog."""
        return cls(SUNC_FUNCTIONS)

    @classmethod
    def from_yaml(cls, path: Path) -> FunctionRegistry:
        """Load a registry from a YAML file holding a list of names.

        The file may contain either a bare list or a mapping with a
        ``functions`` key.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RegistryError(f"Failed to read registry file {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("functions")
        if not isinstance(data, list) or not data:
            raise RegistryError(f"Registry file {path} must contain a non-empty list of names")

        try:
            return cls(data)
        except ValueError as e:
            raise RegistryError(f"Invalid registry file {path}: {e}") from e

    def contains(self, name: str) -> bool:
        """Case-insensitive membership test."""
        if not isinstance(name, str):
            return False
        return name.strip().lower() in self._names

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    @property
    def ordered(self) -> tuple[str, ...]:
        """Names in deterministic match order."""
        return self._ordered

    def __repr__(self) -> str:
        return f"FunctionRegistry({len(self._names)} functions)"


default_registry = FunctionRegistry.default()
