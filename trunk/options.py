"""Option models for each configuration section, read from mappings."""

from __future__ import annotations

import ipaddress
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from trunk.common import TrunkError

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_MISSING = object()


def parse_uri(value: str) -> str:
    """Validate ``value`` as a URI and return it unchanged."""
    if not isinstance(value, str):
        raise TrunkError(f"invalid uri {value!r}: expected a string")
    if not value:
        raise TrunkError("invalid uri '': empty string")
    if any(ord(ch) <= 0x20 or ord(ch) >= 0x7F for ch in value):
        raise TrunkError(f"invalid uri {value!r}: invalid uri character")
    if value == "*" or value.startswith("/"):
        return value
    if "://" in value:
        try:
            parts = urlsplit(value)
            parts.port
        except ValueError as err:
            raise TrunkError(f"invalid uri {value!r}: {err}") from err
        if not parts.scheme or not parts.netloc:
            raise TrunkError(f"invalid uri {value!r}: invalid format")
        return value
    if any(ch in value for ch in "/?#"):
        raise TrunkError(f"invalid uri {value!r}: invalid format")
    try:
        urlsplit("//" + value).port
    except ValueError as err:
        raise TrunkError(f"invalid uri {value!r}: {err}") from err
    return value


def _mapping(data: Any, section: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TrunkError(f"invalid {section} options: expected a table, got {type(data).__name__}")
    return data


def _invalid(key: str, value: Any, expected: str) -> TrunkError:
    return TrunkError(f"invalid value for `{key}`: {value!r}, expected {expected}")


def _required(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise TrunkError(f"missing field `{key}`")
    return value


def _as_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise _invalid(key, value, "a string")
    return value


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else _as_str(key, value)


def _as_path(key: str, value: Any) -> Path:
    if isinstance(value, (str, os.PathLike)):
        return Path(value)
    raise _invalid(key, value, "a path")


def _opt_path(data: Mapping[str, Any], key: str) -> Path | None:
    value = data.get(key)
    return None if value is None else _as_path(key, value)


def _opt_path_list(data: Mapping[str, Any], key: str) -> list[Path] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [Path(item) for item in value.split(",")]
    if isinstance(value, (list, tuple)):
        return [_as_path(key, item) for item in value]
    raise _invalid(key, value, "a list of paths")


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise _invalid(key, value, "a boolean")


def _opt_port(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise _invalid(key, value, "a port number")
    if isinstance(value, str):
        if not value.isdigit():
            raise _invalid(key, value, "a port number")
        value = int(value)
    if not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise _invalid(key, value, "a port number")
    return value


def _opt_address(data: Mapping[str, Any], key: str) -> IPAddress | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if not isinstance(value, str):
        raise _invalid(key, value, "an IP address")
    try:
        return ipaddress.ip_address(value)
    except ValueError as err:
        raise _invalid(key, value, "an IP address") from err


def _opt_uri(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else parse_uri(_as_str(key, value))


def _opt_str_map(data: Mapping[str, Any], key: str) -> dict[str, str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise _invalid(key, value, "a table of strings")
    return {_as_str(key, k): _as_str(key, v) for k, v in value.items()}


def _str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise _invalid(key, value, "a list of strings")
    return [_as_str(key, item) for item in value]


@dataclass
class BuildOptions:
    """Options for the build system."""

    target: Path | None = None
    release: bool = False
    dist: Path | None = None
    public_url: str | None = None
    pattern_script: str | None = None
    pattern_preload: str | None = None
    pattern_params: dict[str, str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BuildOptions:
        data = _mapping(data, "build")
        return cls(
            target=_opt_path(data, "target"),
            release=_bool(data, "release"),
            dist=_opt_path(data, "dist"),
            public_url=_opt_str(data, "public_url"),
            pattern_script=_opt_str(data, "pattern_script"),
            pattern_preload=_opt_str(data, "pattern_preload"),
            pattern_params=_opt_str_map(data, "pattern_params"),
        )


@dataclass
class WatchOptions:
    """Options for the watch system."""

    watch: list[Path] | None = None
    ignore: list[Path] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> WatchOptions:
        data = _mapping(data, "watch")
        return cls(watch=_opt_path_list(data, "watch"), ignore=_opt_path_list(data, "ignore"))


@dataclass
class ServeOptions:
    """Options for the serve system."""

    address: IPAddress | None = None
    port: int | None = None
    open: bool = False
    proxy_backend: str | None = None
    proxy_rewrite: str | None = None
    proxy_ws: bool = False
    no_autoreload: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServeOptions:
        data = _mapping(data, "serve")
        return cls(
            address=_opt_address(data, "address"),
            port=_opt_port(data, "port"),
            open=_bool(data, "open"),
            proxy_backend=_opt_uri(data, "proxy_backend"),
            proxy_rewrite=_opt_str(data, "proxy_rewrite"),
            proxy_ws=_bool(data, "proxy_ws"),
            no_autoreload=_bool(data, "no_autoreload"),
        )


@dataclass
class CleanOptions:
    """Options for the clean system."""

    dist: Path | None = None
    cargo: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CleanOptions:
        data = _mapping(data, "clean")
        return cls(dist=_opt_path(data, "dist"), cargo=_bool(data, "cargo"))


@dataclass
class ToolsOptions:
    """Versions of the tools that are downloaded on demand."""

    sass: str | None = None
    wasm_bindgen: str | None = None
    wasm_opt: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ToolsOptions:
        data = _mapping(data, "tools")
        return cls(
            sass=_opt_str(data, "sass"),
            wasm_bindgen=_opt_str(data, "wasm_bindgen"),
            wasm_opt=_opt_str(data, "wasm_opt"),
        )


@dataclass
class ProxyOptions:
    """A proxy definition, read only from the config file."""

    backend: str
    rewrite: str | None = None
    ws: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ProxyOptions:
        data = _mapping(data, "proxy")
        backend = parse_uri(_as_str("backend", _required(data, "backend")))
        return cls(backend=backend, rewrite=_opt_str(data, "rewrite"), ws=_bool(data, "ws"))


@dataclass
class HookOptions:
    """A command to run at a given stage of the build."""

    stage: str
    command: str
    command_arguments: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HookOptions:
        data = _mapping(data, "hook")
        return cls(
            stage=_as_str("stage", _required(data, "stage")),
            command=_as_str("command", _required(data, "command")),
            command_arguments=_str_list(data, "command_arguments"),
        )