"""Runtime configuration resolved from the layered option models."""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass, field
from pathlib import Path

from trunk.common import TrunkError
from trunk.options import (
    BuildOptions,
    CleanOptions,
    HookOptions,
    IPAddress,
    ProxyOptions,
    ServeOptions,
    ToolsOptions,
    WatchOptions,
)

DIST_DIR = "dist"
"""Default name of the directory that receives final build artifacts."""

STAGE_DIR = ".stage"
"""Name of the directory used to stage artifacts during an active build."""

DEFAULT_TARGET = "index.html"
DEFAULT_PUBLIC_URL = "/"
DEFAULT_ADDRESS = ipaddress.IPv4Address("127.0.0.1")
DEFAULT_PORT = 8080


def _quote(path: str | os.PathLike[str]) -> str:
    return f'"{os.fspath(path)}"'


def _canonical(path: Path, message: str) -> Path:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError) as err:
        raise TrunkError(message) from err


@dataclass
class BuildConfig:
    """Runtime config for the build system."""

    target: Path
    target_parent: Path
    release: bool
    public_url: str
    final_dist: Path
    staging_dist: Path
    tools: ToolsOptions = field(default_factory=ToolsOptions)
    hooks: list[HookOptions] = field(default_factory=list)
    inject_autoloader: bool = False
    pattern_script: str | None = None
    pattern_preload: str | None = None
    pattern_params: dict[str, str] | None = None

    @classmethod
    def from_options(
        cls,
        opts: BuildOptions,
        tools: ToolsOptions,
        hooks: list[HookOptions],
        inject_autoloader: bool,
    ) -> BuildConfig:
        """Resolve paths and defaults; creates the final dist directory if missing."""
        pre_target = Path(opts.target) if opts.target is not None else Path(DEFAULT_TARGET)
        target = _canonical(
            pre_target,
            f"error getting canonical path to source HTML file {_quote(pre_target)}",
        )
        target_parent = target.parent

        final_dist = Path(opts.dist) if opts.dist is not None else target_parent / DIST_DIR
        if not final_dist.exists():
            try:
                final_dist.mkdir()
            except OSError as err:
                raise TrunkError(
                    f"error creating final dist directory {_quote(final_dist)}"
                ) from err
        final_dist = _canonical(final_dist, "error taking canonical path to dist dir")

        return cls(
            target=target,
            target_parent=target_parent,
            release=opts.release,
            public_url=opts.public_url if opts.public_url is not None else DEFAULT_PUBLIC_URL,
            final_dist=final_dist,
            staging_dist=final_dist / STAGE_DIR,
            tools=tools,
            hooks=list(hooks),
            inject_autoloader=inject_autoloader,
            pattern_script=opts.pattern_script,
            pattern_preload=opts.pattern_preload,
            pattern_params=opts.pattern_params,
        )


@dataclass
class WatchConfig:
    """Runtime config for the watch system."""

    build: BuildConfig
    paths: list[Path]
    ignored_paths: list[Path]

    @classmethod
    def from_options(
        cls,
        build_opts: BuildOptions,
        opts: WatchOptions,
        tools: ToolsOptions,
        hooks: list[HookOptions],
        inject_autoloader: bool,
    ) -> WatchConfig:
        """Resolve watch and ignore paths; the final dist dir is always ignored."""
        build = BuildConfig.from_options(build_opts, tools, hooks, inject_autoloader)

        paths = [
            _canonical(Path(path), f"invalid watch path provided: {_quote(path)}")
            for path in opts.watch or []
        ]
        if not paths:
            paths.append(build.target_parent)

        ignored_paths = [
            _canonical(Path(path), f"invalid ignore path provided: {_quote(path)}")
            for path in opts.ignore or []
        ]
        ignored_paths.append(build.final_dist)

        return cls(build=build, paths=paths, ignored_paths=ignored_paths)


@dataclass
class ServeConfig:
    """Runtime config for the serve system."""

    watch: WatchConfig
    address: IPAddress = DEFAULT_ADDRESS
    port: int = DEFAULT_PORT
    open: bool = False
    proxy_backend: str | None = None
    proxy_rewrite: str | None = None
    proxy_ws: bool = False
    proxies: list[ProxyOptions] | None = None
    no_autoreload: bool = False

    @classmethod
    def from_options(
        cls,
        build_opts: BuildOptions,
        watch_opts: WatchOptions,
        opts: ServeOptions,
        tools: ToolsOptions,
        hooks: list[HookOptions],
        proxies: list[ProxyOptions] | None,
    ) -> ServeConfig:
        """Resolve the serve config; the autoloader is injected unless auto-reload is off."""
        watch = WatchConfig.from_options(
            build_opts, watch_opts, tools, hooks, not opts.no_autoreload
        )
        return cls(
            watch=watch,
            address=opts.address if opts.address is not None else DEFAULT_ADDRESS,
            port=opts.port if opts.port is not None else DEFAULT_PORT,
            open=opts.open,
            proxy_backend=opts.proxy_backend,
            proxy_rewrite=opts.proxy_rewrite,
            proxy_ws=opts.proxy_ws,
            proxies=proxies,
            no_autoreload=opts.no_autoreload,
        )


@dataclass
class CleanConfig:
    """Runtime config for the clean system."""

    dist: Path
    cargo: bool = False

    @classmethod
    def from_options(cls, opts: CleanOptions) -> CleanConfig:
        """Apply the default dist directory."""
        dist = Path(opts.dist) if opts.dist is not None else Path(DIST_DIR)
        return cls(dist=dist, cargo=opts.cargo)