"""Layered configuration: config file, then environment, then command line."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, TypeVar

from trunk.common import TrunkError
from trunk.options import (
    BuildOptions,
    CleanOptions,
    HookOptions,
    ProxyOptions,
    ServeOptions,
    ToolsOptions,
    WatchOptions,
)
from trunk.runtime import BuildConfig, CleanConfig, ServeConfig, WatchConfig

DEFAULT_CONFIG_FILE = "Trunk.toml"

T = TypeVar("T")


def _quote(path: str | os.PathLike[str]) -> str:
    return f'"{os.fspath(path)}"'


def _first(greater: T | None, lesser: T | None) -> T | None:
    return greater if greater is not None else lesser


def options_from_env(cls: type[T], prefix: str, environ: Mapping[str, str] | None = None) -> T:
    """Build an options model from the variables in ``environ`` that start with ``prefix``.

    The prefix is stripped and the remainder lower-cased to form the field name.
    """
    env = os.environ if environ is None else environ
    data = {
        key[len(prefix):].lower(): value
        for key, value in env.items()
        if key.startswith(prefix)
    }
    return cls.from_mapping(data)  # type: ignore[attr-defined]


def _list_of(cls: type[T], data: Any, key: str) -> list[T] | None:
    if data is None:
        return None
    if not isinstance(data, list):
        raise TrunkError(f"invalid value for `{key}`: expected an array of tables")
    return [cls.from_mapping(item) for item in data]  # type: ignore[attr-defined]


def _section(cls: type[T], data: Any) -> T | None:
    return None if data is None else cls.from_mapping(data)  # type: ignore[attr-defined]


def _canonical_in(path: Path, parent: Path, field_name: str, config_path: Path) -> Path:
    if path.is_absolute():
        return path
    try:
        return (parent / path).resolve(strict=True)
    except (OSError, RuntimeError) as err:
        raise TrunkError(
            f"error taking canonical path to {field_name} {_quote(path)} in {_quote(config_path)}"
        ) from err


@dataclass
class ConfigOpts:
    """All configuration sections, any of which may be absent."""

    build: BuildOptions | None = None
    watch: WatchOptions | None = None
    serve: ServeOptions | None = None
    clean: CleanOptions | None = None
    tools: ToolsOptions | None = None
    proxy: list[ProxyOptions] | None = None
    hooks: list[HookOptions] | None = None

    @classmethod
    def _from_document(cls, data: Mapping[str, Any]) -> ConfigOpts:
        return cls(
            build=_section(BuildOptions, data.get("build")),
            watch=_section(WatchOptions, data.get("watch")),
            serve=_section(ServeOptions, data.get("serve")),
            clean=_section(CleanOptions, data.get("clean")),
            tools=_section(ToolsOptions, data.get("tools")),
            proxy=_list_of(ProxyOptions, data.get("proxy"), "proxy"),
            hooks=_list_of(HookOptions, data.get("hooks"), "hooks"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str] | None = None) -> ConfigOpts:
        """Read a config file; relative paths in it are taken relative to the file.

        A missing file yields an empty configuration.
        """
        config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
        if not config_path.exists():
            return cls()
        if not config_path.is_absolute():
            try:
                config_path = config_path.resolve(strict=True)
            except (OSError, RuntimeError) as err:
                raise TrunkError(
                    f"error getting canonical path to Trunk config file {_quote(config_path)}"
                ) from err
        try:
            raw = config_path.read_bytes()
        except OSError as err:
            raise TrunkError("error reading config file") from err
        try:
            cfg = cls._from_document(tomllib.loads(raw.decode("utf-8")))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, TrunkError) as err:
            raise TrunkError("error reading config file contents as TOML data") from err

        parent = config_path.parent
        if cfg.build is not None:
            if cfg.build.target is not None:
                cfg.build.target = _canonical_in(
                    cfg.build.target, parent, "[build].target", config_path
                )
            if cfg.build.dist is not None and not cfg.build.dist.is_absolute():
                cfg.build.dist = parent / cfg.build.dist
        if cfg.watch is not None:
            if cfg.watch.watch is not None:
                cfg.watch.watch = [
                    _canonical_in(p, parent, "[watch].watch", config_path)
                    for p in cfg.watch.watch
                ]
            if cfg.watch.ignore is not None:
                cfg.watch.ignore = [
                    _canonical_in(p, parent, "[watch].ignore", config_path)
                    for p in cfg.watch.ignore
                ]
        if cfg.clean is not None and cfg.clean.dist is not None:
            if not cfg.clean.dist.is_absolute():
                cfg.clean.dist = parent / cfg.clean.dist
        return cfg

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConfigOpts:
        """Read the ``TRUNK_<SECTION>_<FIELD>`` variables; every section is present."""
        return cls(
            build=options_from_env(BuildOptions, "TRUNK_BUILD_", environ),
            watch=options_from_env(WatchOptions, "TRUNK_WATCH_", environ),
            serve=options_from_env(ServeOptions, "TRUNK_SERVE_", environ),
            clean=options_from_env(CleanOptions, "TRUNK_CLEAN_", environ),
            tools=options_from_env(ToolsOptions, "TRUNK_TOOLS_", environ),
        )

    def merged(self, greater: ConfigOpts) -> ConfigOpts:
        """Return this layer overlaid by ``greater``, whose values take precedence.

        Boolean flags set in either layer stay set; proxies and hooks are not combined.
        """
        return ConfigOpts(
            build=_merge_build(self.build, greater.build),
            watch=_merge_watch(self.watch, greater.watch),
            serve=_merge_serve(self.serve, greater.serve),
            clean=_merge_clean(self.clean, greater.clean),
            tools=_merge_tools(self.tools, greater.tools),
            proxy=_first(greater.proxy, self.proxy),
            hooks=_first(greater.hooks, self.hooks),
        )


def _merge_build(lesser: BuildOptions | None, greater: BuildOptions | None) -> BuildOptions | None:
    if lesser is None or greater is None:
        return _first(greater, lesser)
    return replace(
        greater,
        target=_first(greater.target, lesser.target),
        dist=_first(greater.dist, lesser.dist),
        public_url=_first(greater.public_url, lesser.public_url),
        release=greater.release or lesser.release,
        pattern_preload=_first(greater.pattern_preload, lesser.pattern_preload),
        pattern_script=_first(greater.pattern_script, lesser.pattern_script),
        pattern_params=_first(greater.pattern_params, lesser.pattern_params),
    )


def _merge_watch(lesser: WatchOptions | None, greater: WatchOptions | None) -> WatchOptions | None:
    if lesser is None or greater is None:
        return _first(greater, lesser)
    return replace(
        greater,
        watch=_first(greater.watch, lesser.watch),
        ignore=_first(greater.ignore, lesser.ignore),
    )


def _merge_serve(lesser: ServeOptions | None, greater: ServeOptions | None) -> ServeOptions | None:
    if lesser is None or greater is None:
        return _first(greater, lesser)
    return replace(
        greater,
        proxy_backend=_first(greater.proxy_backend, lesser.proxy_backend),
        proxy_rewrite=_first(greater.proxy_rewrite, lesser.proxy_rewrite),
        address=_first(greater.address, lesser.address),
        port=_first(greater.port, lesser.port),
        proxy_ws=greater.proxy_ws or lesser.proxy_ws,
        no_autoreload=greater.no_autoreload or lesser.no_autoreload,
        open=greater.open or lesser.open,
    )


def _merge_tools(lesser: ToolsOptions | None, greater: ToolsOptions | None) -> ToolsOptions | None:
    if lesser is None or greater is None:
        return _first(greater, lesser)
    return replace(
        greater,
        sass=_first(greater.sass, lesser.sass),
        wasm_bindgen=_first(greater.wasm_bindgen, lesser.wasm_bindgen),
        wasm_opt=_first(greater.wasm_opt, lesser.wasm_opt),
    )


def _merge_clean(lesser: CleanOptions | None, greater: CleanOptions | None) -> CleanOptions | None:
    if lesser is None or greater is None:
        return _first(greater, lesser)
    return replace(
        greater,
        dist=_first(greater.dist, lesser.dist),
        cargo=greater.cargo or lesser.cargo,
    )


def _file_and_env_layers(config: str | os.PathLike[str] | None) -> ConfigOpts:
    file_cfg = ConfigOpts.from_file(config)
    try:
        env_cfg = ConfigOpts.from_env()
    except TrunkError as err:
        raise TrunkError("error reading trunk env var config") from err
    return file_cfg.merged(env_cfg)


def full_config(config: str | os.PathLike[str] | None = None) -> ConfigOpts:
    """Return the configuration from the config file and environment variables."""
    return _file_and_env_layers(config)


def rtc_build(
    cli_build: BuildOptions | None = None,
    config: str | os.PathLike[str] | None = None,
) -> BuildConfig:
    """Resolve the build runtime config from all layers."""
    layer = _file_and_env_layers(config).merged(ConfigOpts(build=cli_build or BuildOptions()))
    return BuildConfig.from_options(
        layer.build or BuildOptions(),
        layer.tools or ToolsOptions(),
        layer.hooks or [],
        False,
    )


def rtc_watch(
    cli_build: BuildOptions | None = None,
    cli_watch: WatchOptions | None = None,
    config: str | os.PathLike[str] | None = None,
) -> WatchConfig:
    """Resolve the watch runtime config from all layers."""
    layer = (
        _file_and_env_layers(config)
        .merged(ConfigOpts(build=cli_build or BuildOptions()))
        .merged(ConfigOpts(watch=cli_watch or WatchOptions()))
    )
    return WatchConfig.from_options(
        layer.build or BuildOptions(),
        layer.watch or WatchOptions(),
        layer.tools or ToolsOptions(),
        layer.hooks or [],
        False,
    )


def rtc_serve(
    cli_build: BuildOptions | None = None,
    cli_watch: WatchOptions | None = None,
    cli_serve: ServeOptions | None = None,
    config: str | os.PathLike[str] | None = None,
) -> ServeConfig:
    """Resolve the serve runtime config from all layers."""
    layer = (
        _file_and_env_layers(config)
        .merged(ConfigOpts(build=cli_build or BuildOptions()))
        .merged(ConfigOpts(watch=cli_watch or WatchOptions()))
        .merged(ConfigOpts(serve=cli_serve or ServeOptions()))
    )
    return ServeConfig.from_options(
        layer.build or BuildOptions(),
        layer.watch or WatchOptions(),
        layer.serve or ServeOptions(),
        layer.tools or ToolsOptions(),
        layer.hooks or [],
        layer.proxy,
    )


def rtc_clean(
    cli_clean: CleanOptions | None = None,
    config: str | os.PathLike[str] | None = None,
) -> CleanConfig:
    """Resolve the clean runtime config from all layers."""
    layer = _file_and_env_layers(config).merged(ConfigOpts(clean=cli_clean or CleanOptions()))
    return CleanConfig.from_options(layer.clean or CleanOptions())