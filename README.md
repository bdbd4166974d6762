# trunk

A library for driving the build of a web application bundle: layered
configuration, build-stage hooks and a staged output directory. It has no
third-party dependencies.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

Configuration is assembled from three layers, each one taking precedence over
the one before it:

1. a `Trunk.toml` file (relative paths in it are taken relative to the file
   itself; `[build].target`, `[watch].watch` and `[watch].ignore` entries must
   exist),
2. environment variables with the prefixes `TRUNK_BUILD_`, `TRUNK_WATCH_`,
   `TRUNK_SERVE_`, `TRUNK_CLEAN_` and `TRUNK_TOOLS_` (for example
   `TRUNK_BUILD_RELEASE=true`, `TRUNK_SERVE_PORT=9000`; path lists such as
   `TRUNK_WATCH_IGNORE` are comma separated),
3. options given by the caller.

The option groups are `BuildOptions`, `WatchOptions`, `ServeOptions`,
`CleanOptions`, `ToolsOptions`, `ProxyOptions` and `HookOptions` in
`trunk.options`. Each is a dataclass and can also be created from a plain
mapping with `from_mapping`, which validates the values. `parse_uri` checks
the proxy backend URIs.

`trunk.layers` reads and merges the layers (`ConfigOpts.from_file`,
`ConfigOpts.from_env`, `ConfigOpts.merged`) and resolves them into runtime
configuration:

```python
from trunk.layers import rtc_build
from trunk.options import BuildOptions

cfg = rtc_build(BuildOptions(release=True), None)
print(cfg.target, cfg.final_dist, cfg.public_url)
```

`rtc_watch`, `rtc_serve` and `rtc_clean` produce `WatchConfig`, `ServeConfig`
and `CleanConfig` (see `trunk.runtime`), and `full_config` returns the merged
file and environment layers as a `ConfigOpts`.

Defaults: the target is `index.html`, the output directory is `dist` next to
the target (created if missing), the public URL is `/`, the server address is
`127.0.0.1:8080`, the watched path is the target's directory, and the output
directory is always among the ignored paths. The `release`, `open`,
`no_autoreload`, `proxy_ws` and `cargo` flags can be switched on by any layer
but never switched off by a later one. Proxies and hooks are not combined
across layers: the later layer's list replaces the earlier one.

## Building

`trunk.build.BuildSystem(cfg, pipeline)` runs a build into a staging directory
(`dist/.stage`). `pipeline` is any callable taking no arguments that writes
its output into `cfg.staging_dist` and raises on failure. Only when it
succeeds is the contents of the output directory replaced with the staged
result.

Hooks configured for a stage are started with `trunk.hooks.spawn_hooks(cfg,
stage)` and awaited with `trunk.hooks.wait_hooks(handles)`. Each hook sees
`TRUNK_PROFILE`, `TRUNK_HTML_FILE`, `TRUNK_SOURCE_DIR`, `TRUNK_STAGING_DIR`,
`TRUNK_DIST_DIR` and `TRUNK_PUBLIC_URL` in its environment.

`trunk.common` holds small helpers: `parse_public_url`, `copy_dir_recursive`,
`remove_dir_all`, `path_exists`, `is_executable`, `strip_prefix` and
`run_command`.

Failures are raised as `trunk.common.TrunkError`.

## What it does not do

There is no command-line program, no development server, no file watcher and
no built-in asset pipeline: the `ServeConfig` and `WatchConfig` values are
resolved, but nothing here serves or watches with them, and the HTML and
asset processing that a bundler performs must be supplied as the `pipeline`
callable. Tool versions in `ToolsOptions` are recorded but no tools are
downloaded.