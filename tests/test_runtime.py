import ipaddress
from pathlib import Path

import pytest

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
from trunk.runtime import (
    DIST_DIR,
    STAGE_DIR,
    BuildConfig,
    CleanConfig,
    ServeConfig,
    WatchConfig,
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    (tmp_path / "index.html").write_text("<html></html>")
    monkeypatch.chdir(tmp_path)
    return tmp_path.resolve()


def test_build_defaults(project):
    cfg = BuildConfig.from_options(BuildOptions(), ToolsOptions(), [], False)
    assert cfg.target == project / "index.html"
    assert cfg.target_parent == project
    assert cfg.final_dist == project / DIST_DIR
    assert cfg.final_dist.is_dir()
    assert cfg.staging_dist == cfg.final_dist / STAGE_DIR
    assert cfg.public_url == "/"
    assert cfg.release is False
    assert cfg.inject_autoloader is False


def test_build_carries_options(project):
    hooks = [HookOptions(stage="pre_build", command="echo")]
    tools = ToolsOptions(sass="1.0")
    opts = BuildOptions(
        release=True,
        public_url="/app/",
        pattern_script="{base}",
        pattern_params={"a": "b"},
    )
    cfg = BuildConfig.from_options(opts, tools, hooks, True)
    assert cfg.release is True
    assert cfg.public_url == "/app/"
    assert cfg.pattern_script == "{base}"
    assert cfg.pattern_params == {"a": "b"}
    assert cfg.hooks == hooks
    assert cfg.tools == tools
    assert cfg.inject_autoloader is True


def test_build_missing_target(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(TrunkError) as info:
        BuildConfig.from_options(BuildOptions(), ToolsOptions(), [], False)
    assert str(info.value) == 'error getting canonical path to source HTML file "index.html"'


def test_build_explicit_dist_created(project):
    opts = BuildOptions(dist=Path("out"))
    cfg = BuildConfig.from_options(opts, ToolsOptions(), [], False)
    assert cfg.final_dist == project / "out"
    assert cfg.final_dist.is_dir()
    assert cfg.staging_dist.parent == cfg.final_dist


def test_build_dist_parent_missing(project):
    bad = project / "missing" / "out"
    with pytest.raises(TrunkError, match="error creating final dist directory"):
        BuildConfig.from_options(BuildOptions(dist=bad), ToolsOptions(), [], False)


def test_watch_defaults(project):
    cfg = WatchConfig.from_options(BuildOptions(), WatchOptions(), ToolsOptions(), [], False)
    assert cfg.paths == [cfg.build.target_parent]
    assert cfg.ignored_paths == [cfg.build.final_dist]


def test_watch_paths_canonical(project):
    (project / "src").mkdir()
    (project / "skip.txt").write_text("")
    opts = WatchOptions(watch=[Path("src")], ignore=[Path("skip.txt")])
    cfg = WatchConfig.from_options(BuildOptions(), opts, ToolsOptions(), [], False)
    assert cfg.paths == [project / "src"]
    assert cfg.ignored_paths == [project / "skip.txt", cfg.build.final_dist]


def test_watch_invalid_path(project):
    opts = WatchOptions(watch=[Path("fake-dir")])
    with pytest.raises(TrunkError) as info:
        WatchConfig.from_options(BuildOptions(), opts, ToolsOptions(), [], False)
    assert str(info.value) == 'invalid watch path provided: "fake-dir"'


def test_watch_invalid_ignore(project):
    opts = WatchOptions(ignore=[Path("fake.html")])
    with pytest.raises(TrunkError) as info:
        WatchConfig.from_options(BuildOptions(), opts, ToolsOptions(), [], False)
    assert str(info.value) == 'invalid ignore path provided: "fake.html"'


def test_serve_defaults(project):
    cfg = ServeConfig.from_options(
        BuildOptions(), WatchOptions(), ServeOptions(), ToolsOptions(), [], None
    )
    assert cfg.address == ipaddress.IPv4Address("127.0.0.1")
    assert cfg.port == 8080
    assert cfg.open is False
    assert cfg.proxies is None
    assert cfg.watch.build.inject_autoloader is True


def test_serve_no_autoreload_and_overrides(project):
    proxies = [ProxyOptions(backend="http://localhost:9000/api")]
    opts = ServeOptions(
        address=ipaddress.ip_address("0.0.0.0"),
        port=3000,
        open=True,
        proxy_backend="http://localhost:9000",
        proxy_ws=True,
        no_autoreload=True,
    )
    cfg = ServeConfig.from_options(
        BuildOptions(), WatchOptions(), opts, ToolsOptions(), [], proxies
    )
    assert cfg.watch.build.inject_autoloader is False
    assert cfg.no_autoreload is True
    assert cfg.address == ipaddress.ip_address("0.0.0.0")
    assert cfg.port == 3000
    assert cfg.proxy_backend == "http://localhost:9000"
    assert cfg.proxy_ws is True
    assert cfg.proxies == proxies


def test_clean_defaults():
    cfg = CleanConfig.from_options(CleanOptions())
    assert cfg.dist == Path(DIST_DIR)
    assert cfg.cargo is False


def test_clean_overrides():
    cfg = CleanConfig.from_options(CleanOptions(dist=Path("out"), cargo=True))
    assert cfg.dist == Path("out")
    assert cfg.cargo is True