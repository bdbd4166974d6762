"""Running user-configured commands at stages of the build."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from trunk.common import TrunkError
from trunk.runtime import BuildConfig

logger = logging.getLogger(__name__)


def _stage_name(stage: Any) -> str:
    value = getattr(stage, "value", stage)
    return str(value)


@dataclass
class _HookHandle:
    """A hook that has been started, or that failed to start."""

    command: str
    process: subprocess.Popen[bytes] | None = None
    error: OSError | None = None

    def wait(self) -> None:
        if self.error is not None or self.process is None:
            raise TrunkError(f"error spawning hook call for {self.command}") from self.error
        try:
            returncode = self.process.wait()
        except OSError as err:
            raise TrunkError(f"error calling hook to {self.command}") from err
        if returncode != 0:
            raise TrunkError(f"hook call to {self.command} returned a bad status")
        logger.info("finished hook %s", self.command)


def _hook_env(cfg: BuildConfig) -> dict[str, str]:
    env = dict(os.environ)
    env.update(
        TRUNK_PROFILE="release" if cfg.release else "debug",
        TRUNK_HTML_FILE=os.fspath(cfg.target),
        TRUNK_SOURCE_DIR=os.fspath(cfg.target_parent),
        TRUNK_STAGING_DIR=os.fspath(cfg.staging_dist),
        TRUNK_DIST_DIR=os.fspath(cfg.final_dist),
        TRUNK_PUBLIC_URL=cfg.public_url,
    )
    return env


def spawn_hooks(cfg: BuildConfig, stage: Any) -> list[_HookHandle]:
    """Start every hook configured for ``stage``; they run concurrently."""
    wanted = _stage_name(stage)
    env = _hook_env(cfg)
    handles = []
    for hook in cfg.hooks:
        if _stage_name(hook.stage) != wanted:
            continue
        logger.info("spawning hook %s for stage %s %s", hook.command, wanted, hook.command_arguments)
        try:
            process = subprocess.Popen([hook.command, *hook.command_arguments], env=env)
        except OSError as err:
            handles.append(_HookHandle(command=hook.command, error=err))
        else:
            handles.append(_HookHandle(command=hook.command, process=process))
    return handles


def wait_hooks(handles: Iterable[_HookHandle]) -> None:
    """Wait for the given hooks, raising on the first that fails."""
    for handle in handles:
        handle.wait()