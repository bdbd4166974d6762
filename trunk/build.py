"""The build system: staging, running the pipeline and applying the result."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from trunk.common import BUILDING, ERROR, SUCCESS, TrunkError, remove_dir_all
from trunk.runtime import STAGE_DIR, BuildConfig

logger = logging.getLogger(__name__)

Pipeline = Callable[[], object]


class BuildSystem:
    """Builds an application into a staging area, then moves it into the dist dir.

    ``pipeline`` is called with no arguments once the staging area is ready; it is
    expected to write its output into ``cfg.staging_dist`` and to raise on failure.
    """

    def __init__(self, cfg: BuildConfig, pipeline: Pipeline) -> None:
        self.cfg = cfg
        self.pipeline = pipeline

    def build(self) -> None:
        """Run a full build, logging its outcome."""
        logger.info("%s starting build", BUILDING)
        try:
            self._do_build()
        except Exception as err:
            logger.error("%s error\n%r", ERROR, err)
            raise
        logger.info("%s success", SUCCESS)

    def _do_build(self) -> None:
        try:
            self.cfg.final_dist.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise TrunkError("error creating build environment directory: dist") from err

        try:
            self._prepare_staging_dist()
        except TrunkError as err:
            raise TrunkError("error preparing build environment") from err

        try:
            self.pipeline()
        except Exception as err:
            raise TrunkError("error from HTML pipeline") from err

        try:
            self._finalize_dist()
        except TrunkError as err:
            raise TrunkError("error applying built distribution") from err

    def _prepare_staging_dist(self) -> None:
        staging = self.cfg.staging_dist
        try:
            remove_dir_all(staging)
        except TrunkError as err:
            raise TrunkError("error cleaning staging dist dir") from err
        try:
            staging.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise TrunkError(
                "error creating build environment directory: staging dist dir"
            ) from err

    def _finalize_dist(self) -> None:
        logger.info("applying new distribution")
        self._clean_final()
        self._move_stage_to_final()
        try:
            self.cfg.staging_dist.rmdir()
        except OSError as err:
            raise TrunkError("error deleting staging dist dir") from err

    def _move_stage_to_final(self) -> None:
        try:
            entries = list(os.scandir(self.cfg.staging_dist))
        except OSError as err:
            raise TrunkError("error reading staging dist dir") from err
        for entry in entries:
            target = self.cfg.final_dist / entry.name
            try:
                os.rename(entry.path, target)
            except OSError as err:
                raise TrunkError(f'error moving "{entry.path}" to "{target}"') from err

    def _clean_final(self) -> None:
        try:
            entries = list(os.scandir(self.cfg.final_dist))
        except OSError as err:
            raise TrunkError("error reading final dist dir") from err
        for entry in entries:
            if entry.name == STAGE_DIR:
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    remove_dir_all(entry.path)
                elif entry.is_symlink() or entry.is_file(follow_symlinks=False):
                    os.remove(entry.path)
            except (OSError, TrunkError) as err:
                raise TrunkError("error cleaning final dist") from err