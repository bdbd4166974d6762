"""Shared helpers: path handling, filesystem utilities and child processes."""

from __future__ import annotations

import functools
import os
import shutil
import stat
import subprocess
from collections.abc import Sequence
from pathlib import Path

BUILDING = "📦"
SUCCESS = "✅"
ERROR = "❌"
SERVER = "📡"

StrPath = str | os.PathLike[str]


class TrunkError(Exception):
    """Raised when a build, configuration or filesystem step fails."""


def _quote(path: StrPath) -> str:
    return f'"{os.fspath(path)}"'


def parse_public_url(val: str) -> str:
    """Ensure a public URL begins and ends with a slash."""
    prefix = "" if val.startswith("/") else "/"
    suffix = "" if val.endswith("/") else "/"
    return f"{prefix}{val}{suffix}"


def path_exists(path: StrPath) -> bool:
    """Return whether ``path`` exists; errors other than "not found" are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as err:
        raise TrunkError(f"error checking for existance of path at {_quote(path)}") from err
    return True


def is_executable(path: StrPath) -> bool:
    """Return whether ``path`` is an existing regular file marked executable."""
    try:
        info = os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as err:
        raise TrunkError(f"error checking file mode for file {_quote(path)}") from err
    if not stat.S_ISREG(info.st_mode):
        return False
    if os.name != "posix":
        return True
    return bool(info.st_mode & stat.S_IXUSR)


def copy_dir_recursive(from_dir: StrPath, to_dir: StrPath) -> None:
    """Copy the contents of ``from_dir`` into ``to_dir``, overwriting existing files."""
    if not path_exists(from_dir):
        raise TrunkError(f"directory can not be copied as it does not exist {_quote(from_dir)}")
    try:
        shutil.copytree(from_dir, to_dir, dirs_exist_ok=True)
    except (OSError, shutil.Error) as err:
        raise TrunkError("error copying directory") from err


def remove_dir_all(from_dir: StrPath) -> None:
    """Recursively delete ``from_dir``; a missing directory is not an error."""
    if not path_exists(from_dir):
        return
    try:
        shutil.rmtree(from_dir)
    except OSError as err:
        raise TrunkError("error removing directory") from err


@functools.cache
def _cwd() -> Path:
    return Path.cwd()


def strip_prefix(target: StrPath) -> Path:
    """Return ``target`` relative to the working directory, or unchanged if outside it."""
    target = Path(target)
    try:
        return target.relative_to(_cwd())
    except ValueError:
        return target


def run_command(name: str, path: StrPath, args: Sequence[StrPath]) -> None:
    """Run a program to completion, raising if it cannot start or exits unsuccessfully."""
    argv = [os.fspath(path), *(os.fspath(arg) for arg in args)]
    try:
        completed = subprocess.run(argv, check=False)
    except OSError as err:
        raise TrunkError(f"error spawning {name} call") from err
    if completed.returncode != 0:
        raise TrunkError(f"{name} call returned a bad status")