"""
Filesystem and command utilities used by the importers and detectors.
Provides read-only walking and reading of untrusted project trees.
"""

import asyncio
import logging
import os
import shutil
import subprocess
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..catalog import EXCLUDED_DIRS
from ..errors import FileReadError, ProjectNotFoundError


@dataclass
class CommandResult:
    """Result from an external command execution"""
    command: List[str]
    stdout: str
    stderr: str
    returncode: int
    success: bool


class FilesystemUtils:
    """
    Filesystem helpers for walking and reading project trees.
    """

    def __init__(self, exclude_dirs: Iterable[str] = EXCLUDED_DIRS):
        self.exclude_dirs = frozenset(exclude_dirs)
        self.logger = logging.getLogger("FilesystemUtils")

    # ---------------------------------------------------------------------
    # Filesystem operations
    # ---------------------------------------------------------------------
    async def path_exists(self, path: Path) -> bool:
        return Path(path).exists()

    async def list_files(self, dir_path: Path,
                         extensions: Optional[Sequence[str]] = None) -> List[str]:
        """
        Recursively list regular files beneath dir_path.

        Args:
            dir_path: Directory to walk
            extensions: Optional suffixes to keep (e.g. [".js", ".ts"])

        Returns:
            Absolute file paths in walk order (entries sorted by name per directory)
        """
        return await asyncio.to_thread(self._list_files, dir_path, extensions)

    def _list_files(self, dir_path: Path, extensions: Optional[Sequence[str]]) -> List[str]:
        root = Path(dir_path).absolute()
        if not root.is_dir():
            raise ProjectNotFoundError(path=str(root))

        files: List[str] = []
        suffixes = tuple(extensions) if extensions else None

        def on_error(err: OSError) -> None:
            self.logger.warning(f"Skipping unreadable directory {err.filename}: {err.strerror}")

        # followlinks=False keeps the walk inside the materialized tree
        for current, dirs, names in os.walk(root, onerror=on_error, followlinks=False):
            dirs[:] = sorted(d for d in dirs if d not in self.exclude_dirs)
            for name in sorted(names):
                if suffixes and not name.endswith(suffixes):
                    continue
                full_path = os.path.join(current, name)
                try:
                    if not os.path.isfile(full_path) or os.path.islink(full_path):
                        continue
                except OSError as e:
                    self.logger.warning(f"Skipping {full_path}: {e}")
                    continue
                files.append(full_path)
        return files

    async def read_file(self, path: str) -> str:
        """Read a whole text file, replacing undecodable bytes"""
        return await asyncio.to_thread(self._read_file, path)

    def _read_file(self, path: str) -> str:
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                return f.read()
        except OSError as e:
            raise FileReadError(str(path), e.strerror or str(e)) from e

    async def remove_tree(self, path: Path) -> None:
        """Recursively delete a directory; a missing directory is not an error"""
        target = Path(path)
        if not target.exists():
            return
        await asyncio.to_thread(shutil.rmtree, target)

    # ---------------------------------------------------------------------
    # Command execution
    # ---------------------------------------------------------------------
    async def run_command(self, command: List[str], cwd: Optional[Path] = None,
                          timeout: int = 30,
                          env: Optional[Dict[str, str]] = None) -> CommandResult:
        return await asyncio.to_thread(self._run_command, command, cwd, timeout, env)

    def _run_command(self, command: List[str], cwd: Optional[Path],
                     timeout: int, env: Optional[Dict[str, str]]) -> CommandResult:
        try:
            process = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=cwd,
                env={**os.environ, **(env or {})},
            )
            return CommandResult(
                command=command,
                stdout=process.stdout,
                stderr=process.stderr,
                returncode=process.returncode,
                success=process.returncode == 0,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                returncode=-1,
                success=False,
            )
        except OSError as e:
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"Error running command: {str(e)}",
                returncode=-1,
                success=False,
            )


def relative_path(root: Path, path: str) -> str:
    """POSIX-style path of `path` relative to `root`"""
    return Path(os.path.relpath(path, root)).as_posix()


__all__ = ['FilesystemUtils', 'CommandResult', 'relative_path']
