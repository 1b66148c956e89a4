"""
Project materializer - turns an uploaded ZIP or a GitHub repository into a
walkable directory tree addressed by an opaque handle.
"""

import asyncio
import io
import logging
import uuid
import zipfile
from pathlib import Path
from typing import Optional, Tuple

from ..config import ScoutConfig
from ..errors import ExtractionError, FetchError, FetchReason
from ..registry import HandleRegistry
from ..schemas import ProjectHandle, ProjectSource
from .filesystem_utils import FilesystemUtils
from .github import GitHubCloner


def _is_plain_id(handle_id: str) -> bool:
    return bool(handle_id) and "/" not in handle_id and "\\" not in handle_id and handle_id not in (".", "..")


def _extract_zip(data: bytes, dest: Path) -> int:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        bad_member = archive.testzip()
        if bad_member is not None:
            raise zipfile.BadZipFile(f"Bad CRC-32 for file '{bad_member}'")
        # extractall drops absolute prefixes and '..' components from member names
        archive.extractall(dest)
        return len(archive.namelist())


class ProjectMaterializer:
    """
    Owns materialized project trees and the handles that name them.

    Detectors never see handle ids; they receive the resolved root path.
    """

    def __init__(self, config: ScoutConfig, registry: HandleRegistry,
                 fs_utils: Optional[FilesystemUtils] = None,
                 cloner: Optional[GitHubCloner] = None):
        self.config = config
        self.registry = registry
        self.fs_utils = fs_utils or FilesystemUtils()
        self.cloner = cloner or GitHubCloner(
            self.fs_utils, token=config.github_token, timeout=config.clone_timeout
        )
        self.logger = logging.getLogger("ProjectMaterializer")
        config.ensure_dirs()

    async def materialize_from_archive(self, data: bytes) -> Tuple[str, Path]:
        """
        Unpack a ZIP archive into a fresh directory.

        Returns:
            (handle_id, root_path)

        Raises:
            ExtractionError: the archive is corrupt or unreadable
        """
        handle_id = str(uuid.uuid4())
        extract_path = self.config.upload_dir / handle_id

        self.logger.info(f"Extracting ZIP to {extract_path}")
        try:
            extract_path.mkdir(parents=True)
            members = await asyncio.to_thread(_extract_zip, data, extract_path)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError, RuntimeError, ValueError, OSError) as e:
            self.logger.error(f"Failed to extract ZIP: {e}")
            await self.fs_utils.remove_tree(extract_path)
            raise ExtractionError(f"ZIP extraction failed: {e}") from e

        self.logger.info(f"ZIP extracted successfully: {extract_path} ({members} entries)")
        await self.registry.register(ProjectHandle(
            handle_id=handle_id,
            root_path=str(extract_path),
            storage_path=str(extract_path),
            source=ProjectSource.ARCHIVE,
        ))
        return handle_id, extract_path

    async def materialize_from_remote(self, locator: str, ref: Optional[str] = "main",
                                      subpath: Optional[str] = None) -> Tuple[str, Path]:
        """
        Shallow-clone a repository into a fresh directory.

        Args:
            locator: Repository URL (HTTPS or SSH form)
            ref: Branch to fetch; the default branch is used if it does not exist
            subpath: Optional directory inside the snapshot to use as root

        Returns:
            (handle_id, root_path)

        Raises:
            FetchError: the repository could not be retrieved
        """
        handle_id = str(uuid.uuid4())
        clone_path = self.config.clone_dir / handle_id

        try:
            await self.cloner.clone(locator, clone_path, ref)
        except FetchError:
            await self.fs_utils.remove_tree(clone_path)
            raise
        except OSError as e:
            await self.fs_utils.remove_tree(clone_path)
            raise FetchError(FetchReason.UNKNOWN, str(e)) from e

        root_path = clone_path
        if subpath:
            target = self._resolve_subpath(clone_path, subpath)
            if target is not None:
                root_path = target
            else:
                self.logger.warning(f"Target path {subpath} not found, using root")

        await self.registry.register(ProjectHandle(
            handle_id=handle_id,
            root_path=str(root_path),
            storage_path=str(clone_path),
            source=ProjectSource.REMOTE,
        ))
        return handle_id, root_path

    def _resolve_subpath(self, base: Path, subpath: str) -> Optional[Path]:
        base_resolved = base.resolve()
        target = (base / subpath.strip("/")).resolve()
        try:
            target.relative_to(base_resolved)
        except ValueError:
            self.logger.warning(f"Target path {subpath} escapes the repository")
            return None
        return target if target.is_dir() else None

    async def resolve_handle(self, handle_id: str) -> Path:
        """
        Root path for a handle. Unknown handles resolve to the path an upload
        with that id would have had, so callers can still probe for it.
        """
        handle = await self.registry.get(handle_id)
        if handle is not None:
            self.logger.info(f"Upload {handle_id} accessed, last accessed: {handle.last_accessed}")
            return Path(handle.root_path)
        if not _is_plain_id(handle_id):
            # Never let a crafted id point outside the upload directory
            return self.config.upload_dir / "__invalid__"
        return self.config.upload_dir / handle_id

    async def release(self, handle_id: str) -> None:
        """Delete a materialized tree and forget its handle; unknown ids are fine"""
        handle = await self.registry.remove(handle_id)
        if handle is not None:
            targets = [Path(handle.storage_path)]
        elif _is_plain_id(handle_id):
            targets = [self.config.upload_dir / handle_id, self.config.clone_dir / handle_id]
        else:
            targets = []

        for target in targets:
            try:
                await self.fs_utils.remove_tree(target)
            except OSError as e:
                self.logger.warning(f"Failed to cleanup {target}: {e}")
        self.logger.info(f"Cleaned up: {handle_id}, removed from metadata")


__all__ = ['ProjectMaterializer']
