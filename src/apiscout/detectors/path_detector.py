"""
Path Detector - ranks directories likely to hold API-handling code

Walks the conventional API directory catalog, scores each hit by name
specificity and size, and sniffs a few files for a web framework. Falls back
to the project root when no conventional directory exists.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..catalog import (
    API_PATH_CATALOG,
    BASE_CONFIDENCE,
    FALLBACK_CONFIDENCE,
    FALLBACK_FILE_LIMIT,
    FILE_COUNT_TIERS,
    FRAMEWORK_PROBE_LIMIT,
    FRAMEWORK_SIGNATURES,
    MAX_CONFIDENCE,
    SOURCE_EXTENSIONS,
    PathPattern,
)
from ..errors import FileReadError
from ..schemas import DetectedPath, PathKind
from ..tools.filesystem_utils import FilesystemUtils, relative_path


def calculate_confidence(pattern: PathPattern, file_count: int) -> float:
    confidence = BASE_CONFIDENCE + pattern.bonus
    for threshold, weight in FILE_COUNT_TIERS:
        if file_count > threshold:
            confidence += weight
    # 0.5 + 0.2 + 0.1 must come out as 0.8
    return round(min(confidence, MAX_CONFIDENCE), 4)


class PathDetector:
    """
    Detects API directories in a materialized project tree.
    """

    def __init__(self, fs_utils: Optional[FilesystemUtils] = None,
                 catalog: Sequence[PathPattern] = API_PATH_CATALOG,
                 extensions: Sequence[str] = SOURCE_EXTENSIONS):
        self.fs_utils = fs_utils or FilesystemUtils()
        self.catalog = tuple(catalog)
        self.extensions = tuple(extensions)
        self.logger = logging.getLogger("PathDetector")

    async def detect_api_paths(self, root_path: Path) -> List[DetectedPath]:
        """
        Produce the ranked list of detected API directories.

        Args:
            root_path: Root of the materialized project

        Returns:
            DetectedPath list sorted by descending confidence (ties keep catalog order)
        """
        root = Path(root_path)
        detected_paths: List[DetectedPath] = []

        self.logger.info(f"Detecting API paths in: {root}")

        for entry in self.catalog:
            full_path = root / entry.pattern
            if not self._is_inside(root, full_path):
                continue

            files = await self.fs_utils.list_files(full_path, self.extensions)
            if not files:
                continue

            detected_paths.append(DetectedPath(
                relative_path=entry.pattern,
                kind=entry.kind,
                confidence=calculate_confidence(entry, len(files)),
                files=[relative_path(root, f) for f in files],
                framework=await self.detect_framework(files),
            ))

        if not detected_paths:
            self.logger.info("No API paths found, scanning root level files...")
            root_files = await self.fs_utils.list_files(root, self.extensions)
            if root_files:
                detected_paths.append(DetectedPath(
                    relative_path=".",
                    kind=PathKind.API,
                    confidence=FALLBACK_CONFIDENCE,
                    files=[relative_path(root, f) for f in root_files[:FALLBACK_FILE_LIMIT]],
                    framework=await self.detect_framework(root_files),
                ))

        self.logger.info(f"Detected {len(detected_paths)} API path(s)")
        # stable: ties keep discovery order
        return sorted(detected_paths, key=lambda p: p.confidence, reverse=True)

    def _is_inside(self, root: Path, candidate: Path) -> bool:
        """True for a directory that, after resolving symlinks, stays under root"""
        if not candidate.is_dir():
            return False
        try:
            candidate.resolve().relative_to(root.resolve())
        except ValueError:
            self.logger.warning(f"Skipping {candidate}: resolves outside the project")
            return False
        return True

    async def detect_framework(self, files: Sequence[str]) -> Optional[str]:
        """Name of the first framework whose signature appears in the first few files"""
        for file_path in files[:FRAMEWORK_PROBE_LIMIT]:
            try:
                content = await self.fs_utils.read_file(file_path)
            except FileReadError as e:
                self.logger.warning(f"Failed to read file for framework detection {file_path}: {e.reason}")
                continue

            for framework, signature in FRAMEWORK_SIGNATURES.items():
                if signature.search(content):
                    return framework

        return None


__all__ = ['PathDetector', 'calculate_confidence']
