"""
Endpoint Extractor - pulls route declarations out of detected source files.

Matching is textual: any `.get('/x'` style call counts, including ones inside
comments or strings. Results are not deduplicated.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Sequence

from ..catalog import HTTP_METHOD_PATTERNS
from ..errors import FileReadError
from ..schemas import DetectedPath, Endpoint
from ..tools.filesystem_utils import FilesystemUtils


def find_line_number(content: str, index: int) -> int:
    return content.count('\n', 0, index) + 1


def extract_endpoints(content: str, file_path: str,
                      patterns: Optional[Dict[str, Pattern[str]]] = None) -> List[Endpoint]:
    """All route declarations in one file, grouped by method then by offset"""
    endpoints: List[Endpoint] = []
    for method, pattern in (patterns or HTTP_METHOD_PATTERNS).items():
        for match in pattern.finditer(content):
            endpoints.append(Endpoint(
                method=method,
                route_path=match.group(1),
                file=file_path,
                line=find_line_number(content, match.start()),
            ))
    return endpoints


class EndpointExtractor:
    """Scans every file of every detected path for route registrations"""

    def __init__(self, fs_utils: Optional[FilesystemUtils] = None):
        self.fs_utils = fs_utils or FilesystemUtils()
        self.logger = logging.getLogger("EndpointExtractor")

    async def analyze_endpoints(self, root_path: Path,
                                detected_paths: Sequence[DetectedPath]) -> List[Endpoint]:
        root = Path(root_path)
        endpoints: List[Endpoint] = []

        for detected in detected_paths:
            # A file listed under two detected paths is scanned twice
            for relative_file in detected.files:
                try:
                    content = await self.fs_utils.read_file(str(root / relative_file))
                except FileReadError as e:
                    self.logger.warning(f"Failed to read file {relative_file}: {e.reason}")
                    continue
                endpoints.extend(extract_endpoints(content, relative_file))

        self.logger.info(f"Analyzed {len(endpoints)} endpoint(s)")
        return endpoints


__all__ = ['EndpointExtractor', 'extract_endpoints', 'find_line_number']
