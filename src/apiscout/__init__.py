"""apiscout package initializer.

This module ensures environment variables are loaded once at package import time
for all apiscout modules and scripts, without each script needing custom code.
"""

__version__ = "0.1.0"


_APISCOUT_ENV_LOADED: bool = False


def _load_env_once() -> None:
    """Load environment variables once at package import time."""
    global _APISCOUT_ENV_LOADED
    if _APISCOUT_ENV_LOADED:
        return

    from dotenv import load_dotenv
    from pathlib import Path as _Path

    candidates = [
        _Path.cwd() / ".env.development",
        _Path.cwd() / ".env",
    ]
    for _p in candidates:
        if _p.exists():
            load_dotenv(_p)
            break
    else:
        load_dotenv()
    _APISCOUT_ENV_LOADED = True


_load_env_once()

# Main Engine - Primary interface for import and detection
from .engine import ApiScoutEngine
from .config import ScoutConfig, configure_logging

# Detectors
from .detectors import PathDetector, EndpointExtractor, summarize

# Tools
from .tools import FilesystemUtils, ProjectMaterializer, GitHubCloner, parse_github_url

# OpenAPI drafting
from .openapi import OpenApiGenerator

# Errors
from .errors import (
    ApiScoutError,
    InvalidInputError,
    ExtractionError,
    FetchError,
    FetchReason,
    ProjectNotFoundError,
    FileReadError,
    GeneratorNotConfiguredError,
)

# Schemas
from .schemas import (
    DetectedPath,
    Endpoint,
    AnalysisSummary,
    ImportResponse,
    AnalyzeResponse,
    PathKind,
)


# Convenience functions
async def analyze_directory(root_path: str) -> AnalyzeResponse:
    """Detect paths, extract endpoints and summarize a local tree without importing it"""
    fs_utils = FilesystemUtils()
    detected_paths = await PathDetector(fs_utils).detect_api_paths(root_path)
    endpoints = await EndpointExtractor(fs_utils).analyze_endpoints(root_path, detected_paths)
    return AnalyzeResponse(
        detected_paths=detected_paths,
        endpoints=endpoints,
        summary=summarize(endpoints),
    )


# Main exports (plug-and-play)
__all__ = [
    # Main Engine
    'ApiScoutEngine',
    'ScoutConfig',
    'configure_logging',
    'analyze_directory',

    # Detectors
    'PathDetector',
    'EndpointExtractor',
    'summarize',

    # Tools
    'FilesystemUtils',
    'ProjectMaterializer',
    'GitHubCloner',
    'parse_github_url',

    # OpenAPI drafting
    'OpenApiGenerator',

    # Errors
    'ApiScoutError',
    'InvalidInputError',
    'ExtractionError',
    'FetchError',
    'FetchReason',
    'ProjectNotFoundError',
    'FileReadError',
    'GeneratorNotConfiguredError',

    # Schemas
    'DetectedPath',
    'Endpoint',
    'AnalysisSummary',
    'ImportResponse',
    'AnalyzeResponse',
    'PathKind',
]
