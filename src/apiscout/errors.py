"""
Error taxonomy for project import and API detection.

Per-file problems (FileReadError) are logged and skipped by the detectors.
Archive, fetch and lookup problems abort the request and are turned into
categorized HTTP responses by the api layer.
"""

from enum import Enum
from typing import Optional


class ApiScoutError(Exception):
    """Base class for all apiscout errors"""


class InvalidInputError(ApiScoutError):
    """A required request field is missing or malformed"""


class ExtractionError(ApiScoutError):
    """An uploaded archive could not be read or unpacked"""


class FetchReason(str, Enum):
    """Why a remote snapshot could not be retrieved"""
    NOT_FOUND = "not_found"
    AUTH_REQUIRED = "auth_required"
    NETWORK_UNREACHABLE = "network_unreachable"
    UNKNOWN = "unknown"


FETCH_MESSAGES = {
    FetchReason.NOT_FOUND: "Repository not found. Please check the URL and make sure the repository exists.",
    FetchReason.AUTH_REQUIRED: "Authentication failed. The repository may be private and require a GitHub token.",
    FetchReason.NETWORK_UNREACHABLE: "Network error. Please check your internet connection.",
}


class FetchError(ApiScoutError):
    """A remote repository snapshot could not be retrieved"""

    def __init__(self, reason: FetchReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = FETCH_MESSAGES.get(reason) or f"GitHub clone failed: {detail}"
        super().__init__(message)


class ProjectNotFoundError(ApiScoutError):
    """A handle resolves to a directory that no longer exists"""

    def __init__(self, handle_id: Optional[str] = None, path: Optional[str] = None):
        self.handle_id = handle_id
        self.path = path
        target = handle_id or path or "project"
        super().__init__(f"Project not found: {target}")


class FileReadError(ApiScoutError):
    """A single source file could not be read"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")


class GeneratorNotConfiguredError(ApiScoutError):
    """OpenAPI drafting was requested but no Gemini API key is configured"""


__all__ = [
    'ApiScoutError',
    'InvalidInputError',
    'ExtractionError',
    'FetchReason',
    'FetchError',
    'ProjectNotFoundError',
    'FileReadError',
    'GeneratorNotConfiguredError',
]
