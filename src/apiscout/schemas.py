"""apiscout schemas

Detection results, handles and the request/response shapes of the HTTP api.
Python attributes are snake_case; JSON keeps the camelCase names the
importer UI consumes.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict
from enum import Enum
from datetime import datetime, timezone


# ===== Enums =====

class PathKind(str, Enum):
    """Category of a detected API directory"""
    API = "api"
    ROUTES = "routes"
    CONTROLLERS = "controllers"
    HANDLERS = "handlers"
    ENDPOINTS = "endpoints"


class ProjectSource(str, Enum):
    """Where a materialized project came from"""
    ARCHIVE = "archive"
    REMOTE = "remote"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ===== Detection Schemas =====

class DetectedPath(_WireModel):
    """A directory judged likely to contain API-handling code"""
    relative_path: str = Field(..., alias="path")
    kind: PathKind = Field(..., alias="type")
    confidence: float = Field(..., ge=0.0, le=1.0)
    files: List[str] = Field(default_factory=list)
    framework: Optional[str] = None


class Endpoint(_WireModel):
    """One discovered route declaration"""
    method: str
    route_path: str = Field(..., alias="path")
    file: str
    line: int = Field(..., ge=1)


class AnalysisSummary(_WireModel):
    """Tally of endpoints by method and by first path segment"""
    total_endpoints: int = Field(0, alias="totalEndpoints")
    by_method: Dict[str, int] = Field(default_factory=dict, alias="byMethod")
    by_path: Dict[str, int] = Field(default_factory=dict, alias="byPath")


# ===== Handle Schemas =====

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectHandle(BaseModel):
    """Registry record for one materialized project"""
    handle_id: str
    root_path: str
    storage_path: str
    source: ProjectSource = ProjectSource.ARCHIVE
    created_at: datetime = Field(default_factory=_utcnow)
    last_accessed: datetime = Field(default_factory=_utcnow)


# ===== Request/Response Schemas =====

class ImportResponse(_WireModel):
    """Returned by both upload and remote import"""
    upload_id: str = Field(..., alias="uploadId")
    extracted_path: str = Field(..., alias="extractedPath")
    detected_paths: List[DetectedPath] = Field(default_factory=list, alias="detectedPaths")
    total_files: int = Field(0, alias="totalFiles")


class GeminiMetadata(_WireModel):
    generated_at: str = Field(..., alias="generatedAt")
    model: str


class AnalyzeResponse(_WireModel):
    """Full analysis of a previously imported project"""
    detected_paths: List[DetectedPath] = Field(default_factory=list, alias="detectedPaths")
    endpoints: List[Endpoint] = Field(default_factory=list)
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    openapi_spec: Optional[str] = Field(None, alias="openApiSpec")
    gemini_metadata: Optional[GeminiMetadata] = Field(None, alias="geminiMetadata")


class GitHubImportRequest(BaseModel):
    """Body of the remote import endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    repo_url: Optional[str] = Field(None, alias="repoUrl")
    branch: Optional[str] = "main"
    path: Optional[str] = None


class AnalyzeApiRequest(BaseModel):
    """Body of the live API analysis endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    api_url: Optional[str] = Field(None, alias="apiUrl")
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)


class AnalyzeApiMetadata(_WireModel):
    analyzed_url: str = Field(..., alias="analyzedUrl")
    generated_at: str = Field(..., alias="generatedAt")
    model: str


class AnalyzeApiResponse(_WireModel):
    openapi_spec: str = Field(..., alias="openApiSpec")
    metadata: AnalyzeApiMetadata


class ErrorResponse(BaseModel):
    """Error response schema"""
    error: str
    message: Optional[str] = None
    reason: Optional[str] = None


# ===== Export =====

__all__ = [
    # Enums
    'PathKind',
    'ProjectSource',

    # Detection schemas
    'DetectedPath',
    'Endpoint',
    'AnalysisSummary',

    # Handles
    'ProjectHandle',

    # Request/Response schemas
    'ImportResponse',
    'GeminiMetadata',
    'AnalyzeResponse',
    'GitHubImportRequest',
    'AnalyzeApiRequest',
    'AnalyzeApiMetadata',
    'AnalyzeApiResponse',
    'ErrorResponse',
]
