"""
HTTP routes for project import and API detection.

Every route is a thin shell around ApiScoutEngine: it validates the request,
awaits one engine call and maps the error taxonomy onto status codes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from ..catalog import SUPPORTED_FRAMEWORKS
from ..engine import ApiScoutEngine
from ..errors import (
    ExtractionError,
    FetchError,
    GeneratorNotConfiguredError,
    InvalidInputError,
    ProjectNotFoundError,
)
from ..schemas import (
    AnalyzeApiRequest,
    AnalyzeApiResponse,
    AnalyzeResponse,
    ErrorResponse,
    GitHubImportRequest,
    ImportResponse,
)

logger = logging.getLogger("apiscout.api")

router = APIRouter()

ZIP_CONTENT_TYPES = ("application/zip", "application/x-zip-compressed")


def get_engine(request: Request) -> ApiScoutEngine:
    return request.app.state.engine


def _error(status_code: int, error: str, message: Optional[str] = None,
           reason: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, reason=reason)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _is_zip(upload: UploadFile) -> bool:
    return upload.content_type in ZIP_CONTENT_TYPES or (upload.filename or "").endswith(".zip")


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/upload", response_model=ImportResponse, response_model_exclude_none=True)
async def upload(file: Optional[UploadFile] = File(None),
                 engine: ApiScoutEngine = Depends(get_engine)):
    if file is None:
        return _error(400, "No file uploaded")
    if not _is_zip(file):
        return _error(400, "Only ZIP files are allowed")

    limit = engine.config.max_upload_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        return _error(413, "File too large", f"Upload exceeds the {limit} byte limit")

    logger.info(f"Processing uploaded file: {file.filename}")
    try:
        return await engine.import_archive(data)
    except ExtractionError as e:
        logger.error(f"Upload processing failed: {e}")
        return _error(500, "Failed to process upload", str(e))


@router.post("/import/github", response_model=ImportResponse, response_model_exclude_none=True)
async def import_github(body: GitHubImportRequest,
                        engine: ApiScoutEngine = Depends(get_engine)):
    try:
        return await engine.import_remote(body.repo_url, body.branch, body.path)
    except InvalidInputError as e:
        return _error(400, str(e))
    except FetchError as e:
        logger.error(f"GitHub import failed: {e}")
        return _error(500, "Failed to import from GitHub", str(e), e.reason.value)


@router.post("/analyze/{upload_id}", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze(upload_id: str, engine: ApiScoutEngine = Depends(get_engine)):
    try:
        return await engine.analyze(upload_id)
    except ProjectNotFoundError:
        return _error(
            404,
            "Project not found",
            "The uploaded project has expired or been removed. Please re-upload your project.",
        )


@router.delete("/cleanup/{upload_id}")
async def cleanup(upload_id: str, engine: ApiScoutEngine = Depends(get_engine)):
    await engine.cleanup(upload_id)
    return {"success": True}


@router.post("/analyze-api", response_model=AnalyzeApiResponse)
async def analyze_api(body: AnalyzeApiRequest, engine: ApiScoutEngine = Depends(get_engine)):
    if not body.api_url:
        return _error(400, "apiUrl is required")

    try:
        return await engine.generator.analyze_live_api(body.api_url, body.method, body.headers)
    except GeneratorNotConfiguredError as e:
        return _error(503, "Gemini API key not configured", str(e))
    except Exception as e:  # SDK errors carry no common base class
        logger.error(f"API analysis failed: {e}")
        return _error(500, "Failed to analyze API", str(e))


@router.get("/stats")
async def stats(engine: ApiScoutEngine = Depends(get_engine)):
    return {
        "message": "API Importer Statistics",
        "supportedFormats": ["ZIP"],
        "supportedSources": ["upload", "github"],
        "maxFileSize": f"{engine.config.max_upload_bytes // (1024 * 1024)}MB",
        "supportedFrameworks": list(SUPPORTED_FRAMEWORKS),
        "features": {
            "geminiAnalyzer": engine.generator.configured,
        },
    }


__all__ = ['router', 'get_engine']
