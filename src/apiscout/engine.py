"""
ApiScoutEngine - Main interface for API-surface detection

The ApiScoutEngine ties the import side (materializer + handle registry) to
the detection side (path detector, endpoint extractor, summary). Transport
layers call it with raw bytes, repository URLs and handle ids; it never
exposes filesystem layout decisions to them.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .config import ScoutConfig
from .detectors import EndpointExtractor, PathDetector, summarize
from .errors import GeneratorNotConfiguredError, InvalidInputError, ProjectNotFoundError
from .openapi import OpenApiGenerator
from .registry import HandleRegistry, JsonFileBackend
from .schemas import (
    AnalyzeResponse,
    DetectedPath,
    Endpoint,
    GeminiMetadata,
    ImportResponse,
)
from .tools import FilesystemUtils, ProjectMaterializer, parse_github_url


class ApiScoutEngine:
    def __init__(self, config: Optional[ScoutConfig] = None,
                 registry: Optional[HandleRegistry] = None,
                 fs_utils: Optional[FilesystemUtils] = None,
                 generator: Optional[OpenApiGenerator] = None):
        """
        Initialize ApiScoutEngine

        Args:
            config: Runtime configuration (defaults to ScoutConfig.from_env())
            registry: Handle registry; defaults to one mirrored to config.metadata_file
            fs_utils: Shared filesystem helper
            generator: OpenAPI drafting collaborator; built from config when omitted
        """
        self.config = config or ScoutConfig.from_env()
        self.logger = logging.getLogger("ApiScoutEngine")

        self.config.ensure_dirs()
        self.fs_utils = fs_utils or FilesystemUtils()
        self.registry = registry or HandleRegistry(JsonFileBackend(self.config.metadata_file))

        self.materializer = ProjectMaterializer(self.config, self.registry, self.fs_utils)
        self.path_detector = PathDetector(self.fs_utils)
        self.endpoint_extractor = EndpointExtractor(self.fs_utils)
        self.generator = generator or OpenApiGenerator(
            api_key=self.config.gemini_api_key, model=self.config.gemini_model
        )

    async def import_archive(self, data: bytes) -> ImportResponse:
        """
        Materialize an uploaded ZIP and run path detection on it

        Raises:
            ExtractionError: the archive could not be unpacked
        """
        handle_id, root = await self.materializer.materialize_from_archive(data)
        response = await self._describe_import(handle_id, root)
        self.logger.info(f"Upload processed: {handle_id}, found {len(response.detected_paths)} API paths")
        return response

    async def import_remote(self, repo_url: Optional[str], branch: Optional[str] = "main",
                            path: Optional[str] = None) -> ImportResponse:
        """
        Shallow-clone a GitHub repository and run path detection on it

        Args:
            repo_url: HTTPS or SSH GitHub URL
            branch: Branch to fetch (falls back to the default branch)
            path: Optional subdirectory of the repository to analyze

        Raises:
            InvalidInputError: repo_url is missing or not a GitHub URL
            FetchError: the repository could not be retrieved
        """
        if not repo_url:
            raise InvalidInputError("repoUrl is required")
        locator = parse_github_url(repo_url)
        if locator is None:
            raise InvalidInputError("Invalid GitHub URL")

        self.logger.info(f"Importing from GitHub: {locator.slug}")
        handle_id, root = await self.materializer.materialize_from_remote(repo_url, branch or "main", path)
        response = await self._describe_import(handle_id, root)
        self.logger.info(f"GitHub import complete: {handle_id}, found {len(response.detected_paths)} API paths")
        return response

    async def _describe_import(self, handle_id: str, root: Path) -> ImportResponse:
        detected_paths = await self.path_detector.detect_api_paths(root)
        all_files = await self.fs_utils.list_files(root)
        return ImportResponse(
            upload_id=handle_id,
            extracted_path=str(root),
            detected_paths=detected_paths,
            total_files=len(all_files),
        )

    async def analyze(self, handle_id: str, with_openapi: Optional[bool] = None) -> AnalyzeResponse:
        """
        Full analysis of an imported project: detect, extract, summarize, and
        optionally draft an OpenAPI document.

        Args:
            handle_id: Id returned by an import
            with_openapi: Override config.openapi_on_analyze

        Returns:
            AnalyzeResponse

        Raises:
            ProjectNotFoundError: the handle no longer resolves to a directory
        """
        start_time = time.time()
        root = await self.materializer.resolve_handle(handle_id)
        self.logger.info(f"Analyzing project: {handle_id}")

        if not await self.fs_utils.path_exists(root) or not root.is_dir():
            self.logger.error(f"Project directory not found: {root}")
            raise ProjectNotFoundError(handle_id=handle_id, path=str(root))

        detected_paths = await self.path_detector.detect_api_paths(root)
        endpoints = await self.endpoint_extractor.analyze_endpoints(root, detected_paths)
        summary = summarize(endpoints)

        openapi_spec, gemini_metadata = None, None
        if with_openapi is None:
            with_openapi = self.config.openapi_on_analyze
        if with_openapi and endpoints and self.generator.configured:
            openapi_spec, gemini_metadata = await self._draft_openapi(endpoints, detected_paths, root)

        self.logger.info(f"Analysis complete: {len(endpoints)} endpoints found in {time.time() - start_time:.2f}s")
        return AnalyzeResponse(
            detected_paths=detected_paths,
            endpoints=endpoints,
            summary=summary,
            openapi_spec=openapi_spec,
            gemini_metadata=gemini_metadata,
        )

    async def _draft_openapi(self, endpoints: List[Endpoint], detected_paths: List[DetectedPath], root: Path):
        try:
            spec = await self.generator.generate_from_endpoints(endpoints, detected_paths, project_name=root.name)
        except GeneratorNotConfiguredError:
            return None, None
        except Exception as e:  # the draft is optional; static results still go out
            self.logger.warning(f"Failed to generate OpenAPI spec with Gemini: {e}")
            return None, None

        self.logger.info("✅ OpenAPI spec generated successfully")
        return spec, GeminiMetadata(
            generated_at=datetime.now(timezone.utc).isoformat(),
            model=self.generator.model,
        )

    async def cleanup(self, handle_id: str) -> None:
        """Remove an imported tree; unknown ids are a no-op"""
        self.logger.info(f"Cleaning up: {handle_id}")
        await self.materializer.release(handle_id)


__all__ = ['ApiScoutEngine']
