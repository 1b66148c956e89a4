"""
OpenAPI drafting through Google Gemini.

Optional collaborator of the analysis pipeline: it turns detected endpoints
(or a live API response sample) into an OpenAPI 3.0 YAML draft.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

import google.genai as genai
import requests
from google.genai import types

from .errors import GeneratorNotConfiguredError
from .prompts import CONNECTION_TEST_PROMPT, format_endpoints_prompt, format_live_api_prompt
from .schemas import (
    AnalyzeApiMetadata,
    AnalyzeApiResponse,
    DetectedPath,
    Endpoint,
)

_FENCE_OPEN_RE = re.compile(r"^```(?:ya?ml)?\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```$")
_SPEC_START_RE = re.compile(r"(openapi|swagger):[\s\S]*", re.IGNORECASE)

LIVE_FETCH_TIMEOUT = 15  # seconds


def extract_openapi_spec(generated_text: str) -> str:
    """Strip Markdown fences and any chatter before the `openapi:` key"""
    spec = (generated_text or "").strip()
    spec = _FENCE_OPEN_RE.sub("", spec)
    spec = _FENCE_CLOSE_RE.sub("", spec)
    spec = spec.strip()

    if not spec.startswith("openapi:") and not spec.startswith("swagger:"):
        logging.getLogger("OpenApiGenerator").warning(
            "Generated spec does not start with openapi: or swagger:, attempting to find it in text"
        )
        match = _SPEC_START_RE.search(spec)
        if match:
            spec = match.group(0)

    return spec


class OpenApiGenerator:
    """
    Thin Gemini wrapper for OpenAPI drafting.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash",
                 client: Optional[object] = None):
        """
        Args:
            api_key: Gemini API key; without one every call raises GeneratorNotConfiguredError
            model: Gemini model name
            client: Pre-built genai client (tests inject a fake here)
        """
        self.model = model
        self.logger = logging.getLogger("OpenApiGenerator")

        if client is not None:
            self.client = client
        elif api_key:
            self.client = genai.Client(api_key=api_key)
            self.logger.info("OpenApiGenerator initialized with API key")
        else:
            self.client = None
            self.logger.warning("OpenApiGenerator initialized without API key - OpenAPI drafting is disabled")

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _require_client(self):
        if self.client is None:
            raise GeneratorNotConfiguredError(
                "Gemini API key not configured. Please set GOOGLE_API_KEY or GEMINI_API_KEY."
            )
        return self.client

    def _generate(self, prompt: str) -> str:
        client = self._require_client()
        config = types.GenerateContentConfig(temperature=0.2)
        response = client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return response.text or ""

    async def generate_from_endpoints(self, endpoints: Sequence[Endpoint],
                                      detected_paths: Sequence[DetectedPath],
                                      project_name: str = "API Project") -> str:
        """
        Draft an OpenAPI document from statically detected endpoints.

        Returns:
            OpenAPI YAML text
        """
        self._require_client()
        self.logger.info(f"Generating OpenAPI spec from {len(endpoints)} detected endpoints")

        endpoints_list = "\n".join(
            f"  {e.method} {e.route_path} ({e.file}:{e.line})" for e in endpoints
        )
        frameworks = ", ".join(p.framework for p in detected_paths if p.framework)
        prompt = format_endpoints_prompt(
            project_name=project_name,
            frameworks=frameworks,
            detected_paths=", ".join(p.relative_path for p in detected_paths),
            endpoints_list=endpoints_list,
            endpoint_count=len(endpoints),
        )

        generated = await asyncio.to_thread(self._generate, prompt)
        self.logger.info("OpenAPI spec generated successfully from endpoints")
        return extract_openapi_spec(generated)

    def _fetch_sample(self, api_url: str, method: str, headers: Dict[str, str]) -> str:
        response = requests.request(method, api_url, headers=headers, timeout=LIVE_FETCH_TIMEOUT)
        return response.text

    async def analyze_live_api(self, api_url: str, method: str = "GET",
                               headers: Optional[Dict[str, str]] = None) -> AnalyzeApiResponse:
        """Fetch a response sample from a running API and draft its OpenAPI document"""
        self._require_client()
        self.logger.info(f"Analyzing API: {api_url}")

        api_response, api_error = "", ""
        try:
            api_response = await asyncio.to_thread(self._fetch_sample, api_url, method, headers or {})
            self.logger.info(f"Fetched API response: {api_response[:200]}...")
        except requests.RequestException as e:
            # An unreachable API still gets a draft inferred from its URL
            api_error = f"Failed to fetch API: {e}"
            self.logger.warning(api_error)

        prompt = format_live_api_prompt(api_url, method, api_response, api_error)
        generated = await asyncio.to_thread(self._generate, prompt)

        return AnalyzeApiResponse(
            openapi_spec=extract_openapi_spec(generated),
            metadata=AnalyzeApiMetadata(
                analyzed_url=api_url,
                generated_at=datetime.now(timezone.utc).isoformat(),
                model=self.model,
            ),
        )

    async def test_connection(self) -> bool:
        if self.client is None:
            return False
        try:
            text = await asyncio.to_thread(self._generate, CONNECTION_TEST_PROMPT)
        except Exception as e:  # SDK raises a variety of transport and API errors
            self.logger.error(f"Gemini API connection test failed: {e}")
            return False
        return len(text) > 0


__all__ = ['OpenApiGenerator', 'extract_openapi_spec']
