# Shared fixtures: project trees on disk, in-memory ZIPs, an isolated config,
# a fake Gemini client and a TestClient around the FastAPI app.

import io
import types
import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from apiscout.api import create_app
from apiscout.config import ScoutConfig
from apiscout.engine import ApiScoutEngine
from apiscout.openapi import OpenApiGenerator
from apiscout.tools.filesystem_utils import CommandResult


USERS_ROUTE = """const express = require('express');
const router = express.Router();

// list and create users
router.get('/users', listUsers);
router.post('/users', createUser);

module.exports = router;
"""


def write_tree(root: Path, files: dict) -> Path:
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


def build_zip(files: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for rel, content in files.items():
            archive.writestr(rel, content)
    return buffer.getvalue()


def ok_clone(files: dict):
    """Stand-in for GitHubCloner._git_clone that writes `files` into dest"""
    calls = []

    async def fake_git_clone(clone_url, dest, branch):
        calls.append({"url": clone_url, "dest": dest, "branch": branch})
        write_tree(Path(dest), files)
        return CommandResult(command=["git", "clone"], stdout="", stderr="", returncode=0, success=True)

    fake_git_clone.calls = calls
    return fake_git_clone


def failing_clone(stderr: str):
    async def fake_git_clone(clone_url, dest, branch):
        return CommandResult(command=["git", "clone"], stdout="", stderr=stderr, returncode=128, success=False)

    return fake_git_clone


# --- Fake Gemini ---------------------------------------------------------------------------

class FakeModels:
    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return types.SimpleNamespace(text=self.text)


class FakeGenaiClient:
    def __init__(self, text: str = "", error: Exception = None):
        self.models = FakeModels(text, error)


@pytest.fixture
def tree(tmp_path):
    """Returns a writer: tree({"src/api/a.js": "..."}) -> project root"""
    root = tmp_path / "project"
    root.mkdir()

    def _write(files: dict) -> Path:
        return write_tree(root, files)

    return _write


@pytest.fixture
def config(tmp_path):
    return ScoutConfig(
        upload_dir=tmp_path / "uploads",
        clone_dir=tmp_path / "clones",
        gemini_api_key=None,
    )


@pytest.fixture
def engine(config):
    return ApiScoutEngine(config, generator=OpenApiGenerator(api_key=None))


@pytest.fixture
def client(engine):
    app = create_app(engine=engine)
    with TestClient(app) as test_client:
        yield test_client
