from pathlib import Path

import pytest

from apiscout.errors import ExtractionError, FetchError, FetchReason
from apiscout.registry import HandleRegistry
from apiscout.schemas import ProjectSource
from apiscout.tools import ProjectMaterializer

from conftest import USERS_ROUTE, build_zip, failing_clone, ok_clone


@pytest.fixture
def materializer(config):
    return ProjectMaterializer(config, HandleRegistry())


def _leftovers(directory: Path):
    return [p.name for p in directory.iterdir() if not p.name.startswith(".")]


@pytest.mark.asyncio
async def test_archive_is_extracted_and_registered(materializer, config):
    data = build_zip({"src/routes/users.js": USERS_ROUTE, "package.json": "{}"})
    handle_id, root = await materializer.materialize_from_archive(data)

    assert root == config.upload_dir / handle_id
    assert (root / "src" / "routes" / "users.js").read_text() == USERS_ROUTE
    assert handle_id in materializer.registry
    assert await materializer.resolve_handle(handle_id) == root


@pytest.mark.asyncio
async def test_each_archive_gets_a_distinct_handle(materializer):
    data = build_zip({"a.js": ""})
    first, _ = await materializer.materialize_from_archive(data)
    second, _ = await materializer.materialize_from_archive(data)
    assert first != second


@pytest.mark.asyncio
async def test_corrupt_archive_leaves_nothing_behind(materializer, config):
    with pytest.raises(ExtractionError) as exc_info:
        await materializer.materialize_from_archive(b"this is not a zip file")

    assert str(exc_info.value).startswith("ZIP extraction failed")
    assert _leftovers(config.upload_dir) == []
    assert len(materializer.registry) == 0


@pytest.mark.asyncio
async def test_archive_members_cannot_escape_upload_dir(materializer, config, tmp_path):
    data = build_zip({"../../escaped.js": "app.get('/x')", "ok.js": ""})
    handle_id, root = await materializer.materialize_from_archive(data)

    assert not (tmp_path / "escaped.js").exists()
    assert (root / "ok.js").exists()


@pytest.mark.asyncio
async def test_unknown_handle_resolves_under_upload_dir(materializer, config):
    assert await materializer.resolve_handle("never-issued") == config.upload_dir / "never-issued"


@pytest.mark.asyncio
@pytest.mark.parametrize("crafted", ["../etc", "a/b", "..", "a\\b"])
async def test_crafted_handle_never_leaves_upload_dir(materializer, config, crafted):
    resolved = await materializer.resolve_handle(crafted)
    assert resolved.parent == config.upload_dir
    assert not resolved.exists()


@pytest.mark.asyncio
async def test_release_removes_tree_and_handle(materializer):
    handle_id, root = await materializer.materialize_from_archive(build_zip({"a.js": ""}))
    await materializer.release(handle_id)

    assert not root.exists()
    assert handle_id not in materializer.registry


@pytest.mark.asyncio
async def test_release_unknown_handle_is_a_noop(materializer):
    await materializer.release("does-not-exist")
    await materializer.release("../../etc")


@pytest.mark.asyncio
async def test_remote_clone_is_registered(materializer, config, monkeypatch):
    fake = ok_clone({"api/index.js": "app.get('/ping')"})
    monkeypatch.setattr(materializer.cloner, "_git_clone", fake)

    handle_id, root = await materializer.materialize_from_remote("https://github.com/acme/shop", "main")

    assert root == config.clone_dir / handle_id
    assert (root / "api" / "index.js").exists()
    handle = await materializer.registry.get(handle_id)
    assert handle.source == ProjectSource.REMOTE
    assert fake.calls[0]["branch"] == "main"


@pytest.mark.asyncio
async def test_remote_subpath_becomes_root(materializer, config, monkeypatch):
    monkeypatch.setattr(materializer.cloner, "_git_clone", ok_clone({"services/api/routes/a.js": ""}))

    handle_id, root = await materializer.materialize_from_remote(
        "https://github.com/acme/mono", "main", "services/api"
    )
    clone_path = config.clone_dir / handle_id
    assert root.resolve() == (clone_path / "services" / "api").resolve()

    await materializer.release(handle_id)
    assert not clone_path.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("subpath", ["does/not/exist", "../../.."])
async def test_bad_subpath_falls_back_to_clone_root(materializer, config, monkeypatch, subpath):
    monkeypatch.setattr(materializer.cloner, "_git_clone", ok_clone({"a.js": ""}))

    handle_id, root = await materializer.materialize_from_remote("https://github.com/acme/shop", "main", subpath)
    assert root == config.clone_dir / handle_id


@pytest.mark.asyncio
async def test_failed_clone_cleans_up(materializer, config, monkeypatch):
    monkeypatch.setattr(
        materializer.cloner, "_git_clone",
        failing_clone("fatal: unable to access 'https://github.com/a/b/': Could not resolve host: github.com"),
    )

    with pytest.raises(FetchError) as exc_info:
        await materializer.materialize_from_remote("https://github.com/a/b", "main")

    assert exc_info.value.reason == FetchReason.NETWORK_UNREACHABLE
    assert _leftovers(config.clone_dir) == []
    assert len(materializer.registry) == 0
