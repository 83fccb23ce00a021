"""
GitHub Contents API 어댑터 테스트 — base64 본문, sha 낙관적 동시성, 실패 시 SyncError
"""
import httpx
import pytest

from conftest import CONFIGURED, FakeGitHub, make_remote
from recipebox.db.github_sync import COMMIT_PREFIX, GitHubContentStore, SyncError, decode_content, encode_content
from recipebox.models.schemas import SyncSettings

DOC = {"version": "1.0", "recipes": [{"id": "r1", "name": "Crème Brûlée", "category": "desserts"}]}


def test_content_codec_handles_wrapped_lines():
    b64 = encode_content("héllo wörld " * 20)
    wrapped = "\n".join(b64[i:i + 60] for i in range(0, len(b64), 60))
    assert decode_content(wrapped) == "héllo wörld " * 20


class TestRead:
    async def test_decodes_document(self):
        remote = make_remote(FakeGitHub(doc=DOC))
        assert await remote.read_document() == DOC

    async def test_missing_file_is_none(self):
        assert await make_remote(FakeGitHub()).read_document() is None

    async def test_server_error_is_none(self):
        assert await make_remote(FakeGitHub(doc=DOC, fail_get=500)).read_document() is None

    async def test_unconfigured_is_none_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        remote = GitHubContentStore(lambda: SyncSettings(), transport=httpx.MockTransport(handler))
        assert remote.configured is False
        assert await remote.read_document() is None

    async def test_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(404)

        remote = GitHubContentStore(lambda: CONFIGURED, path="data/recipes.json", transport=httpx.MockTransport(handler))
        await remote.read_document()
        req = seen[0]
        assert req.url.path == "/repos/me/recipes/contents/data/recipes.json"
        assert req.url.params["ref"] == "main"
        assert req.headers["Authorization"] == "Bearer tok"


class TestWrite:
    async def test_overwrite_sends_current_sha(self):
        fake = FakeGitHub(doc=DOC)
        new_doc = {"version": "1.0", "recipes": []}
        await make_remote(fake).write_document(new_doc)
        put = fake.puts[0]
        assert put["sha"] == "sha-0"
        assert put["branch"] == "main"
        assert put["message"].startswith(COMMIT_PREFIX)
        assert fake.doc == new_doc

    async def test_first_write_has_no_sha(self):
        fake = FakeGitHub()
        await make_remote(fake).write_document(DOC)
        assert "sha" not in fake.puts[0]
        assert fake.doc == DOC

    async def test_non_ascii_survives(self):
        fake = FakeGitHub()
        await make_remote(fake).write_document(DOC)
        assert fake.doc["recipes"][0]["name"] == "Crème Brûlée"

    async def test_rejected_write_raises_with_status(self):
        fake = FakeGitHub(doc=DOC, fail_put=409)
        with pytest.raises(SyncError) as ei:
            await make_remote(fake).write_document({"version": "1.0", "recipes": []})
        assert ei.value.status == 409
        assert "sha mismatch" in ei.value.body
        assert "409" in str(ei.value)
        assert fake.doc == DOC

    async def test_unconfigured_raises(self):
        remote = make_remote(FakeGitHub(), SyncSettings(githubToken="tok"))
        with pytest.raises(SyncError):
            await remote.write_document(DOC)

    async def test_settings_are_read_per_call(self):
        current = {"s": SyncSettings()}
        fake = FakeGitHub()
        remote = GitHubContentStore(lambda: current["s"], transport=httpx.MockTransport(fake.handler))
        with pytest.raises(SyncError):
            await remote.write_document(DOC)
        current["s"] = CONFIGURED
        await remote.write_document(DOC)
        assert fake.doc == DOC
