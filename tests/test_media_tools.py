"""Tests for media library tools."""

import pytest

from app.core.tooling import GHLToolError, ToolInputError
from conftest import LOCATION_ID, fail, ok
from media_tools import MediaTools


@pytest.fixture
def media(client):
    return MediaTools(client)


def by_type(files_response, folders_response):
    def responder(call):
        return files_response if call.params["type"] == "file" else folders_response
    return responder


class TestGetMediaFiles:
    async def test_hybrid_view_lists_files_and_folders(self, media, client):
        client.responder = by_type(
            ok({"files": [{"_id": "f1"}, {"_id": "f2"}], "total": 2}),
            ok({"files": [{"_id": "d1"}], "total": 1}),
        )

        result = await media.execute_tool("get_media_files", {})

        assert sorted(call.params["type"] for call in client.calls) == ["file", "folder"]
        for call in client.calls:
            assert call.endpoint == "/medias/files"
            assert call.params["altId"] == LOCATION_ID
            assert call.params["altType"] == "location"
            assert call.params["sortBy"] == "createdAt"
            assert call.params["sortOrder"] == "desc"
            assert call.params["limit"] == 10
            assert call.params["offset"] == 0
        assert result["files"] == [{"_id": "f1"}, {"_id": "f2"}]
        assert result["folders"] == [{"_id": "d1"}]
        assert result["message"] == "Retrieved 2 files and 1 folders"

    async def test_hybrid_view_fails_when_either_listing_fails(self, media, client):
        client.responder = by_type(ok({"files": []}), fail(500, "folders unavailable"))

        with pytest.raises(GHLToolError, match="folders unavailable"):
            await media.execute_tool("get_media_files", {})

    async def test_query_searches_files_only(self, media, client):
        client.queue(ok({"files": [{"_id": "f1"}], "total": 1}))

        result = await media.execute_tool("get_media_files", {"query": "logo"})

        assert len(client.calls) == 1
        assert client.last.params["type"] == "file"
        assert client.last.params["query"] == "logo"
        assert "folders" not in result
        assert result["message"] == 'Found 1 files matching "logo"'

    async def test_type_filter(self, media, client):
        client.queue(ok({"files": [{"_id": "d1"}, {"_id": "d2"}], "total": 2}))

        result = await media.execute_tool("get_media_files", {"type": "folder", "parentId": "root"})

        assert client.last.params["type"] == "folder"
        assert client.last.params["parentId"] == "root"
        assert result["folders"] == [{"_id": "d1"}, {"_id": "d2"}]
        assert result["total"] == 2


class TestUploadAndDelete:
    async def test_hosted_upload_requires_url(self, media, client):
        with pytest.raises(ToolInputError, match="fileUrl is required"):
            await media.execute_tool("upload_media_file", {"hosted": True})
        assert client.calls == []

    async def test_direct_upload_requires_file(self, media):
        with pytest.raises(ToolInputError, match="file is required"):
            await media.execute_tool("upload_media_file", {"name": "logo.png"})

    async def test_hosted_upload(self, media, client):
        client.queue(ok({"fileId": "f9", "url": "https://cdn.example.com/f9.png"}))

        result = await media.execute_tool("upload_media_file", {
            "hosted": True,
            "fileUrl": "https://example.com/logo.png",
            "contentType": "image/png",
        })

        assert client.last.endpoint == "/medias/upload-file"
        assert client.last.json_body["altId"] == LOCATION_ID
        assert client.last.json_body["fileUrl"] == "https://example.com/logo.png"
        assert result["fileId"] == "f9"

    async def test_delete(self, media, client):
        result = await media.execute_tool("delete_media_file", {"id": "f1"})

        assert client.last.method == "DELETE"
        assert client.last.endpoint == "/medias/f1"
        assert client.last.params == {"altType": "location", "altId": LOCATION_ID}
        assert result["message"] == "Media file/folder deleted successfully"
