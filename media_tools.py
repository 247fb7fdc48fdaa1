"""
GoHighLevel Media Library Tools for the GHL MCP Server

List, upload and delete files and folders of the media library.

get_media_files picks one of three views:
    query given    -> files matching the query
    type given     -> only files or only folders
    neither        -> hybrid view, files and folders fetched concurrently

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires medias.readonly and medias.write scopes.
"""

import asyncio
import logging
from typing import Optional, Literal

from pydantic import BaseModel, Field, model_validator

from app.core.tooling import ToolModule, ToolSpec, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class AltScoped(BaseModel):
    altType: Optional[Literal["location", "agency"]] = Field(None, description="Context type (default: location)")
    altId: Optional[str] = Field(None, description="Location or Agency ID (uses default if not provided)")


class GetMediaFilesParams(AltScoped):
    query: Optional[str] = Field(None, description='Search files by name (e.g., "logo"). Searches files only.')
    parentId: Optional[str] = Field(None, description="Folder ID to list contents within")
    type: Optional[Literal["file", "folder"]] = Field(
        None, description="Filter by type. If omitted, returns BOTH files and folders (hybrid view)."
    )
    limit: Optional[int] = Field(None, ge=1, le=100, description="Results per type (default: 10, max: 100)")
    offset: Optional[int] = Field(None, ge=0, description="Results to skip for pagination (default: 0)")
    sortBy: Optional[str] = Field(None, description="Sort field: createdAt, name, size (default: createdAt)")
    sortOrder: Optional[Literal["asc", "desc"]] = Field(None, description="Sort direction (default: desc)")


class UploadMediaFileParams(AltScoped):
    fileUrl: Optional[str] = Field(None, description="URL of a hosted file (required if hosted=true)")
    hosted: Optional[bool] = Field(None, description="Set to true when providing a fileUrl (default: false)")
    contentType: Optional[str] = Field(
        None, description='MIME type (e.g., "image/png", "application/pdf"). Needed for hosted URLs.'
    )
    name: Optional[str] = Field(None, description='Custom file name (e.g., "logo.png")')
    file: Optional[str] = Field(None, description="File data for direct upload")
    parentId: Optional[str] = Field(None, description="Folder ID to upload into")

    @model_validator(mode="after")
    def check_source(self):
        if self.hosted and not self.fileUrl:
            raise ValueError("fileUrl is required when hosted=true")
        if not self.hosted and not self.file:
            raise ValueError("file is required when hosted=false or not specified")
        return self


class DeleteMediaFileParams(AltScoped):
    id: str = Field(description="ID of the file or folder to delete")


# =============================================================================
# Tool Module
# =============================================================================

class MediaTools(ToolModule):
    family = "media"
    subject = "media file"
    lookup = "get_media_files"

    def build_specs(self):
        alt = {"altType": "location", "altId": lambda values: self.location_id}
        return [
            ToolSpec(
                name="get_media_files",
                description="List or search media library files and folders. Without query or type, "
                            "files and folders are both returned.",
                params=GetMediaFilesParams,
                path="/medias/files",
                defaults={**alt, "sortBy": "createdAt", "sortOrder": "desc", "limit": 10, "offset": 0},
                handler=self._get_media_files,
            ),
            ToolSpec(
                name="upload_media_file",
                description="Upload a file to the media library, either from a hosted URL (hosted=true, fileUrl) "
                            "or as direct file data",
                params=UploadMediaFileParams,
                method="POST", path="/medias/upload-file",
                defaults=alt,
                reshape=lambda data, args: {
                    "success": True,
                    "fileId": data.get("fileId"),
                    "url": data.get("url"),
                    "message": f"File uploaded successfully with ID: {data.get('fileId', 'unknown')}",
                },
                hints=(hint((400, 422), "Upload rejected.\nFor hosted uploads pass a publicly reachable fileUrl "
                                        "and its contentType (e.g. image/png)."),
                       hint(413, "File too large for the media library."),),
            ),
            ToolSpec(
                name="delete_media_file",
                description="Delete a media file or folder",
                params=DeleteMediaFileParams,
                method="DELETE", path="/medias/{id}",
                defaults=alt,
                message="Media file/folder deleted successfully",
            ),
        ]

    async def _list(self, spec: ToolSpec, values: dict, params: dict):
        data = await self.send(spec, values, "GET", spec.path, params=params)
        items = data.get("files") if isinstance(data, dict) else None
        return (items if isinstance(items, list) else []), (data.get("total") if isinstance(data, dict) else None)

    async def _get_media_files(self, spec: ToolSpec, values: dict) -> dict:
        _, params, _ = self.prepare(spec, values)
        params = dict(params or {})
        params.pop("query", None)
        params.pop("type", None)

        if values.get("query"):
            files, total = await self._list(spec, values, {**params, "type": "file", "query": values["query"]})
            return {
                "success": True,
                "files": files,
                "total": total,
                "message": f'Found {len(files)} files matching "{values["query"]}"',
            }

        if values.get("type"):
            items, total = await self._list(spec, values, {**params, "type": values["type"]})
            key = "folders" if values["type"] == "folder" else "files"
            return {
                "success": True,
                key: items,
                "total": total,
                "message": f"Retrieved {len(items)} {key}",
            }

        # Hybrid view. Either listing failing fails the tool.
        (files, _), (folders, _) = await asyncio.gather(
            self._list(spec, values, {**params, "type": "file"}),
            self._list(spec, values, {**params, "type": "folder"}),
        )
        return {
            "success": True,
            "files": files,
            "folders": folders,
            "message": f"Retrieved {len(files)} files and {len(folders)} folders",
        }
