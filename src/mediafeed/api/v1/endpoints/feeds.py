"""Feed endpoints: media upload, ranked feed pages and media download."""

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, File, Form, Query, Request, UploadFile
from fastapi.responses import StreamingResponse

from mediafeed.api.v1.dependencies import FeedAssemblerDep, UploadServiceDep
from mediafeed.core.settings import settings
from mediafeed.schemas.post import FeedPage, UploadResult

router = APIRouter(prefix="/feeds", tags=["feeds"])


def _content_disposition(file_name: str) -> str:
    # Same rule as starlette.responses.FileResponse: names that need escaping
    # go into the RFC 5987 form instead of a quoted string.
    quoted = quote(file_name)
    if quoted != file_name:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{file_name}"'


@router.post("/upload", response_model=UploadResult)
async def upload_feed(
    request: Request,
    uploads: UploadServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
    user_id: Annotated[str | None, Form(alias="userId")] = None,
    user_name: Annotated[str | None, Form(alias="userName")] = None,
    file_name: Annotated[str | None, Form(alias="fileName")] = None,
    caption: Annotated[str | None, Form()] = None,
    profile_pic: Annotated[str | None, Form(alias="profilePic")] = None,
) -> UploadResult:
    """Stream an uploaded file into media storage and create its post."""
    return await uploads.upload(
        owner_id=user_id,
        owner_username=user_name,
        file_name=file_name,
        source=file,
        caption=caption,
        title=profile_pic,
        is_cancelled=request.is_disconnected,
    )


@router.get("/", response_model=FeedPage)
async def get_feed(
    feed: FeedAssemblerDep,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    page_number: Annotated[int, Query(alias="pageNumber", ge=1)] = 1,
    page_size: Annotated[int | None, Query(alias="pageSize", ge=1)] = None,
) -> FeedPage:
    """Return one ranked feed page, flagging posts the viewer has liked."""
    return feed.get_feed(
        viewer_id=user_id,
        page_number=page_number,
        page_size=page_size or settings.feed_default_page_size,
    )


@router.get("/download")
async def download(
    uploads: UploadServiceDep,
    file_name: Annotated[str, Query(alias="fileName")] = "",
) -> StreamingResponse:
    """Stream a stored media object back to the client."""
    chunks, content_type = await uploads.download(file_name)
    return StreamingResponse(
        chunks,
        media_type=content_type,
        headers={"Content-Disposition": _content_disposition(file_name)},
    )
