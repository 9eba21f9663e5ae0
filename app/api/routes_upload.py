import os
from urllib.parse import quote
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from app.core.config import Settings, get_settings
from app.services.upload import UploadError, multipart_boundary, receive_upload

router = APIRouter(tags=["upload"])

@router.post("/upload")
async def upload(request: Request, settings: Settings = Depends(get_settings)):
    boundary = multipart_boundary(request.headers.get("content-type"))
    try:
        path = await receive_upload(request.stream(), boundary, settings.storage_path)
    except UploadError as e:
        raise HTTPException(status_code=500, detail=str(e))

    filename = os.path.basename(path)
    if not filename:
        raise HTTPException(status_code=500, detail="no valid filename for stored file found!")
    # extensions may carry ?, # or %, keep them inside the path segment
    return RedirectResponse(
        str(request.app.url_path_for("success", file=quote(filename, safe=""))),
        status_code=303,
    )
