from fastapi import APIRouter
from fastapi.responses import HTMLResponse
from app.api.pages import page
from app.core.config import UPLOAD_FIELD

router = APIRouter(tags=["form"])

FORM = f"""
<form action="/upload" method="post" enctype="multipart/form-data">
    <h1>Select file to upload:</h1> <br>
    <input type="file" name="{UPLOAD_FIELD}" id="{UPLOAD_FIELD}" required> <br><br>
    <input type="submit" value="Upload File" name="submit">
</form>
"""

@router.get("/", response_class=HTMLResponse)
def index():
    return page(FORM)
