from html import escape
from urllib.parse import quote
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from app.core.config import Settings, get_settings
from app.api.pages import page

router = APIRouter(tags=["success"])

@router.get("/success/{file}", response_class=HTMLResponse, name="success")
def success(file: str, settings: Settings = Depends(get_settings)):
    # rendering only: the file is not checked against storage
    href = escape(f"{settings.base_url}/{quote(file, safe='')}")
    text = escape(f"{settings.base_url}/{file}")
    return page(f"""
    <h1>File link:</h1>
    <br>
    <a href="{href}">{text}</a>
    <br><br>
    <a href="/">Upload next file</a>
""")
