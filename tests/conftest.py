# tests/conftest.py
from __future__ import annotations
import os
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.core.config import Settings

BASE_URL = "https://cdn.example"

# --------------------------------------------------------------------
# Per-test storage directory so uploads never leak between tests
# --------------------------------------------------------------------
@pytest.fixture
def storage_dir(tmp_path) -> str:
    d = tmp_path / "storage"
    d.mkdir()
    return str(d)

@pytest.fixture
def settings(storage_dir) -> Settings:
    return Settings(storage_path=storage_dir, base_url=BASE_URL)

# --------------------------------------------------------------------
# FastAPI test client available as fixture `client`
# --------------------------------------------------------------------
@pytest.fixture
def client(settings) -> TestClient:
    return TestClient(create_app(settings))

@pytest.fixture
def stored_files(storage_dir) -> Callable[[], list[str]]:
    return lambda: sorted(os.listdir(storage_dir))

# --------------------------------------------------------------------
# Hand-built multipart bodies, for exact control over the boundary
# --------------------------------------------------------------------
def multipart_body(boundary: str, parts: list[tuple[str, str | None, bytes]], close: bool = True) -> bytes:
    """parts: (field name, filename or None, content)"""
    out = b""
    for name, filename, content in parts:
        disp = f'form-data; name="{name}"'
        if filename is not None:
            disp += f'; filename="{filename}"'
        out += f"--{boundary}\r\n".encode()
        out += f"Content-Disposition: {disp}\r\n".encode("utf-8")
        if filename is not None:
            out += b"Content-Type: application/octet-stream\r\n"
        out += b"\r\n" + content + b"\r\n"
    if close:
        out += f"--{boundary}--\r\n".encode()
    return out
