import os, re, secrets, logging
from typing import BinaryIO, Optional
from app.core.config import ID_BYTES

log = logging.getLogger("storage")

_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


def generate_id() -> str:
    return secrets.token_urlsafe(ID_BYTES)


def extension_of(filename: Optional[str]) -> str:
    """
    Extension of the last path component, without the dot, or "" if none.
    Browsers on Windows may send a full path, so "\\" splits too.
    """
    if not filename:
        return ""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    _, ext = os.path.splitext(base)
    ext = ext[1:]
    if _CONTROL.search(ext):
        log.warning("Dropping extension %r with control characters", ext)
        return ""
    return ext


def stored_name(filename: Optional[str]) -> str:
    ext = extension_of(filename)
    ident = generate_id()
    return f"{ident}.{ext}" if ext else ident


def open_destination(storage_dir: str, filename: Optional[str]) -> tuple[str, BinaryIO]:
    # "xb" never clobbers an existing file, even on an id collision
    dest = os.path.join(storage_dir, stored_name(filename))
    return dest, open(dest, "xb")
