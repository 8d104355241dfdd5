# projectgen/api/download.py
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from projectgen.core.errors import ArtifactNotFound

router = APIRouter()

STREAM_CHUNK_SZ = 64 * 1024


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(STREAM_CHUNK_SZ)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


@router.get("/{zip_name}")
def download(zip_name: str, request: Request):
    try:
        handle = request.app.state.artifacts.open_artifact(zip_name)
    except ArtifactNotFound:
        return JSONResponse(status_code=404, content={"error": "File not found."})

    headers = {"Content-Disposition": f'attachment; filename="{zip_name}"'}
    return StreamingResponse(_iter_file(handle), media_type="application/zip", headers=headers)
