"""File upload and download endpoints for scan artifacts."""
from fastapi import APIRouter, File, Request, UploadFile, status
from starlette.responses import FileResponse

from scanboard.api.envelopes import EnvelopeError
from scanboard.core.envelope import Envelope
from scanboard.services.uploads import UploadError

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/upload")
def upload_file(request: Request, file: UploadFile = File(...)):
    storage = request.app.state.uploads
    try:
        stored_name, path = storage.save(file.filename, file.file)
    except UploadError as exc:
        raise EnvelopeError(Envelope.fail(exc.message), exc.status_code)
    finally:
        file.file.close()
    return {"filename": stored_name, "path": str(path)}


@router.get("/download/{filename}")
def download_file(filename: str, request: Request):
    path = request.app.state.uploads.resolve(filename)
    if path is None:
        raise EnvelopeError(Envelope.fail("File not found"), status.HTTP_404_NOT_FOUND)
    return FileResponse(path, filename=filename)
