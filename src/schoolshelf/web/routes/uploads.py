"""File upload endpoints (admin-only, one multipart file per request)."""

from fastapi import APIRouter, Depends, File, UploadFile

from schoolshelf.core.errors import BadRequestError
from schoolshelf.core.storage import FileStorage, StoredFile, UploadKind
from schoolshelf.web.deps import get_storage, require_admin
from schoolshelf.web.schemas import ImageUploadResponse, PdfUploadResponse

router = APIRouter(prefix="/api/upload", tags=["uploads"], dependencies=[Depends(require_admin)])


def _store(storage: FileStorage, kind: UploadKind, field: str, upload: UploadFile | None) -> StoredFile:
    if upload is None or not upload.filename:
        raise BadRequestError("No file uploaded")
    # One byte past the limit is enough to reject oversize files
    data = upload.file.read(storage.max_bytes + 1)
    return storage.save(kind, field, upload.filename, upload.content_type, data)


@router.post("/pdf", response_model=PdfUploadResponse)
def upload_pdf(
    pdf: UploadFile | None = File(default=None),
    storage: FileStorage = Depends(get_storage),
) -> PdfUploadResponse:
    stored = _store(storage, UploadKind.PDF, "pdf", pdf)
    return PdfUploadResponse(
        message="PDF uploaded successfully",
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
        pdf_url=stored.url,
    )


@router.post("/image", response_model=ImageUploadResponse)
def upload_image(
    image: UploadFile | None = File(default=None),
    storage: FileStorage = Depends(get_storage),
) -> ImageUploadResponse:
    stored = _store(storage, UploadKind.IMAGE, "image", image)
    return ImageUploadResponse(
        message="Image uploaded successfully",
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
        image_url=stored.url,
    )
