"""Validation helpers for uploaded analysis images."""

from typing import List, Sequence, Tuple

from fastapi import HTTPException, UploadFile

from config import DEFAULT_MAX_IMAGE_BYTES

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif", ".heic", ".heif")


def image_mime_type(upload: UploadFile) -> str:
    """Return the upload's image MIME type, guessing from the filename when missing.

    Raises:
        HTTPException(415): The upload is not an image.
    """
    content_type = (upload.content_type or "").lower().split(";", 1)[0].strip()
    if content_type.startswith("image/"):
        return content_type
    filename = (upload.filename or "").lower()
    if not content_type or content_type == "application/octet-stream":
        for ext in ALLOWED_IMAGE_EXTENSIONS:
            if filename.endswith(ext):
                subtype = "jpeg" if ext in (".jpg", ".jpeg") else ext[1:]
                return f"image/{subtype}"
    raise HTTPException(
        status_code=415,
        detail=f"Unsupported file type for {upload.filename or 'upload'}: {upload.content_type}",
    )


async def read_image_uploads(
    uploads: Sequence[UploadFile], max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
) -> List[Tuple[UploadFile, bytes, str]]:
    """Read and validate every upload; reject the whole set if any file is too large.

    Returns:
        `(upload, raw_bytes, mime_type)` per upload, in order.

    Raises:
        HTTPException(400): No images, an empty file, or files above `max_bytes`.
        HTTPException(415): A non-image upload.
    """
    if not uploads:
        raise HTTPException(status_code=400, detail="Please upload at least one image before analyzing.")

    read: List[Tuple[UploadFile, bytes, str]] = []
    for upload in uploads:
        mime_type = image_mime_type(upload)
        raw = await upload.read()
        if not raw:
            raise HTTPException(status_code=400, detail=f"Uploaded image is empty: {upload.filename or 'upload'}")
        read.append((upload, raw, mime_type))

    oversized = [upload.filename or "upload" for upload, raw, _ in read if len(raw) > max_bytes]
    if oversized:
        limit_mb = max_bytes / (1024 * 1024)
        raise HTTPException(
            status_code=400,
            detail=f"Some files exceed the {limit_mb:g}MB limit: {', '.join(oversized)}",
        )
    return read
