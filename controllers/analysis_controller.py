from fastapi import HTTPException, Request, UploadFile
from typing import Any, Dict, List, Optional

from controllers.common import app_service, require_user, to_http_exception
from models.batch_models import BatchImage
from models.errors import DermaSightError, RemoteAnalysisError
from services.batch_analyzer import BatchAnalyzer
from services.thumbnail_generator import ThumbnailGenerator
from utils.media_validation import read_image_uploads


async def analyze_images(
    request: Request,
    images: List[UploadFile],
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Validate uploads, build previews and run one analysis batch for the current user.

    Args:
        request: FastAPI Request object (used to access app.state for shared services).
        images: Uploaded skin images, analyzed in the given order.
        notes: Optional free text shared by every image in the batch.

    Returns:
        A dict containing: state, results (one case per image).

    Raises:
        HTTPException(502) carrying the failing image index and how many cases
        were produced before the failure.
    """
    user = await require_user(request)

    settings = request.app.state.settings
    uploads = await read_image_uploads(images, max_bytes=settings.max_image_bytes)

    analyzer = getattr(request.app.state, "skin_analyzer", None)
    if analyzer is None:
        raise HTTPException(status_code=503, detail="Image analysis is unavailable: no API key configured.")

    thumb_gen = ThumbnailGenerator()
    batch_images = [
        BatchImage(
            image_bytes=raw,
            mime_type=mime_type,
            preview_url=thumb_gen.create_preview_url(raw, mime_type),
            filename=upload.filename,
        )
        for upload, raw, mime_type in uploads
    ]

    batch = BatchAnalyzer(analyzer, app_service(request, "case_dal"))
    try:
        results = await batch.run(batch_images, user, notes=(notes or "").strip())
    except RemoteAnalysisError as exc:
        raise HTTPException(
            status_code=502,
            detail={
                "message": str(exc),
                "failed_image": exc.image_index,
                "completed": len(batch.results),
                "state": batch.state.value,
            },
        ) from exc
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc

    return {
        "state": batch.state.value,
        "results": [case.model_dump(exclude_none=True) for case in results],
    }
