from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from controllers.analysis_controller import analyze_images

router = APIRouter(tags=["analysis"])


@router.post("/analysis", summary="Analyze a batch of skin images")
async def analyze_route(
    request: Request,
    images: List[UploadFile] = File(...),
    notes: Optional[str] = Form(None),
):
    """Run the uploaded images through the analyzer, in order, for the current user."""
    try:
        return await analyze_images(request, images, notes)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
