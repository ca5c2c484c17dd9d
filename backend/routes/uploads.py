# backend/routes/uploads.py
import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from config import settings
from schemas.upload import UploadedImage, UploadResponse
from utils.audit import Auditor, get_auditor
from utils.uploads import ALLOWED_CONTENT_TYPES, UnsafeUploadPath, save_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Uploads"])


# Store product / category images under the uploads directory
@router.post("/upload-images", response_model=UploadResponse)
def upload_images(
    images: List[UploadFile] = File(...),
    folder_slug: str = Form("default", alias="folderSlug"),
    product_slug: str = Form("", alias="productSlug"),
    auditor: Auditor = Depends(get_auditor),
):
    for upload in images:
        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise HTTPException(status_code=400, detail=f"Unsupported file type: {upload.content_type}")

    try:
        saved = save_images(settings.UPLOAD_DIR, folder_slug, product_slug, images)
    except UnsafeUploadPath as e:
        auditor.record("UPLOAD", "images", status="FAIL", meta={"folder": folder_slug, "reason": str(e)})
        raise HTTPException(status_code=400, detail="Invalid folder or product slug")
    except OSError:
        logger.exception("Writing uploaded images failed")
        raise HTTPException(status_code=500, detail="Error uploading images")

    auditor.record("UPLOAD", "images", meta={"folder": folder_slug, "files": [stored for _, _, stored in saved]})
    return UploadResponse(
        uploaded_images=[UploadedImage(url=url, alt=original, filename=original) for url, original, _ in saved]
    )
