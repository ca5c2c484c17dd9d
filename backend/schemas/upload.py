from typing import List, Optional

from schemas.catalog import CamelModel


class UploadedImage(CamelModel):
    url: str
    alt: Optional[str] = None
    filename: str


class UploadResponse(CamelModel):
    message: str = "Images uploaded successfully"
    uploaded_images: List[UploadedImage]
