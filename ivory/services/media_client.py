# ivory/services/media_client.py
import io
import time

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from ivory.domain.errors import MediaUploadError
from ivory.utils.settings import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_FOLDER,
)
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

# product shots are stored as webp, at most 800x800
IMAGE_TRANSFORMATION = [{"width": 800, "height": 800, "crop": "limit"}]


class MediaClient:
    """Uploads product images to Cloudinary and returns their public URL."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        folder: str | None = None,
        timeout: int = 30,
    ):
        self.folder = folder or CLOUDINARY_FOLDER
        self.timeout = timeout
        cloudinary.config(
            cloud_name=cloud_name or CLOUDINARY_CLOUD_NAME,
            api_key=api_key or CLOUDINARY_API_KEY,
            api_secret=api_secret or CLOUDINARY_API_SECRET,
            secure=True,
        )

    def upload_image(self, content: bytes, filename: str = "upload") -> str:
        public_id = f"product-{int(time.time() * 1000)}"

        logger.info(f"MediaClient upload {filename} ({len(content)} bytes) to {self.folder}")
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(content),
                filename=filename,
                folder=self.folder,
                public_id=public_id,
                format="webp",
                transformation=IMAGE_TRANSFORMATION,
                resource_type="image",
                timeout=self.timeout,
            )
        except CloudinaryError as e:
            raise MediaUploadError("Image upload failed", details=str(e)) from e

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            raise MediaUploadError("Image upload failed", details=str(result))
        return secure_url
