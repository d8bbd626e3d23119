"""
Sparkz Backend: Profile Picture Processing
===========================================

What:  Validates an uploaded profile picture and turns it into a square JPEG
       data URL stored inline on the user row.
How:   Size check first (before any decoding), then Pillow decodes the bytes,
       ImageOps.fit crops/resizes to PROFILE_PIC_SIZE x PROFILE_PIC_SIZE
       (cover semantics: fill the square, crop the overflow around the
       centre), and the result is re-encoded as JPEG and base64'd.
Who:   UserService.update_profile_pic().

Validation order:
    1. Reported size (Content-Length of the part), when the client sends one
    2. Actual byte count
    3. Decodable image (Pillow), otherwise 400
    Decoding and resizing are CPU-bound and run in the threadpool.
"""

import base64
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.exceptions import PayloadTooLargeError, ValidationError

logger = logging.getLogger(__name__)

JPEG_QUALITY = 85
DATA_URL_PREFIX = "data:image/jpeg;base64,"


class ImageService:
    """
    Square-thumbnail pipeline for profile pictures.

    Args:
        max_size: Upload cap in bytes (defaults to settings.max_upload_size)
        edge: Output edge length in pixels (defaults to settings.profile_pic_size)
    """

    def __init__(self, max_size: Optional[int] = None, edge: Optional[int] = None):
        self.max_size = max_size or settings.max_upload_size
        self.edge = edge or settings.profile_pic_size

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects uploads above the cap and empty uploads.

        Raises:
            PayloadTooLargeError: reported or actual size exceeds max_size
            ValidationError: the upload is empty
        """
        if content_length and content_length > self.max_size:
            raise PayloadTooLargeError(
                max_size=self.max_size,
                field="profilePic",
                context={"reported_size": content_length},
            )
        if actual_size > self.max_size:
            raise PayloadTooLargeError(
                max_size=self.max_size,
                field="profilePic",
                context={"actual_size": actual_size},
            )
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="profilePic")

    def crop_to_square(self, content: bytes) -> bytes:
        """
        Decodes ``content`` and returns JPEG bytes of exactly edge x edge pixels.

        Raises:
            ValidationError: the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.load()
                # Honour camera orientation before cropping
                img = ImageOps.exif_transpose(img)
                square = ImageOps.fit(
                    img,
                    (self.edge, self.edge),
                    method=Image.Resampling.LANCZOS,
                    centering=(0.5, 0.5),
                )
                if square.mode != "RGB":
                    square = square.convert("RGB")

                out = io.BytesIO()
                square.save(out, format="JPEG", quality=JPEG_QUALITY)
                return out.getvalue()
        # Pillow plugins signal corrupt data with any of these
        except (
            UnidentifiedImageError,
            OSError,
            SyntaxError,
            ValueError,
            Image.DecompressionBombError,
        ) as e:
            logger.info("Rejected profile picture upload: %s", type(e).__name__)
            raise ValidationError(
                message="Uploaded file is not a supported image",
                field="profilePic",
            )

    def to_data_url(self, jpeg_bytes: bytes) -> str:
        return DATA_URL_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")

    async def process_upload(self, content: bytes, content_length: Optional[int] = None) -> str:
        """
        Full pipeline: validate size → crop/resize → data URL.

        Returns:
            "data:image/jpeg;base64,..." ready to store on the user row.
        """
        self.validate_size(content_length, len(content))
        jpeg = await run_in_threadpool(self.crop_to_square, content)
        logger.info(
            "Profile picture processed: %d bytes in, %d bytes out (%dx%d)",
            len(content), len(jpeg), self.edge, self.edge,
        )
        return self.to_data_url(jpeg)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
