"""Generated-image storage: normalise, re-encode, write under the media dir.

Every image is center-cropped to a 16:9 1200x675 JPEG. EXIF orientation is
applied to the pixels first, then all metadata is dropped on re-encode.
Filenames are random, not derived from content.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from turbocontent.core.domain.exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

TARGET_SIZE = (1200, 675)
JPEG_QUALITY = 90


class ImageStore:

    def __init__(self, media_dir: str | Path, url_prefix: str = "/media") -> None:
        self.media_dir = Path(media_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_dir(self) -> None:
        self.media_dir.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes) -> str:
        """Convert *data* and write it; return the public path.

        Raises:
            ImageProcessingError: bytes are not a decodable image.
            OSError: the media directory is not writable.
        """
        try:
            with Image.open(BytesIO(data)) as src:
                # Force load to detect corrupt images early
                src.load()
                img = ImageOps.exif_transpose(src)
                img = ImageOps.fit(
                    img, TARGET_SIZE, Image.Resampling.LANCZOS, centering=(0.5, 0.5),
                )
                if img.mode != "RGB":
                    img = img.convert("RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, ValueError) as exc:
            raise ImageProcessingError(f"cannot decode generated image: {exc}") from exc
        except OSError as exc:
            # Pillow signals truncated/corrupt data as OSError
            raise ImageProcessingError(f"cannot decode generated image: {exc}") from exc

        self.ensure_dir()
        filename = f"{secrets.token_urlsafe(16)}.jpeg"
        img.save(self.media_dir / filename, format="JPEG", quality=JPEG_QUALITY)
        logger.debug("Stored generated image %s (%d bytes in)", filename, len(data))
        return f"{self.url_prefix}/{filename}"

    async def save_async(self, data: bytes) -> str:
        # Pillow is CPU-bound; keep it off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.save, data)
