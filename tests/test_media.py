"""Tests for generated-image normalisation and storage."""

from io import BytesIO

import pytest
from PIL import Image

from turbocontent.core.domain.exceptions import ImageProcessingError
from turbocontent.infra.media import TARGET_SIZE, ImageStore

_ORIENTATION_TAG = 0x0112


def _png(size=(400, 400), color=(255, 0, 0), mode="RGB") -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def _jpeg_rotated_90(size=(300, 100)) -> bytes:
    """Landscape pixels tagged with EXIF orientation 6 (display rotated to portrait)."""
    img = Image.new("RGB", size)
    # left half white, right half black
    img.paste((255, 255, 255), (0, 0, size[0] // 2, size[1]))
    exif = Image.Exif()
    exif[_ORIENTATION_TAG] = 6
    buf = BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())
    return buf.getvalue()


@pytest.fixture
def store(tmp_path) -> ImageStore:
    return ImageStore(tmp_path / "media", url_prefix="/media/")


class TestImageStore:
    def test_output_is_fixed_size_jpeg(self, store):
        path = store.save(_png())
        assert path.startswith("/media/") and path.endswith(".jpeg")

        stored = store.media_dir / path.rsplit("/", 1)[1]
        with Image.open(stored) as img:
            assert img.format == "JPEG"
            assert img.size == TARGET_SIZE
            assert img.mode == "RGB"

    def test_alpha_images_flattened(self, store):
        path = store.save(_png(mode="RGBA", color=(0, 0, 255, 128)))
        with Image.open(store.media_dir / path.rsplit("/", 1)[1]) as img:
            assert img.mode == "RGB"

    def test_random_filenames(self, store):
        data = _png()
        assert store.save(data) != store.save(data)

    def test_orientation_applied_and_metadata_dropped(self, store):
        path = store.save(_jpeg_rotated_90())
        with Image.open(store.media_dir / path.rsplit("/", 1)[1]) as img:
            assert img.getexif().get(_ORIENTATION_TAG) is None
            # after rotation the white half is on top; the center crop keeps both halves
            top = img.getpixel((TARGET_SIZE[0] // 2, 5))
            bottom = img.getpixel((TARGET_SIZE[0] // 2, TARGET_SIZE[1] - 5))
            assert sum(top) > 600
            assert sum(bottom) < 150

    def test_garbage_bytes_rejected(self, store):
        with pytest.raises(ImageProcessingError):
            store.save(b"definitely not an image")

    def test_creates_missing_directory(self, store):
        assert not store.media_dir.exists()
        store.save(_png())
        assert store.media_dir.is_dir()

    @pytest.mark.asyncio
    async def test_save_async(self, store):
        path = await store.save_async(_png())
        assert (store.media_dir / path.rsplit("/", 1)[1]).exists()
