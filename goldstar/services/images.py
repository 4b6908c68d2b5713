"""
Image ingestion for blog posts.

Every image that reaches the database goes through ``ImagePipeline.normalize``:
decoded with Pillow, scaled down to the configured width, re-encoded as JPEG
and stored inline as a ``data:image/jpeg;base64,...`` URI.
"""

import base64
import binascii
import logging
import os
import shutil
import tempfile
import time
from contextlib import contextmanager
from io import BytesIO
from typing import Iterator, Union

from PIL import Image, UnidentifiedImageError

from goldstar.core.errors import ImageDecodeError

logger = logging.getLogger("goldstar")

DATA_URI_PREFIX = "data:image/jpeg;base64,"
BASE64_MARKER = ";base64,"


def decode_data_uri(value: str) -> bytes:
    """
    Extract the binary payload of a base64 data URI.

    Anything after the last ``;base64,`` marker is taken as the payload, so a
    bare base64 string is accepted as well.

    Raises:
        ImageDecodeError: if the payload is not valid base64
    """
    payload = "".join(value.split(BASE64_MARKER)[-1].split())
    # Line-wrapped (RFC 2045) and unpadded payloads are both common
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ImageDecodeError("Image data is not valid base64")


def to_data_uri(jpeg_bytes: bytes) -> str:
    return DATA_URI_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")


class ImagePipeline:
    def __init__(self, max_width: int = 800, quality: int = 80):
        self.max_width = max_width
        self.quality = quality

    def compress(self, raw: bytes) -> bytes:
        """
        Re-encode raw image bytes as a JPEG no wider than ``max_width``.

        Args:
            raw: Encoded image in any format Pillow can read

        Returns:
            JPEG bytes

        Raises:
            ImageDecodeError: if Pillow cannot decode the input
        """
        try:
            with Image.open(BytesIO(raw)) as img:
                img.load()
                img = self._flatten(img)

                if img.width > self.max_width:
                    height = max(1, round(img.height * self.max_width / img.width))
                    img = img.resize((self.max_width, height), Image.LANCZOS)

                out = BytesIO()
                img.save(out, format="JPEG", quality=self.quality)
                return out.getvalue()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, EOFError, ValueError) as e:
            raise ImageDecodeError(f"Could not process image: {e}")

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        # JPEG has no alpha channel, paste transparent images onto white
        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.getchannel("A"))
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img

    def normalize(self, source: Union[bytes, str]) -> str:
        """Normalize raw bytes or a base64 data URI into a JPEG data URI."""
        raw = decode_data_uri(source) if isinstance(source, str) else source
        return to_data_uri(self.compress(raw))

    def normalize_file(self, path: str) -> str:
        with open(path, "rb") as f:
            return self.normalize(f.read())


@contextmanager
def staged_upload(upload, directory: str) -> Iterator[str]:
    """
    Copy an uploaded file into the staging directory for the duration of the
    block. The staged copy is removed however the block exits.

    Args:
        upload: Starlette ``UploadFile``
        directory: Staging directory, created if missing

    Yields:
        Path of the staged file

    Raises:
        ImageDecodeError: if the upload does not declare an image content type
    """
    if not (upload.content_type or "").startswith("image/"):
        raise ImageDecodeError("Not an image! Please upload an image.")

    os.makedirs(directory, exist_ok=True)
    extension = os.path.splitext(upload.filename or "")[1]
    fd, path = tempfile.mkstemp(prefix=f"{int(time.time() * 1000)}-", suffix=extension, dir=directory)

    try:
        upload.file.seek(0)
        with os.fdopen(fd, "wb") as staged:
            shutil.copyfileobj(upload.file, staged)
        logger.debug(f"Staged upload {upload.filename!r} at {path}")
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
