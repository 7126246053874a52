"""
pipelines/preprocess.py

Local staging of camera photos and picked documents.

Photos are normalised before staging:
  1. Apply EXIF orientation (phone cameras store rotation as metadata).
  2. Convert to RGB.
  3. Resize so the longest side is at most MAX_SIDE, preserving aspect ratio.
  4. Save as JPEG at JPEG_QUALITY.
"""

import logging
import uuid
from io import BytesIO
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from PIL import Image, ImageOps, UnidentifiedImageError

from services.errors import CaptureError

logger = logging.getLogger(__name__)

MAX_SIDE: int = 1280
JPEG_QUALITY: int = 80


def local_path(uri: str) -> Path:
    """Translate a ``file://`` URI or a plain path into a local ``Path``."""
    if uri.startswith("file:"):
        parsed = urlparse(uri)
        return Path(url2pathname(parsed.path))
    return Path(uri)


def resolve_local_path(uri: str) -> Path:
    """
    Like :func:`local_path` but the file must exist.

    Raises:
        FileNotFoundError: If nothing is staged at *uri*.
    """
    if not uri:
        raise FileNotFoundError("No URI provided")
    path = local_path(uri)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return path


def preprocess_capture(image: Image.Image) -> Image.Image:
    """
    Prepare a camera photo for upload.

    Args:
        image: Input PIL Image in any mode.

    Returns:
        Upright RGB image whose longest side is at most MAX_SIDE.
    """
    image = ImageOps.exif_transpose(image)

    if image.mode != "RGB":
        logger.debug("Converting capture from mode=%s to RGB.", image.mode)
        image = image.convert("RGB")

    original_size = image.size
    max_dim = max(original_size)
    if max_dim > MAX_SIDE:
        scale = MAX_SIDE / max_dim
        new_size = (int(original_size[0] * scale), int(original_size[1] * scale))
        image = image.resize(new_size, Image.LANCZOS)
        logger.debug("Resized capture from %s to %s.", original_size, new_size)

    return image


def stage_capture(raw: bytes, staging_dir: Path) -> str:
    """
    Normalise a raw camera photo and write it to *staging_dir*.

    Returns:
        ``file://`` URI of the staged JPEG.

    Raises:
        CaptureError: If *raw* is not a readable image or cannot be written.
    """
    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise CaptureError("Could not read the captured photo") from e

    image = preprocess_capture(image)

    staging_dir.mkdir(parents=True, exist_ok=True)
    path = staging_dir / f"capture_{uuid.uuid4().hex}.jpg"
    try:
        image.save(path, format="JPEG", quality=JPEG_QUALITY)
    except OSError as e:
        raise CaptureError("Could not stage the captured photo") from e

    logger.debug("Staged capture at %s (%dx%d)", path, image.size[0], image.size[1])
    return path.resolve().as_uri()


def stage_document(raw: bytes, name: str, staging_dir: Path) -> str:
    """Write a picked document to *staging_dir* and return its ``file://`` URI."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    safe_name = Path(name).name or "document"
    path = staging_dir / f"{uuid.uuid4().hex}_{safe_name}"
    path.write_bytes(raw)
    return path.resolve().as_uri()
