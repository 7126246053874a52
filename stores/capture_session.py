"""
stores/capture_session.py

The batch of camera photos staged for a single multi-page upload.

Photos are appended in capture order and never reordered. Discarding index
``i`` shifts every later photo down by one; previews must re-read indices
after a discard. Staged files are deleted from disk when discarded or
cleared.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from pipelines.preprocess import local_path
from services.errors import CaptureError
from stores.models import CapturedImage

logger = logging.getLogger(__name__)


class Camera(Protocol):
    def capture(self) -> Optional[str]:
        """Return the URI of a new photo, or None if the user cancelled."""


def _remove_staged(image: CapturedImage) -> None:
    path = local_path(image.uri)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove staged capture %s: %s", path, e)


class CaptureSession:
    def __init__(self, delete_files: bool = True) -> None:
        self._images: list[CapturedImage] = []
        self.delete_files = delete_files

    @property
    def images(self) -> tuple[CapturedImage, ...]:
        return tuple(self._images)

    @property
    def is_empty(self) -> bool:
        return not self._images

    def __len__(self) -> int:
        return len(self._images)

    def add(self, image: CapturedImage) -> None:
        self._images.append(image)
        logger.debug("Staged capture %d: %s", len(self._images), image.uri)

    def start_capture(self, camera: Camera) -> Optional[CapturedImage]:
        """
        Take one photo and append it to the batch.

        Returns:
            The staged image, or None if the user cancelled.

        Raises:
            CaptureError: The camera failed; the batch is unchanged.
        """
        try:
            uri = camera.capture()
        except CaptureError:
            raise
        except (OSError, ValueError) as e:
            logger.warning("Camera capture failed: %s", e)
            raise CaptureError("Failed to capture image") from e

        if not uri:
            return None
        image = CapturedImage(uri=uri)
        self.add(image)
        return image

    def add_more(self, camera: Camera) -> Optional[CapturedImage]:
        """Capture another page into the same batch."""
        return self.start_capture(camera)

    def discard_item(self, index: int) -> Optional[CapturedImage]:
        if index < 0 or index >= len(self._images):
            return None
        image = self._images.pop(index)
        if self.delete_files:
            _remove_staged(image)
        return image

    def clear(self) -> None:
        images, self._images = self._images, []
        if self.delete_files:
            for image in images:
                _remove_staged(image)
        if images:
            logger.debug("Cleared %d staged capture(s)", len(images))
