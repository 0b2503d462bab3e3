"""Gallery state: the fixed image list, the current position, and the last prediction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")


@dataclass(frozen=True)
class GallerySnapshot:
    """Point-in-time view of the gallery, safe to hand to the API layer."""

    images: tuple[str, ...]
    current_index: int
    current_image: str
    class_label: str
    is_predicting: bool
    has_previous: bool
    has_next: bool


class Gallery:
    """A fixed, ordered set of images with a clamped cursor.

    Navigation always clears the last predicted label, even when the cursor
    is already at the boundary and the index does not move. Each navigation
    bumps ``generation`` so that a prediction started on one image is never
    written onto another.
    """

    def __init__(self, images: Sequence[str], image_dir: str | Path) -> None:
        if not images:
            raise ValueError("Gallery requires at least one image")
        self._images: tuple[str, ...] = tuple(images)
        self._image_dir = Path(image_dir)

        self.current_index: int = 0
        self.class_label: str = ""
        self.is_predicting: bool = False
        self.generation: int = 0

    @property
    def images(self) -> tuple[str, ...]:
        return self._images

    @property
    def current_image(self) -> str:
        return self._images[self.current_index]

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    @property
    def has_next(self) -> bool:
        return self.current_index < len(self._images) - 1

    def next(self) -> None:
        """Move to the next image, stopping at the last one."""
        self._move_to(min(self.current_index + 1, len(self._images) - 1))

    def previous(self) -> None:
        """Move to the previous image, stopping at the first one."""
        self._move_to(max(self.current_index - 1, 0))

    def resolve_path(self, image_id: str | None = None) -> Path:
        """Return the file backing an image identifier.

        Raises:
            FileNotFoundError: If no file with a supported extension exists.
        """
        image_id = self.current_image if image_id is None else image_id
        for ext in IMAGE_EXTENSIONS:
            candidate = self._image_dir / f"{image_id}{ext}"
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(f"No image file for '{image_id}' in {self._image_dir}")

    def snapshot(self) -> GallerySnapshot:
        return GallerySnapshot(
            images=self._images,
            current_index=self.current_index,
            current_image=self.current_image,
            class_label=self.class_label,
            is_predicting=self.is_predicting,
            has_previous=self.has_previous,
            has_next=self.has_next,
        )

    def _move_to(self, index: int) -> None:
        self.current_index = index
        self.class_label = ""
        self.generation += 1
        logger.debug("Gallery moved to %s (%s)", index, self.current_image)
