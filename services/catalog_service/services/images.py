"""Primary image normalization."""

from typing import Sequence, TypeVar

ImageT = TypeVar("ImageT")


def normalize_primary_image(images: Sequence[ImageT]) -> Sequence[ImageT]:
    """Leave exactly one image flagged ``is_primary`` (none when empty).

    With no flagged image the first one is promoted; with several, only the
    first flagged one keeps the flag. Mutates and returns ``images``.
    """
    if not images:
        return images

    primary_index = next(
        (index for index, image in enumerate(images) if image.is_primary), 0
    )
    for index, image in enumerate(images):
        image.is_primary = index == primary_index
    return images
