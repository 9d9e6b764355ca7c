"""Local filesystem image storage.

Planet images are plain files named after the planet:
    {base_path}/{planet name, lowercased}.jpg

Names that would resolve outside base_path are treated as missing images.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from solar.core.errors import NotFoundError

logger = logging.getLogger(__name__)


class LocalImageStorage:
    """Read-only image assets on the local filesystem."""

    EXTENSION = ".jpg"
    CONTENT_TYPE = "image/jpeg"

    def __init__(self, base_path: str | Path = "images"):
        self.base_path = Path(base_path)

    def get_image_path(self, planet_name: str) -> Path:
        """Get the image path for a planet name.

        Raises:
            NotFoundError: If the name escapes the image directory.
        """
        image_path = self.base_path / f"{planet_name.lower()}{self.EXTENSION}"
        if not image_path.resolve().is_relative_to(self.base_path.resolve()):
            logger.warning(f"Rejected image lookup outside {self.base_path}: {planet_name!r}")
            raise NotFoundError(f"Can't find an image of planet: {planet_name}")
        return image_path

    async def retrieve(self, planet_name: str) -> bytes:
        """Load the image of a planet.

        Raises:
            NotFoundError: If no image exists for the planet.
        """
        image_path = self.get_image_path(planet_name)

        if not await aiofiles.os.path.exists(image_path):
            raise NotFoundError(f"Can't find an image of planet: {planet_name}")

        async with aiofiles.open(image_path, "rb") as f:
            content = await f.read()

        logger.debug(f"Loaded image {image_path} ({len(content)} bytes)")
        return cast(bytes, content)
