"""
Video Resources
===============

In-process handles for fetched video bytes. A handle stays loadable until
it is released, which the owner does once a newer result supersedes it.
"""

import logging
import uuid
from pathlib import Path
from typing import Dict, Optional, Union

import aiofiles

from ..core.exceptions import ResourceNotFoundError
from ..core.security import PathValidator

logger = logging.getLogger(__name__)


class VideoResource:
    """Loadable reference to one video held by a ResourceRegistry."""

    def __init__(self, registry: "ResourceRegistry", resource_id: str, mime_type: str, size: int):
        self._registry = registry
        self.resource_id = resource_id
        self.mime_type = mime_type
        self.size = size

    @property
    def released(self) -> bool:
        return not self._registry.contains(self.resource_id)

    def read(self) -> bytes:
        """Return the video bytes. Raises ResourceNotFoundError once released."""
        return self._registry.get(self.resource_id)

    def release(self) -> None:
        self._registry.release(self.resource_id)

    async def save(
        self,
        path: Union[str, Path],
        validator: Optional[PathValidator] = None,
    ) -> Path:
        """
        Write the video to disk.

        Args:
            path: Destination file
            validator: Restricts the destination to an output directory

        Returns:
            The resolved path written
        """
        output_path = validator.validate_video(path) if validator else Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(output_path, "wb") as f:
            await f.write(self.read())

        logger.info(f"Video saved to {output_path}")
        return output_path

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.size} bytes"
        return f"VideoResource({self.resource_id}, {self.mime_type}, {state})"


class ResourceRegistry:
    """Owns the bytes behind every live VideoResource."""

    SCHEME = "video://"

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def create(self, data: bytes, mime_type: str = "video/mp4") -> VideoResource:
        resource_id = f"{self.SCHEME}{uuid.uuid4().hex}"
        self._data[resource_id] = data
        logger.debug(f"Registered {resource_id} ({len(data)} bytes)")
        return VideoResource(self, resource_id, mime_type, len(data))

    def contains(self, resource_id: str) -> bool:
        return resource_id in self._data

    def get(self, resource_id: str) -> bytes:
        try:
            return self._data[resource_id]
        except KeyError:
            raise ResourceNotFoundError(
                f"Video resource not available: {resource_id}",
                resource_id=resource_id,
            )

    def release(self, resource_id: str) -> None:
        """Drop a resource. Releasing twice is a no-op."""
        if self._data.pop(resource_id, None) is not None:
            logger.debug(f"Released {resource_id}")

    def release_all(self) -> None:
        for resource_id in list(self._data):
            self.release(resource_id)

    def __len__(self) -> int:
        return len(self._data)
