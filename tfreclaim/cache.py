from typing import Dict, List

from tfreclaim.errors import DuplicateKeyError, NotFoundError
from tfreclaim.models.resource import Resource


class Cache:
    """
    Write-once store of the resources fetched per resource type, so a type
    read to resolve another one is not fetched twice in the same run.
    Not thread safe.
    """

    def __init__(self):
        self._entries: Dict[str, List[Resource]] = {}

    def set(self, key: str, resources: List[Resource]) -> None:
        if key in self._entries:
            raise DuplicateKeyError(f"cache key {key!r} already exists")
        self._entries[key] = resources

    def get(self, key: str) -> List[Resource]:
        try:
            return self._entries[key]
        except KeyError:
            raise NotFoundError(f"cache key {key!r} not found") from None

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
