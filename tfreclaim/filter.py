import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from tfreclaim.errors import ValidationError
from tfreclaim.tag import Tag


@dataclass
class Filter:
    """
    Decides which discovered resources enter the import.

    ``exclude`` is turned into a set the first time it is consulted and never
    rebuilt afterwards, so it must not be mutated once the import started.
    """
    tags: List[Tag] = field(default_factory=list)
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    targets: List[str] = field(default_factory=list)

    _exclude_set: Optional[FrozenSet[str]] = field(default=None, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def is_excluded(self, value: str) -> bool:
        if not self.exclude:
            return False

        if self._exclude_set is None:
            with self._lock:
                if self._exclude_set is None:
                    self._exclude_set = frozenset(self.exclude)

        return value in self._exclude_set

    def is_included(self, *values: str) -> bool:
        """True when there is no include list or any of ``values`` is on it."""
        if not self.include:
            return True
        return any(v in self.include for v in values)

    def validate(self) -> None:
        if self.targets and (self.include or self.exclude):
            raise ValidationError("targets can not be combined with include or exclude")

        for t in self.targets:
            parts = t.split(".")
            if len(parts) != 2 or not parts[0] or not parts[1]:
                raise ValidationError(f"invalid target {t!r}, expected TYPE.ID")

    def targets_types_with_ids(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for t in self.targets:
            rt, rid = t.split(".", 1)
            out.setdefault(rt, []).append(rid)
        return out

    def __str__(self) -> str:
        parts = []
        if self.tags:
            parts.append("Tags: " + ", ".join(str(t) for t in self.tags))
        if self.include:
            parts.append("Include: " + ", ".join(self.include))
        if self.exclude:
            parts.append("Exclude: " + ", ".join(self.exclude))
        if self.targets:
            parts.append("Targets: " + ", ".join(self.targets))
        return "; ".join(parts) if parts else "none"
