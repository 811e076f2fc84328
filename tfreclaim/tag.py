import random
import re
import string
from dataclasses import dataclass
from typing import Dict, Optional

from tfreclaim.errors import ValidationError

# Names Terraform accepts for resources
_NAME_RE = re.compile(r"^[a-z0-9_]+$")
_INVALID_NAME_RE = re.compile(r"[^a-z0-9_]")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class Tag:
    name: str
    value: str

    @classmethod
    def parse(cls, raw: str) -> "Tag":
        """Build a Tag from the NAME:VALUE notation used on the CLI."""
        parts = raw.split(":")
        if len(parts) != 2:
            raise ValidationError(f"invalid tag format {raw!r}, expected NAME:VALUE")
        return cls(name=parts[0], value=parts[1])

    def __str__(self) -> str:
        return f"{self.name}:{self.value}"


def is_valid_resource_name(name: str) -> bool:
    return bool(_NAME_RE.match(name)) and bool(_IDENTIFIER_RE.match(name))


def force_resource_name(name: str) -> str:
    return _INVALID_NAME_RE.sub("_", name)


def _only_underscores(name: str) -> bool:
    return name.strip("_") == ""


def random_name(length: int = 5) -> str:
    return "".join(random.choice(string.ascii_lowercase) for _ in range(length))


def get_name_from_tag(tags: Optional[Dict[str, str]], tag_key: str, fallback: str) -> str:
    """
    Return the resource name taken from the ``tag_key`` tag, or from the fallback
    (usually the cloud ID) when the tag is missing or unusable.
    Invalid characters are replaced with '_'; if nothing usable remains a
    random name is generated.
    """
    fallback = fallback.lower()
    name = (tags or {}).get(tag_key, "").lower()

    for candidate, forced in (
        (name, False),
        (force_resource_name(name), True),
        (fallback, False),
        (force_resource_name(fallback), True),
    ):
        if not candidate:
            continue
        if forced and _only_underscores(candidate):
            continue
        if is_valid_resource_name(candidate):
            return candidate

    return random_name()
