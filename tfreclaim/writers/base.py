from typing import Set, Tuple

from tfreclaim.errors import InvalidKeyError, RequiredKeyError
from tfreclaim.interpolator import parse_reference

Relations = Set[Tuple[str, str]]


def parse_key(key: str) -> Tuple[str, str]:
    """Split "aws_instance.front" into its type and name."""
    if not key:
        raise RequiredKeyError()
    parts = key.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidKeyError(f"invalid key {key!r}, expected TYPE.NAME")
    return parts[0], parts[1]


def reference_target(ref: str) -> Tuple[str, str]:
    """Return the (type, address) a "${type.name.attr}" reference points to."""
    rtype, rname, _ = parse_reference(ref)
    return rtype, f"{rtype}.{rname}"


def accept_reference(source: str, ref: str, relations: Relations) -> bool:
    """
    Whether ``source`` may point to the resource behind ``ref``: never to
    itself, never to a resource of its own type and never back to a resource
    that already points to it.
    """
    source_type = source.split(".", 1)[0]
    target_type, target = reference_target(ref)
    if target == source or target_type == source_type:
        return False
    if (source, target) in relations:
        return True
    return (target, source) not in relations
