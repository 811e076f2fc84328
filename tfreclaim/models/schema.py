"""
Resource schemas: attribute types and the schema version a resource's state
payload is encoded under.

Discovered attributes arrive as a flat map of strings. Collections use the
Terraform flatmap notation:
    "ports.#" = "2", "ports.0" = "80", "ports.1" = "443"   → list
    "tags.%"  = "1", "tags.Name" = "front"                  → map
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tfreclaim.errors import EncodingError, ValidationError

TYPES = ("string", "number", "bool", "list", "set", "map")

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}


def _number(raw: str, name: str) -> Any:
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        raise EncodingError(f"attribute {name!r}: {raw!r} is not a number") from None
    if not math.isfinite(value):
        raise EncodingError(f"attribute {name!r}: {raw!r} is not a finite number")
    return value


def _bool(raw: str, name: str) -> bool:
    low = raw.lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise EncodingError(f"attribute {name!r}: {raw!r} is not a bool")


@dataclass
class ResourceSchema:
    version: int = 0
    attributes: Dict[str, str] = field(default_factory=dict)
    computed: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ResourceSchema":
        data = data or {}
        attributes = dict(data.get("attributes") or {})
        for name, typ in attributes.items():
            if typ not in TYPES:
                raise ValidationError(f"attribute {name!r} has unknown type {typ!r}")
        return cls(
            version=int(data.get("version", 0)),
            attributes=attributes,
            computed=list(data.get("computed") or []),
        )

    def type_of(self, name: str, flat: Optional[Dict[str, str]] = None) -> str:
        if name in self.attributes:
            return self.attributes[name]
        # Not declared: guess from the flatmap markers
        if flat is not None:
            if f"{name}.#" in flat:
                return "list"
            suffixes = [k[len(name) + 1:] for k in flat if k.startswith(f"{name}.")]
            if suffixes:
                # "ports.0", "ports.1" with no size marker is still a list
                if all(s.isdigit() for s in suffixes):
                    return "list"
                return "map"
        return "string"

    # ------------------------------------------------------------ encode
    def encode(self, flat: Dict[str, str]) -> Dict[str, Any]:
        """Turn a flat attribute map into a typed payload."""
        tops: List[str] = []
        for key in flat:
            top = key.split(".", 1)[0]
            if top not in tops:
                tops.append(top)

        payload: Dict[str, Any] = {}
        for top in tops:
            typ = self.type_of(top, flat)
            if typ in ("list", "set"):
                payload[top] = self._encode_list(top, flat)
            elif typ == "map":
                payload[top] = self._encode_map(top, flat)
            else:
                if top not in flat:
                    raise EncodingError(f"attribute {top!r} of type {typ} has nested keys")
                raw = flat[top]
                if typ == "number":
                    payload[top] = _number(raw, top)
                elif typ == "bool":
                    payload[top] = _bool(raw, top)
                else:
                    payload[top] = raw
        return payload

    def _encode_list(self, name: str, flat: Dict[str, str]) -> List[str]:
        prefix = f"{name}."
        count_raw = flat.get(f"{name}.#")
        if count_raw is None:
            indexes = [k[len(prefix):] for k in flat if k.startswith(prefix)]
            if not all(i.isdigit() for i in indexes):
                raise EncodingError(f"attribute {name!r}: list items must be indexed")
            count = len(indexes)
        else:
            try:
                count = int(count_raw)
            except ValueError:
                raise EncodingError(f"attribute {name!r}: invalid length {count_raw!r}") from None

        items = []
        for i in range(count):
            key = f"{name}.{i}"
            if key not in flat:
                raise EncodingError(f"attribute {name!r}: missing item {i}")
            items.append(flat[key])
        return items

    def _encode_map(self, name: str, flat: Dict[str, str]) -> Dict[str, str]:
        prefix = f"{name}."
        entries = {
            k[len(prefix):]: v
            for k, v in flat.items()
            if k.startswith(prefix) and k != f"{name}.%"
        }
        size = flat.get(f"{name}.%")
        if size is not None and size != str(len(entries)):
            raise EncodingError(
                f"attribute {name!r}: declares {size} entries, found {len(entries)}"
            )
        return entries

    # ------------------------------------------------------------ decode
    def decode(self, payload: Dict[str, Any], version: Optional[int] = None) -> Dict[str, str]:
        """Inverse of encode; also checks the payload against the declared types."""
        if version is not None and version != self.version:
            raise EncodingError(
                f"payload has schema version {version}, schema is version {self.version}"
            )

        flat: Dict[str, str] = {}
        for name, value in payload.items():
            if value is None:
                continue
            typ = self.attributes.get(name)
            if isinstance(value, bool):
                self._expect(name, typ, ("bool",))
                flat[name] = "true" if value else "false"
            elif isinstance(value, (int, float)):
                self._expect(name, typ, ("number",))
                flat[name] = str(value)
            elif isinstance(value, str):
                self._expect(name, typ, ("string",))
                flat[name] = value
            elif isinstance(value, list):
                self._expect(name, typ, ("list", "set"))
                flat[f"{name}.#"] = str(len(value))
                for i, item in enumerate(value):
                    flat[f"{name}.{i}"] = str(item)
            elif isinstance(value, dict):
                self._expect(name, typ, ("map",))
                flat[f"{name}.%"] = str(len(value))
                for k, v in value.items():
                    flat[f"{name}.{k}"] = str(v)
            else:
                raise EncodingError(f"attribute {name!r}: unsupported value {value!r}")
        return flat

    @staticmethod
    def _expect(name: str, declared: Optional[str], accepted: tuple) -> None:
        if declared is not None and declared not in accepted:
            raise EncodingError(f"attribute {name!r}: expected {declared}, found {accepted[0]}")

    def config(self, flat: Dict[str, str]) -> Dict[str, Any]:
        """Payload without computed attributes, as it goes into configuration."""
        payload = self.encode(flat)
        for name in self.computed:
            payload.pop(name, None)
        return payload
