from dataclasses import dataclass, field
from typing import Any, Dict, List

from tfreclaim.models.schema import ResourceSchema
from tfreclaim.tag import Tag

EXPORTED = ("id", "name", "arn")


@dataclass
class Resource:
    provider: str          # "aws", "azurerm", "google"
    resource_type: str     # e.g. "aws_instance"
    resource_id: str       # cloud ID, e.g. "i-0abc123"
    name: str = ""         # resource name in the generated code, set on import
    attributes: Dict[str, str] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    schema: ResourceSchema = field(default_factory=ResourceSchema)

    @property
    def qualified_name(self) -> str:
        return f"{self.resource_type}.{self.name}"

    @property
    def schema_version(self) -> int:
        return self.schema.version

    def encode(self) -> Dict[str, Any]:
        return self.schema.encode(self.attributes)

    def config(self) -> Dict[str, Any]:
        return self.schema.config(self.attributes)

    def reference_attributes(self, items: bool = True) -> Dict[str, str]:
        """
        Non-empty string attributes, the only values that can be references.
        List items ("ids.0") are included when ``items`` is set; map entries
        and collection sizes never are.
        """
        out = {}
        for key, value in self.attributes.items():
            if not value:
                continue
            top, _, rest = key.partition(".")
            typ = self.schema.type_of(top, self.attributes)
            if not rest and typ == "string":
                out[key] = value
            elif items and rest.isdigit() and typ in ("list", "set"):
                out[key] = value
        return out

    def exported_attributes(self) -> Dict[str, str]:
        """Attributes other resources can point to: computed ones plus id, name and arn."""
        return {
            k: v for k, v in self.reference_attributes(items=False).items()
            if k in EXPORTED or k in self.schema.computed
        }

    def matches_tags(self, tags: List[Tag]) -> bool:
        """A resource is dropped only when it carries a filter tag with another value."""
        for t in tags:
            if t.name in self.tags and self.tags[t.name] != t.value:
                return False
        return True
