from dataclasses import dataclass, field
from typing import Dict, List

from tfreclaim.filter import Filter
from tfreclaim.models.resource import Resource
from tfreclaim.models.schema import ResourceSchema


@dataclass
class Provider:
    """
    Discovered resources of one provider, grouped by type. Stands in for the
    cloud readers: everything here was already fetched.
    """
    name: str
    tag_key: str = "Name"
    schemas: Dict[str, ResourceSchema] = field(default_factory=dict)
    by_type: Dict[str, List[Resource]] = field(default_factory=dict)

    def add(self, resource: Resource) -> None:
        self.by_type.setdefault(resource.resource_type, []).append(resource)

    def resource_types(self) -> List[str]:
        return sorted(set(self.by_type) | set(self.schemas))

    def has_resource_type(self, rtype: str) -> bool:
        return rtype in self.by_type or rtype in self.schemas

    def resources(self, rtype: str, filters: Filter) -> List[Resource]:
        return [r for r in self.by_type.get(rtype, []) if r.matches_tags(filters.tags)]

    def __str__(self) -> str:
        return self.name
