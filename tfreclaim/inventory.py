"""
Loads an inventory of discovered resources.

The inventory is what the cloud readers dumped for one provider:

    provider: aws
    tag_key: Name
    schemas:
      aws_instance:
        version: 1
        attributes: {id: string, subnet_id: string, ebs_optimized: bool}
        computed: [id, arn]
    resources:
      - type: aws_instance
        id: i-0abc
        attributes: {id: i-0abc, subnet_id: subnet-1, ebs_optimized: "false"}
        tags: {Name: front}
"""
import json
from typing import Any, Dict

import yaml

from tfreclaim.detect import detect_format
from tfreclaim.errors import ValidationError
from tfreclaim.models.resource import Resource
from tfreclaim.models.schema import ResourceSchema
from tfreclaim.provider import Provider


def _stringify(attrs: Any, where: str) -> Dict[str, str]:
    if attrs is None:
        return {}
    if not isinstance(attrs, dict):
        raise ValidationError(f"{where}: attributes must be a mapping")
    out = {}
    for k, v in attrs.items():
        if v is None:
            continue
        if isinstance(v, bool):
            v = "true" if v else "false"
        out[str(k)] = str(v)
    return out


def load(data: Dict[str, Any]) -> Provider:
    """Build a Provider from an already parsed inventory document."""
    if not isinstance(data, dict):
        raise ValidationError("the inventory must be a mapping")

    name = data.get("provider")
    if not name:
        raise ValidationError("the inventory has no 'provider'")

    schemas = {
        rtype: ResourceSchema.from_dict(sch)
        for rtype, sch in (data.get("schemas") or {}).items()
    }

    provider = Provider(name=name, tag_key=data.get("tag_key", "Name"), schemas=schemas)

    for i, raw in enumerate(data.get("resources") or []):
        where = f"resource #{i}"
        if not isinstance(raw, dict):
            raise ValidationError(f"{where}: must be a mapping")
        rtype = raw.get("type")
        rid = raw.get("id")
        if not rtype or not rid:
            raise ValidationError(f"{where}: 'type' and 'id' are required")
        if not rtype.startswith(f"{name}_"):
            raise ValidationError(f"{where}: type {rtype!r} does not belong to provider {name!r}")

        provider.add(Resource(
            provider=name,
            resource_type=rtype,
            resource_id=str(rid),
            attributes=_stringify(raw.get("attributes"), where),
            tags=_stringify(raw.get("tags"), where),
            schema=schemas.get(rtype, ResourceSchema()),
        ))

    return provider


def load_file(filepath: str) -> Provider:
    fmt = detect_format(filepath)
    if fmt == "unknown":
        raise ValidationError(f"unsupported inventory file {filepath!r}, expected .json, .yaml or .yml")

    try:
        with open(filepath, encoding="utf-8") as fh:
            data = json.load(fh) if fmt == "json" else yaml.safe_load(fh)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ValidationError(f"failed to read {filepath}: {exc}") from exc

    return load(data)
