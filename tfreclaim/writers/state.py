"""
Terraform state (format version 4) writer.
"""
import json
import logging
import threading
import uuid
from typing import IO, Any, Dict, List

from tfreclaim.errors import (
    DuplicateKeyError,
    EncodingError,
    InvalidTypeError,
    RequiredKeyError,
    RequiredValueError,
)
from tfreclaim.interpolator import Interpolator
from tfreclaim.models.resource import Resource
from tfreclaim.writers.base import Relations, accept_reference, parse_key, reference_target

logger = logging.getLogger(__name__)

STATE_VERSION = 4
TERRAFORM_VERSION = "1.5.7"


def provider_reference(provider: str) -> str:
    return f'provider["registry.terraform.io/hashicorp/{provider}"]'


class StateWriter:
    """
    Accumulates imported resources and serializes them as a state document.

    Every key is written once. The lineage is generated when the writer is
    created and kept for every sync; the serial starts at 1 and only grows
    when the document changed since the previous sync.
    """

    def __init__(self, out: IO[str], interpolate: bool = True):
        self.config: Dict[str, Resource] = {}
        self.records: List[Dict[str, Any]] = []
        self.lineage = str(uuid.uuid4())
        self.serial = 0
        self.interpolate_enabled = interpolate
        self._out = out
        self._lock = threading.Lock()
        self._dirty = False

    def write(self, key: str, value: Any) -> None:
        if not key:
            raise RequiredKeyError()
        if value is None:
            raise RequiredValueError()
        if key in self.config:
            raise DuplicateKeyError(f"with key {key!r}")

        _, name = parse_key(key)

        if not isinstance(value, Resource):
            raise InvalidTypeError(f"expected Resource, found {type(value).__name__}")

        attributes = value.encode()
        self.records.append({
            "mode": "managed",
            "type": value.resource_type,
            "name": name,
            "provider": provider_reference(value.provider),
            "instances": [
                {
                    "schema_version": value.schema_version,
                    "attributes": attributes,
                }
            ],
        })
        self.config[key] = value
        self._dirty = True
        logger.debug("writing %s to the state", key)

    def has(self, key: str) -> bool:
        return key in self.config

    def interpolate(self, interpolator: Interpolator) -> None:
        """Record in each instance the resources its attributes point to."""
        if not self.interpolate_enabled:
            return

        relations: Relations = set()
        for key, record in zip(self.config, self.records):
            resource = self.config[key]
            deps = set()
            for attr, value in sorted(resource.reference_attributes().items()):
                # computed attributes are the resource's own outputs
                if attr.split(".", 1)[0] in resource.schema.computed:
                    continue
                # list items resolve under their attribute name, as in the HCL
                ref, found = interpolator.interpolate(attr.split(".", 1)[0], value)
                if not found or not accept_reference(key, ref, relations):
                    continue
                deps.add(reference_target(ref)[1])

            for dep in deps:
                relations.add((key, dep))

            instance = record["instances"][0]
            if deps and instance.get("dependencies") != sorted(deps):
                instance["dependencies"] = sorted(deps)
                self._dirty = True
                logger.debug("%s depends on %s", key, ", ".join(sorted(deps)))

    def document(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "terraform_version": TERRAFORM_VERSION,
            "serial": self.serial,
            "lineage": self.lineage,
            "outputs": {},
            "resources": self.records,
        }

    def sync(self) -> None:
        """Serialize the document to the output stream in a single write."""
        with self._lock:
            serial = self.serial + 1 if (self._dirty or self.serial == 0) else self.serial

            for key, record in zip(self.config, self.records):
                schema = self.config[key].schema
                for instance in record["instances"]:
                    schema.decode(instance["attributes"], instance["schema_version"])

            doc = self.document()
            doc["serial"] = serial
            try:
                content = json.dumps(doc, indent=2, allow_nan=False) + "\n"
            except (TypeError, ValueError) as exc:
                raise EncodingError(f"unable to encode the state: {exc}") from exc

            logger.info("writing the state (serial %d, %d resources)", serial, len(self.records))
            if self._out.seekable():
                self._out.seek(0)
                self._out.truncate()
            self._out.write(content)
            self._out.flush()

            self.serial = serial
            self._dirty = False
