"""
HCL configuration writer.
"""
import logging
import re
from typing import IO, Any, Dict, List, Tuple

import hcl2
from jinja2 import Environment

from tfreclaim.errors import DuplicateKeyError, EncodingError, InvalidTypeError, RequiredValueError
from tfreclaim.interpolator import Interpolator
from tfreclaim.models.resource import Resource
from tfreclaim.writers.base import Relations, accept_reference, parse_key, reference_target

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

_HCL_TEMPLATE = """
{%- for block in blocks %}
resource "{{ block.type }}" "{{ block.name }}" {
{%- for key, value in block.attributes %}
  {{ key }} = {{ value }}
{%- endfor %}
}
{% endfor -%}
"""


class Reference(str):
    """A value replaced by an interpolation; rendered without escaping."""


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


def render_value(value: Any, indent: int = 2) -> str:
    if isinstance(value, Reference):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        return "[" + ", ".join(render_value(v, indent) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = " " * (indent + 2)
        lines = [
            f"{pad}{k if _IDENTIFIER_RE.match(k) else _quote(k)} = {render_value(v, indent + 2)}"
            for k, v in sorted(value.items())
        ]
        return "{\n" + "\n".join(lines) + "\n" + " " * indent + "}"
    raise EncodingError(f"unsupported value {value!r}")


class HCLWriter:
    """Collects resource configurations and renders them as HCL."""

    def __init__(self, out: IO[str], interpolate: bool = True):
        # resource type -> resource name -> attributes
        self.config: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.interpolate_enabled = interpolate
        self._out = out

    def write(self, key: str, value: Any) -> None:
        rtype, name = parse_key(key)
        if value is None:
            raise RequiredValueError()
        if name in self.config.get(rtype, {}):
            raise DuplicateKeyError(f"with key {key!r}")

        if isinstance(value, Resource):
            block = value.config()
        elif isinstance(value, dict):
            block = dict(value)
        else:
            raise InvalidTypeError(f"expected Resource or dict, found {type(value).__name__}")

        self.config.setdefault(rtype, {})[name] = block
        logger.debug("writing %s to the configuration", key)

    def has(self, key: str) -> bool:
        rtype, name = parse_key(key)
        return name in self.config.get(rtype, {})

    def interpolate(self, interpolator: Interpolator) -> None:
        """
        Replace literal attribute values with references to the resources
        they came from. Map values (tags and the like) are left as they are.
        """
        if not self.interpolate_enabled:
            return

        relations: Relations = set()
        for rtype in sorted(self.config):
            for name in sorted(self.config[rtype]):
                source = f"{rtype}.{name}"
                block = self.config[rtype][name]
                for attr, value in block.items():
                    if isinstance(value, str):
                        block[attr] = self._resolve(interpolator, source, attr, value, relations)
                    elif isinstance(value, list):
                        block[attr] = [
                            self._resolve(interpolator, source, attr, v, relations)
                            if isinstance(v, str) else v
                            for v in value
                        ]

    @staticmethod
    def _resolve(interpolator: Interpolator, source: str, attr: str, value: str, relations: Relations) -> str:
        if not value or isinstance(value, Reference):
            return value
        ref, found = interpolator.interpolate(attr, value)
        if not found or not accept_reference(source, ref, relations):
            return value
        relations.add((source, reference_target(ref)[1]))
        return Reference(ref)

    def blocks(self) -> List[Dict[str, Any]]:
        out = []
        for rtype in sorted(self.config):
            for name in sorted(self.config[rtype]):
                out.append({
                    "type": rtype,
                    "name": name,
                    "attributes": _aligned(self.config[rtype][name]),
                })
        return out

    def render(self) -> str:
        env = Environment(autoescape=False, keep_trailing_newline=True)
        template = env.from_string(_HCL_TEMPLATE)
        return template.render(blocks=self.blocks()).lstrip("\n")

    def sync(self) -> None:
        content = self.render()
        try:
            hcl2.loads(content)
        except Exception as exc:
            raise EncodingError(f"generated configuration is not valid HCL: {exc}") from exc

        logger.info("writing the configuration (%d resource types)", len(self.config))
        if self._out.seekable():
            self._out.seek(0)
            self._out.truncate()
        self._out.write(content)
        self._out.flush()


def _aligned(attributes: Dict[str, Any]) -> List[Tuple[str, str]]:
    # Same alignment 'terraform fmt' applies to single-line attributes
    if not attributes:
        return []
    width = max(len(k) for k in attributes)
    return [(k.ljust(width), render_value(v)) for k, v in attributes.items()]
