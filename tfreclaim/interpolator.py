"""
Reference resolution between imported resources.

Cloud APIs return flat literals (IDs, ARNs, IPs) that are often the output of
another resource imported in the same run. The Interpolator indexes every
imported resource's attributes and, given an attribute name and a literal,
guesses which resource attribute the literal came from so it can be written
as "${aws_vpc.main.id}" instead of "vpc-0abc".

Matching order:
  1. attribute name prefixes (ngrams) against resource groups, exact group
     first and then groups containing the ngram as a whole segment, shortest
     group name first;
  2. inside a group, the attribute named by what is left of the key, then
     any attribute with the same value;
  3. any resource attribute holding the value (last registered wins).
"""
import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# group -> resource name -> attribute -> value
Index = Dict[str, Dict[str, Dict[str, str]]]

# resource name -> attribute -> value
Instances = Dict[str, Dict[str, str]]

# (resources of a group, attribute, value) -> (resource name, attribute)
Strategy = Callable[[Instances, str, str], Optional[Tuple[str, str]]]

# (provider type, resource name, attribute)
_REFERENCE_RE = re.compile(r"^\$\{(.+)\.(.+)\.(.+)\}$")


def parse_reference(ref: str) -> Tuple[str, str, str]:
    """Split "${aws_instance.front.id}" into ("aws_instance", "front", "id")."""
    m = _REFERENCE_RE.match(ref)
    if not m:
        raise ValueError(f"{ref!r} is not a resource reference")
    return m.group(1), m.group(2), m.group(3)


def _ngrams(tokens: List[str]) -> List[str]:
    # 'virtual_machine_id' -> ['virtual_machine_id', 'virtual_machine', 'virtual']
    return ["_".join(tokens[:n]) for n in range(len(tokens), 0, -1)]


class Interpolator:
    """
    Created once per provider and fed with every resource as it gets
    imported. Not thread safe.
    """

    def __init__(self, provider: str):
        self.provider = provider
        self.resources: Index = {}
        self.values: Dict[str, str] = {}
        self.strategies: List[Strategy] = [
            self._exact_attribute,
            self._any_attribute,
        ]

    def add_resource_attributes(self, address: str, attrs: Dict[str, str]) -> None:
        """
        Register ``attrs`` for ``address`` ("aws_instance.front"). An address
        registered again has its attributes replaced, not merged.
        """
        rtype, name = address.split(".", 1)
        # references never carry the provider: 'aws_instance' -> 'instance'
        group = "_".join(rtype.split("_")[1:])
        self.resources.setdefault(group, {})[name] = dict(attrs)
        for k, v in attrs.items():
            self.values[v] = f"${{{address}.{k}}}"

    def interpolate(self, key: str, value: str) -> Tuple[str, bool]:
        """
        Return the best reference for attribute ``key`` holding ``value``, or
        ("", False) when no imported resource has it.
        """
        tokens = key.split("_")
        for ngi, ng in enumerate(_ngrams(tokens)):
            if ng in self.resources:
                ref = self._check_attributes(tokens, value, ngi, ng)
                if ref:
                    return ref, True

            pattern = re.compile(rf"^(.*_)?{re.escape(ng)}(_.*)?$")
            matches = sorted(
                (g for g in self.resources if pattern.match(g)),
                key=lambda g: (len(g), g),
            )
            for group in matches:
                ref = self._check_attributes(tokens, value, ngi, group)
                if ref:
                    return ref, True

        ref = self.values.get(value)
        if ref is not None:
            logger.debug("interpolated %s=%r through the value index: %s", key, value, ref)
            return ref, True
        return "", False

    def _check_attributes(self, tokens: List[str], value: str, ngi: int, group: str) -> str:
        # What the ngram left out is the attribute we expect to find:
        # 'virtual_machine_id' reaching 'virtual_machine' looks for 'id'
        attr = "_".join(tokens[len(tokens) - ngi:])
        instances = self.resources[group]
        for strategy in self.strategies:
            hit = strategy(instances, attr, value)
            if hit is not None:
                name, matched = hit
                return f"${{{self.provider}_{group}.{name}.{matched}}}"
        return ""

    @staticmethod
    def _exact_attribute(instances: Instances, attr: str, value: str) -> Optional[Tuple[str, str]]:
        for name in sorted(instances):
            if instances[name].get(attr) == value:
                return name, attr
        return None

    @staticmethod
    def _any_attribute(instances: Instances, attr: str, value: str) -> Optional[Tuple[str, str]]:
        for name in sorted(instances):
            attrs = instances[name]
            for k in sorted(attrs):
                if attrs[k] == value:
                    return name, k
        return None
