"""
The import pipeline: filter → cache → writers → interpolation → sync.
"""
import logging
from typing import List, Optional

from rich.console import Console

from tfreclaim.cache import Cache
from tfreclaim.errors import DuplicateKeyError, NotFoundError, UnsupportedResourceError
from tfreclaim.filter import Filter
from tfreclaim.interpolator import Interpolator
from tfreclaim.models.resource import Resource
from tfreclaim.provider import Provider
from tfreclaim.tag import force_resource_name, get_name_from_tag, random_name
from tfreclaim.writers.hcl import HCLWriter
from tfreclaim.writers.state import StateWriter

logger = logging.getLogger(__name__)


def _check_types(provider: Provider, types: List[str], origin: str) -> None:
    for t in types:
        if not provider.has_resource_type(t):
            raise UnsupportedResourceError(f"type {t} on {origin} filter is not supported by {provider}")


def _cached_resources(provider: Provider, cache: Cache, rtype: str, filters: Filter) -> List[Resource]:
    try:
        return cache.get(rtype)
    except NotFoundError:
        pass
    resources = provider.resources(rtype, filters)
    cache.set(rtype, resources)
    return resources


def _write(writer, resource: Resource) -> str:
    """
    Write ``resource`` under its tag derived name. A taken name is retried
    with the cloud ID appended and then with a random one.
    """
    for name in (
        resource.name,
        force_resource_name(f"{resource.name}_{resource.resource_id}".lower()),
    ):
        key = f"{resource.resource_type}.{name}"
        try:
            writer.write(key, resource)
            return name
        except DuplicateKeyError:
            logger.info("%s already written, retrying with another name", key)

    name = random_name()
    writer.write(f"{resource.resource_type}.{name}", resource)
    return name


def run(
    provider: Provider,
    hcl: Optional[HCLWriter],
    state: Optional[StateWriter],
    filters: Filter,
    cache: Optional[Cache] = None,
    out: Optional[Console] = None,
) -> Interpolator:
    """
    Import every resource of ``provider`` accepted by ``filters`` into the
    given writers and sync them. Returns the interpolator used.
    """
    cache = cache if cache is not None else Cache()
    out = out or Console(stderr=True)

    filters.validate()

    targets = filters.targets_types_with_ids()
    if targets:
        _check_types(provider, list(targets), "Target")
        types = list(targets)
    else:
        _check_types(provider, filters.include, "Include")
        _check_types(provider, filters.exclude, "Exclude")
        types = list(filters.include) or provider.resource_types()

    out.print(f"Importing with filters: {filters}")
    logger.info("filters: %s", filters)

    interpolator = Interpolator(provider.name)

    for rtype in types:
        if filters.is_excluded(rtype):
            logger.info("%s excluded", rtype)
            continue

        resources = _cached_resources(provider, cache, rtype, filters)
        if targets:
            wanted = set(targets[rtype])
            resources = [r for r in resources if r.resource_id in wanted]

        total = len(resources)
        logger.info("importing %d %s", total, rtype)
        for i, resource in enumerate(resources, 1):
            logger.debug("%s [%d/%d] id=%s", rtype, i, total, resource.resource_id)
            resource.name = get_name_from_tag(resource.tags, provider.tag_key, resource.resource_id)

            # Both outputs have to agree on the final name
            if hcl is not None:
                resource.name = _write(hcl, resource)
            if state is not None:
                resource.name = _write(state, resource)

            interpolator.add_resource_attributes(resource.qualified_name, resource.exported_attributes())

        if total:
            out.print(f"Importing {rtype} [{total}/{total}] Done!")

    if hcl is not None:
        hcl.interpolate(interpolator)
        out.print("Writing HCL ...")
        hcl.sync()
        out.print("Writing HCL Done!")

    if state is not None:
        state.interpolate(interpolator)
        out.print("Writing TFState ...")
        state.sync()
        out.print("Writing TFState Done!")

    return interpolator
