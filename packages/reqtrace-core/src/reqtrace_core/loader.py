"""Resolve test module factories from import paths.

Modules declared in the suite configuration may name their factory with
an import path (``"suite_modules.api:ApiTestingModule"`` or
``"suite_modules.api.ApiTestingModule"``). Paths are resolved once, at
startup, into an explicit ``category -> factory`` map handed to the
coordinator. A path that cannot be resolved is logged and left out of the
map; the coordinator then records that module as skipped.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterable

import structlog

from reqtrace_core.contract import TestModuleFactory
from reqtrace_core.errors import ModuleLoadError
from reqtrace_core.registry import ModuleDescriptor

logger = structlog.get_logger(__name__)


def load_factory(path: str) -> TestModuleFactory:
    """Import the factory named by ``path``.

    Args:
        path: ``"package.module:attr"`` or ``"package.module.attr"``.

    Returns:
        The imported callable.

    Raises:
        ModuleLoadError: If the module cannot be imported (or raises while
            importing), the attribute is missing, or it is not callable.
    """
    if ":" in path:
        module_name, _, attr_name = path.partition(":")
    else:
        module_name, _, attr_name = path.rpartition(".")

    if not module_name or not attr_name:
        raise ModuleLoadError(path, internal_details="expected 'package.module:attr'")

    try:
        mod = importlib.import_module(module_name)
    except Exception as e:
        # Includes errors raised by the module body while it is imported
        raise ModuleLoadError(path, internal_details=f"{type(e).__name__}: {e}") from e

    factory = getattr(mod, attr_name, None)
    if factory is None:
        raise ModuleLoadError(path, internal_details=f"{module_name} has no attribute {attr_name}")
    if not callable(factory):
        raise ModuleLoadError(path, internal_details=f"{attr_name} is not callable")
    return factory  # type: ignore[no-any-return]


def resolve_factories(descriptors: Iterable[ModuleDescriptor]) -> dict[str, TestModuleFactory]:
    """Build the ``category -> factory`` map for descriptors that declare one.

    Args:
        descriptors: Registered module descriptors.

    Returns:
        Factories for every descriptor whose import path resolved.
    """
    factories: dict[str, TestModuleFactory] = {}
    for descriptor in descriptors:
        if not descriptor.factory:
            continue
        try:
            factories[descriptor.category] = load_factory(descriptor.factory)
        except ModuleLoadError as e:
            logger.warning(
                "module_factory_unavailable",
                module=descriptor.name,
                factory=descriptor.factory,
                error=e.user_message,
            )
    return factories
