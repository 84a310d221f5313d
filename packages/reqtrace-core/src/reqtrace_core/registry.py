"""Test module registry.

Holds the descriptors of the modules that make up a suite, in registration
order. Registration is the configuration integrity check: duplicate names
or categories and requirement IDs missing from the catalog are rejected
before anything runs.

The registry is an explicit value handed to the coordinator; there is no
module-level registry.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reqtrace_core.catalog import RequirementCatalog
from reqtrace_core.config import SuiteConfig
from reqtrace_core.errors import RegistrationError

logger = structlog.get_logger(__name__)


class ModuleDescriptor(BaseModel):
    """A registered test module.

    Attributes:
        name: Human-readable module name
        category: Category key; module results are keyed by it
        requirement_ids: Requirement IDs the module is responsible for
            (duplicates dropped, declaration order kept)
        enabled: Whether the module runs in this suite
        factory: Import path of the module factory, if declared in config

    Example:
        >>> descriptor = ModuleDescriptor(
        ...     name="API Testing",
        ...     category="apiTesting",
        ...     requirement_ids=("2.1", "2.2"),
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    requirement_ids: tuple[str, ...] = Field(default=())
    enabled: bool = Field(default=True)
    factory: str | None = Field(default=None)

    @field_validator("requirement_ids")
    @classmethod
    def _dedupe(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))


class ModuleRegistry:
    """Ordered collection of validated module descriptors.

    Example:
        >>> registry = ModuleRegistry(catalog)
        >>> registry.register(ModuleDescriptor(name="API", category="api"))
        >>> [d.name for d in registry.list_modules(enabled_only=True)]
        ['API']
    """

    def __init__(self, catalog: RequirementCatalog) -> None:
        self.catalog = catalog
        self._descriptors: list[ModuleDescriptor] = []
        self._log = logger.bind(component="module_registry")

    @classmethod
    def from_config(cls, config: SuiteConfig, catalog: RequirementCatalog) -> ModuleRegistry:
        """Register every module declared in the configuration.

        A module is enabled when its category is switched on in
        ``test_categories``; categories that are not listed count as off.

        Raises:
            RegistrationError: On the first invalid declaration.
        """
        registry = cls(catalog)
        for spec in config.modules:
            registry.register(
                ModuleDescriptor(
                    name=spec.name,
                    category=spec.category,
                    requirement_ids=tuple(spec.requirements),
                    enabled=config.test_categories.get(spec.category, False),
                    factory=spec.factory,
                )
            )
        return registry

    def register(self, descriptor: ModuleDescriptor) -> None:
        """Add a module descriptor.

        Raises:
            RegistrationError: If the name or category is already taken, or
                a declared requirement ID is not in the catalog.
        """
        for existing in self._descriptors:
            if existing.name == descriptor.name:
                raise RegistrationError(
                    f"Duplicate module name '{descriptor.name}'",
                    module_name=descriptor.name,
                )
            if existing.category == descriptor.category:
                raise RegistrationError(
                    f"Module '{descriptor.name}' reuses category '{descriptor.category}'",
                    module_name=descriptor.name,
                )

        unknown = self.catalog.missing(descriptor.requirement_ids)
        if unknown:
            raise RegistrationError(
                f"Module '{descriptor.name}' declares unknown requirements: {', '.join(unknown)}",
                module_name=descriptor.name,
                unknown_requirements=unknown,
            )

        self._descriptors.append(descriptor)
        self._log.debug(
            "module_registered",
            module=descriptor.name,
            category=descriptor.category,
            requirements=len(descriptor.requirement_ids),
            enabled=descriptor.enabled,
        )

    def list_modules(self, enabled_only: bool = False) -> list[ModuleDescriptor]:
        """Return descriptors in registration order."""
        if enabled_only:
            return [d for d in self._descriptors if d.enabled]
        return list(self._descriptors)

    def get(self, name: str) -> ModuleDescriptor | None:
        """Look up a descriptor by module name."""
        return next((d for d in self._descriptors if d.name == name), None)

    def __len__(self) -> int:
        return len(self._descriptors)
