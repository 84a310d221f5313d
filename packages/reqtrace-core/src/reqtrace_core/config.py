"""Suite configuration models, loading, and validation.

The configuration holds environment settings for the test modules, the
enabled-category flags, quality thresholds, reporting options, the module
declarations, and the full requirement catalog.

Loading and validation are deliberately separate:

- ``load_config`` only rejects *malformed* input (unreadable file, YAML
  syntax errors, sections of the wrong type).
- ``validate_config`` never raises; it returns every semantic problem it
  finds so callers can report them all at once.

Keys are accepted in camelCase (``apiUrl``, ``testCategories``) or
snake_case (``api_url``, ``test_categories``).
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from reqtrace_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

REQUIREMENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+\.\d+$")
"""Requirement IDs are dotted ``<category>.<index>`` identifiers."""

SUPPORTED_FORMATS = ("json", "csv")

DEFAULT_CONFIG_RESOURCE = "suite.yaml"

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class EnvironmentConfig(BaseModel):
    """Target environment handed to every test module.

    Attributes:
        api_url: Backend API endpoint the modules probe
        spreadsheet_id: Backing spreadsheet identifier
        timeout_ms: Per-request timeout modules apply to their own network calls
        retries: Retry count modules apply to their own network calls
        test_mode: Whether modules should avoid destructive operations
    """

    model_config = _MODEL_CONFIG

    api_url: str = Field(default="", description="Backend API URL")
    spreadsheet_id: str = Field(default="", description="Spreadsheet identifier")
    timeout_ms: int = Field(default=10000, description="Module request timeout in ms")
    retries: int = Field(default=3, description="Module request retries")
    test_mode: bool = Field(default=True, description="Non-destructive test mode")


class ThresholdsConfig(BaseModel):
    """Quality thresholds.

    Attributes:
        success_rate_percent: Minimum overall score before a quality recommendation fires
        coverage_percent: Minimum requirement coverage
        data_integrity_percent: Minimum data integrity pass rate
        performance: Named performance budgets in milliseconds
    """

    model_config = _MODEL_CONFIG

    success_rate_percent: float = Field(default=95, description="Minimum success rate")
    coverage_percent: float = Field(default=90, description="Minimum requirement coverage")
    data_integrity_percent: float = Field(default=100, description="Minimum integrity rate")
    performance: dict[str, float] = Field(
        default_factory=lambda: {
            "cacheOperation": 10,
            "apiResponse": 2000,
            "sheetRead": 100,
            "reportGeneration": 1000,
            "offlineLoad": 500,
            "pwaInstall": 3000,
            "searchResponse": 300,
        },
        description="Performance budgets (ms)",
    )


class ReportingConfig(BaseModel):
    """Report export settings.

    Attributes:
        formats: Export formats written after a run
        destination: Directory reports are written to
        save_history: Keep timestamped reports from previous runs
        max_history_entries: Number of runs kept when history is enabled
        include_requirement_traceability: Embed the matrix in the JSON report
    """

    model_config = _MODEL_CONFIG

    formats: list[str] = Field(default_factory=lambda: ["json", "csv"])
    destination: str = Field(default="test/reports")
    save_history: bool = Field(default=True)
    max_history_entries: int = Field(default=50)
    include_requirement_traceability: bool = Field(default=True)


class ExecutionConfig(BaseModel):
    """Coordinator settings.

    Attributes:
        module_timeout_seconds: Watchdog applied around each module entry point
        slow_suite_threshold_ms: Total duration above which a performance
            recommendation fires
    """

    model_config = _MODEL_CONFIG

    module_timeout_seconds: float = Field(default=300)
    slow_suite_threshold_ms: int = Field(default=300_000)


class ModuleSpec(BaseModel):
    """Declaration of one test module in the suite configuration.

    Attributes:
        name: Human-readable module name (unique)
        category: Category key, matched against ``test_categories`` (unique)
        requirements: Requirement IDs the module is responsible for
        factory: Optional import path of the module factory ("pkg.module:attr")
    """

    model_config = _MODEL_CONFIG

    name: str
    category: str
    requirements: list[str] = Field(default_factory=list)
    factory: str | None = None


class SuiteConfig(BaseModel):
    """Complete suite configuration.

    Example:
        >>> config = SuiteConfig(
        ...     environment=EnvironmentConfig(api_url="https://api.example.com"),
        ...     test_categories={"api": True},
        ...     requirements={"2.1": "Test getBootstrapData endpoint"},
        ... )
    """

    model_config = _MODEL_CONFIG

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    test_categories: dict[str, bool] = Field(default_factory=dict)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    modules: list[ModuleSpec] = Field(default_factory=list)
    requirements: dict[str, str] = Field(default_factory=dict)

    @property
    def enabled_categories(self) -> list[str]:
        """Categories switched on in ``test_categories``."""
        return [name for name, enabled in self.test_categories.items() if enabled]


class ConfigIssue(BaseModel):
    """A single semantic problem found by ``validate_config``."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def load_config(source: Mapping[str, Any] | str | Path) -> SuiteConfig:
    """Load a suite configuration from a mapping or a YAML/JSON file.

    Args:
        source: Parsed mapping, or path to a ``.yaml``/``.yml``/``.json`` file.

    Returns:
        SuiteConfig. Values are not checked for sense; use ``validate_config``.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or a
            section has the wrong structural type.
    """
    file_path: str | None = None
    if isinstance(source, Mapping):
        data: Any = dict(source)
    else:
        file_path = str(source)
        data = _read_file(Path(source))

    if not isinstance(data, Mapping):
        raise ConfigurationError(
            "Suite configuration must be a mapping",
            file_path=file_path,
            internal_details=f"got {type(data).__name__}",
        )

    try:
        config = SuiteConfig.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            "Malformed suite configuration",
            file_path=file_path,
            field_path=field_path,
            issues=[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ],
            internal_details=str(e),
        ) from e

    logger.debug(
        "config_loaded",
        source=file_path or "mapping",
        requirements=len(config.requirements),
        modules=len(config.modules),
    )
    return config


def default_config() -> SuiteConfig:
    """Load the bundled suite definition.

    Returns:
        SuiteConfig with the standard requirement catalog and the ten standard modules.
    """
    text = resources.files("reqtrace_core").joinpath(DEFAULT_CONFIG_RESOURCE).read_text("utf-8")
    return load_config(yaml.safe_load(text))


def _read_file(path: Path) -> Any:
    if not path.exists():
        raise ConfigurationError("Configuration file not found", file_path=str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            "Configuration file could not be read",
            file_path=str(path),
            internal_details=str(e),
        ) from e

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            "Configuration file is not valid YAML/JSON",
            file_path=str(path),
            internal_details=str(e),
        ) from e


def validate_config(config: SuiteConfig) -> list[ConfigIssue]:
    """Check a loaded configuration for semantic problems.

    Never raises; an empty list means the configuration is usable.

    Args:
        config: Loaded configuration.

    Returns:
        All issues found, in a stable order.
    """
    issues: list[ConfigIssue] = []

    def add(field: str, message: str) -> None:
        issues.append(ConfigIssue(field=field, message=message))

    env = config.environment
    if not env.api_url.strip():
        add("environment.apiUrl", "API URL is required")
    if env.timeout_ms <= 0:
        add("environment.timeoutMs", "must be positive")
    if env.retries < 0:
        add("environment.retries", "must not be negative")

    if not config.enabled_categories:
        add("testCategories", "at least one category must be enabled")

    thresholds = config.thresholds
    for field, value in (
        ("thresholds.successRatePercent", thresholds.success_rate_percent),
        ("thresholds.coveragePercent", thresholds.coverage_percent),
        ("thresholds.dataIntegrityPercent", thresholds.data_integrity_percent),
    ):
        if value <= 0:
            add(field, "threshold must be positive")
    for name, value in thresholds.performance.items():
        if value <= 0:
            add(f"thresholds.performance.{name}", "threshold must be positive")

    if config.execution.module_timeout_seconds <= 0:
        add("execution.moduleTimeoutSeconds", "must be positive")
    if config.execution.slow_suite_threshold_ms <= 0:
        add("execution.slowSuiteThresholdMs", "must be positive")

    unsupported = [f for f in config.reporting.formats if f not in SUPPORTED_FORMATS]
    if unsupported:
        add("reporting.formats", f"unsupported format(s): {', '.join(unsupported)}")
    if config.reporting.max_history_entries <= 0:
        add("reporting.maxHistoryEntries", "must be positive")

    if not config.requirements:
        add("requirements", "requirement catalog is empty")
    for req_id in config.requirements:
        if not REQUIREMENT_ID_PATTERN.match(req_id):
            add(f"requirements.{req_id}", "expected '<category>.<index>'")

    return issues
