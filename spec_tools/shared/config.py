"""Multi-part merge configuration.

The configuration can come from the caller or be embedded in the base
document under the ``x-multipart`` root extension, for example::

    x-multipart:
      enabled: true
      discovery: explicit
      parts:
        - api_Users.yaml
        - api_Orders.yaml
      paths: ErrorOnDuplicate
      schemas: MergeIfIdentical
      parameters: FirstWins
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Final, Mapping

from .errors import ConfigurationError

MULTIPART_EXTENSION_KEY: Final[str] = "x-multipart"


class MergeStrategy(str, Enum):
    """How to resolve a key defined by more than one file."""

    ERROR_ON_DUPLICATE = "ErrorOnDuplicate"
    FIRST_WINS = "FirstWins"
    LAST_WINS = "LastWins"
    MERGE_IF_IDENTICAL = "MergeIfIdentical"

    @classmethod
    def parse(
        cls,
        value: Any,
        field: str | None = None,
        source_path: str | None = None,
    ) -> MergeStrategy:
        """Parse a strategy name, ignoring case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        valid = ", ".join(m.value for m in cls)
        raise ConfigurationError(
            f"Unknown merge strategy {value!r} (expected one of: {valid})", source_path, field=field
        )


class Discovery(str, Enum):
    AUTO = "auto"
    EXPLICIT = "explicit"

    @classmethod
    def parse(
        cls,
        value: Any,
        field: str | None = None,
        source_path: str | None = None,
    ) -> Discovery:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        raise ConfigurationError(
            f"Unknown discovery mode {value!r} (expected 'auto' or 'explicit')", source_path, field=field
        )


# Accepted spellings per field, matched case-insensitively
_FIELD_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "enabled": ("enabled",),
    "discovery": ("discovery",),
    "parts": ("parts", "explicitparts"),
    "paths": ("paths", "pathsmergestrategy"),
    "schemas": ("schemas", "schemasmergestrategy"),
    "parameters": ("parameters", "parametersmergestrategy"),
}

_STRATEGY_DEFAULTS: Final[dict[str, MergeStrategy]] = {
    "paths": MergeStrategy.ERROR_ON_DUPLICATE,
    "schemas": MergeStrategy.ERROR_ON_DUPLICATE,
    "parameters": MergeStrategy.FIRST_WINS,
}


@dataclass(frozen=True, slots=True)
class MultiPartConfiguration:
    """Settings that control discovery and merging of part files."""

    enabled: bool = True
    discovery: Discovery = Discovery.AUTO
    parts: tuple[str, ...] = ()
    paths_strategy: MergeStrategy = MergeStrategy.ERROR_ON_DUPLICATE
    schemas_strategy: MergeStrategy = MergeStrategy.ERROR_ON_DUPLICATE
    parameters_strategy: MergeStrategy = MergeStrategy.FIRST_WINS

    DEFAULT: ClassVar[MultiPartConfiguration]
    DISABLED: ClassVar[MultiPartConfiguration]

    def __post_init__(self) -> None:
        # Structural comparison is only defined for schema definitions
        if self.paths_strategy is MergeStrategy.MERGE_IF_IDENTICAL:
            raise ConfigurationError("MergeIfIdentical is only valid for schemas", field="paths")
        if self.parameters_strategy is MergeStrategy.MERGE_IF_IDENTICAL:
            raise ConfigurationError("MergeIfIdentical is only valid for schemas", field="parameters")

    @property
    def is_explicit(self) -> bool:
        return self.discovery is Discovery.EXPLICIT

    @classmethod
    def from_mapping(cls, data: Any, source_path: str | None = None) -> MultiPartConfiguration:
        """Parse a configuration mapping such as the ``x-multipart`` block.

        Missing fields keep their defaults. Unknown fields are ignored.

        Raises:
            ConfigurationError: If a field has an invalid value.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Expected a mapping, got {type(data).__name__}",
                source_path,
                field=MULTIPART_EXTENSION_KEY,
            )

        values = _normalize_keys(data)

        enabled = values.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigurationError("Expected true or false", source_path, field="enabled")

        parts = values.get("parts") or []
        if not isinstance(parts, list) or not all(isinstance(p, str) for p in parts):
            raise ConfigurationError("Expected a list of file names", source_path, field="parts")

        strategies: dict[str, MergeStrategy] = {}
        for name, default in _STRATEGY_DEFAULTS.items():
            strategy = MergeStrategy.parse(values.get(name, default), name, source_path)
            if strategy is MergeStrategy.MERGE_IF_IDENTICAL and name != "schemas":
                raise ConfigurationError("MergeIfIdentical is only valid for schemas", source_path, field=name)
            strategies[name] = strategy

        return cls(
            enabled=enabled,
            discovery=Discovery.parse(values.get("discovery", Discovery.AUTO), "discovery", source_path),
            parts=tuple(p.strip() for p in parts if p.strip()),
            paths_strategy=strategies["paths"],
            schemas_strategy=strategies["schemas"],
            parameters_strategy=strategies["parameters"],
        )

    def to_mapping(self) -> dict[str, Any]:
        """Render the configuration as an ``x-multipart`` block."""
        result: dict[str, Any] = {
            "enabled": self.enabled,
            "discovery": self.discovery.value,
        }
        if self.parts:
            result["parts"] = list(self.parts)
        result["paths"] = self.paths_strategy.value
        result["schemas"] = self.schemas_strategy.value
        result["parameters"] = self.parameters_strategy.value
        return result


MultiPartConfiguration.DEFAULT = MultiPartConfiguration()
MultiPartConfiguration.DISABLED = MultiPartConfiguration(enabled=False)


def _normalize_keys(data: Mapping[Any, Any]) -> dict[str, Any]:
    lowered = {str(k).lower(): v for k, v in data.items()}
    values: dict[str, Any] = {}
    for name, aliases in _FIELD_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                values[name] = lowered[alias]
                break
    return values


def parse_multipart_extension(extensions: Mapping[str, Any], source_path: str | None = None) -> MultiPartConfiguration | None:
    """Parse the ``x-multipart`` extension, if present.

    Returns:
        The embedded configuration, or ``None`` when the extension is absent.

    Raises:
        ConfigurationError: If the extension is present but malformed.
    """
    for key, value in extensions.items():
        if str(key).lower() == MULTIPART_EXTENSION_KEY:
            return MultiPartConfiguration.from_mapping(value, source_path)
    return None
