"""Typed model over a parsed OpenAPI document.

The model is deliberately thin: operations, schemas and parameters stay the
plain mappings produced by the YAML/JSON parser. Schemas refer to each other
only through ``$ref`` strings, resolved by name against
``components.schemas``, so recursive schema graphs never need cyclic
ownership.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping

HTTP_METHODS: frozenset[str] = frozenset({
    "get", "put", "post", "delete", "options", "head", "patch", "trace",
})

SCHEMA_REF_PREFIX = "#/components/schemas/"
PARAMETER_REF_PREFIX = "#/components/parameters/"
EXTENSION_PREFIX = "x-"

_ROOT_KEYS = ("openapi", "info", "servers", "security", "tags", "paths", "components")
_COMPONENT_KEYS = ("schemas", "parameters", "securitySchemes")


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


@dataclass
class Components:
    """The ``components`` section: name-keyed arenas of reusable objects."""

    schemas: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)
    security_schemes: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Any) -> Components:
        data = _as_dict(data)
        return cls(
            schemas=_as_dict(data.get("schemas")),
            parameters=_as_dict(data.get("parameters")),
            security_schemes=_as_dict(data.get("securitySchemes")),
            extra={k: v for k, v in data.items() if k not in _COMPONENT_KEYS},
        )

    def to_mapping(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.schemas:
            result["schemas"] = dict(self.schemas)
        if self.parameters:
            result["parameters"] = dict(self.parameters)
        if self.security_schemes:
            result["securitySchemes"] = dict(self.security_schemes)
        result.update(self.extra)
        return result

    def clone(self) -> Components:
        return Components(
            schemas=dict(self.schemas),
            parameters=dict(self.parameters),
            security_schemes=dict(self.security_schemes),
            extra=dict(self.extra),
        )

    def is_empty(self) -> bool:
        return not (self.schemas or self.parameters or self.security_schemes or self.extra)


@dataclass
class SpecificationDocument:
    """In-memory OpenAPI document.

    ``extensions`` holds every ``x-*`` root key untouched; typed views such as
    the multi-part configuration are parsed from it on demand. ``extra`` keeps
    any other root key (``webhooks``, ``externalDocs``) so that dumping a
    document loses nothing.
    """

    openapi: str = "3.0.3"
    info: dict[str, Any] = field(default_factory=dict)
    paths: dict[str, Any] = field(default_factory=dict)
    components: Components = field(default_factory=Components)
    tags: list[dict[str, Any]] = field(default_factory=list)
    servers: list[Any] = field(default_factory=list)
    security: list[Any] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SpecificationDocument:
        """Build a document from a parsed YAML/JSON mapping."""
        extensions: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _ROOT_KEYS:
                continue
            if isinstance(key, str) and key.startswith(EXTENSION_PREFIX):
                extensions[key] = value
            else:
                extra[key] = value

        openapi = data.get("openapi")
        return cls(
            openapi=str(openapi) if openapi is not None else "",
            info=_as_dict(data.get("info")),
            paths=_as_dict(data.get("paths")),
            components=Components.from_mapping(data.get("components")),
            tags=[dict(t) for t in _as_list(data.get("tags")) if isinstance(t, Mapping)],
            servers=_as_list(data.get("servers")),
            security=_as_list(data.get("security")),
            extensions=extensions,
            extra=extra,
        )

    def to_mapping(self) -> dict[str, Any]:
        """Convert back to a plain mapping in conventional key order.

        Empty sections are omitted.
        """
        result: dict[str, Any] = {}
        if self.openapi:
            result["openapi"] = self.openapi
        if self.info:
            result["info"] = dict(self.info)
        if self.servers:
            result["servers"] = list(self.servers)
        result.update(self.extensions)
        if self.security:
            result["security"] = list(self.security)
        if self.tags:
            result["tags"] = [dict(t) for t in self.tags]
        if self.paths:
            result["paths"] = dict(self.paths)
        components = self.components.to_mapping()
        if components:
            result["components"] = components
        result.update(self.extra)
        return result

    def clone(self) -> SpecificationDocument:
        """Return a copy with new top-level collections.

        Leaf values (path items, schemas, parameters) are shared with the
        source, so the clone may be extended without mutating the original
        but its leaves must not be edited in place.
        """
        return SpecificationDocument(
            openapi=self.openapi,
            info=dict(self.info),
            paths=dict(self.paths),
            components=self.components.clone(),
            tags=list(self.tags),
            servers=list(self.servers),
            security=list(self.security),
            extensions=dict(self.extensions),
            extra=dict(self.extra),
        )

    @property
    def title(self) -> str | None:
        return self.info.get("title")

    @property
    def version(self) -> str | None:
        return self.info.get("version")

    def tag_names(self) -> list[str]:
        return [str(t["name"]) for t in self.tags if "name" in t]

    def operation_count(self) -> int:
        return sum(1 for _ in iter_operations(self))


@dataclass(frozen=True, slots=True)
class Operation:
    """One HTTP operation together with its location in the document."""

    path: str
    method: str
    definition: Mapping[str, Any]
    path_item: Mapping[str, Any]

    @property
    def tags(self) -> list[str]:
        return [str(t) for t in _as_list(self.definition.get("tags"))]

    @property
    def operation_id(self) -> str | None:
        return self.definition.get("operationId")


def iter_path_operations(path: str, path_item: Any) -> Iterator[Operation]:
    """Yield the operations of one path item in declaration order."""
    if not isinstance(path_item, Mapping):
        return
    for method, definition in path_item.items():
        if isinstance(method, str) and method.lower() in HTTP_METHODS and isinstance(definition, Mapping):
            yield Operation(path, method.lower(), definition, path_item)


def iter_operations(document: SpecificationDocument) -> Iterator[Operation]:
    """Yield every operation of ``document``, paths first in document order."""
    for path, path_item in document.paths.items():
        yield from iter_path_operations(path, path_item)


def ref_name(node: Any, prefix: str = SCHEMA_REF_PREFIX) -> str | None:
    """Return the component name a ``$ref`` node points at, if any.

    Examples:
        >>> ref_name({"$ref": "#/components/schemas/Pet"})
        'Pet'
        >>> ref_name({"type": "string"}) is None
        True
    """
    if not isinstance(node, Mapping):
        return None
    ref = node.get("$ref")
    if isinstance(ref, str) and ref.startswith(prefix):
        return ref[len(prefix):]
    return None


def schema_ref(name: str) -> dict[str, str]:
    return {"$ref": f"{SCHEMA_REF_PREFIX}{name}"}


def referenced_schema_names(schema: Any) -> list[str]:
    """Schema names referenced by ``schema`` itself, its ``items`` and its
    ``allOf`` members.

    Only one level is followed; object properties are not traversed.
    """
    if not isinstance(schema, Mapping):
        return []

    names: list[str] = []
    direct = ref_name(schema)
    if direct:
        names.append(direct)

    items = ref_name(schema.get("items"))
    if items:
        names.append(items)

    for member in _as_list(schema.get("allOf")):
        name = ref_name(member)
        if name:
            names.append(name)

    return names


def _content_schemas(container: Any) -> Iterator[Any]:
    if not isinstance(container, Mapping):
        return
    content = container.get("content")
    if not isinstance(content, Mapping):
        return
    for media in content.values():
        if isinstance(media, Mapping) and "schema" in media:
            yield media["schema"]


def operation_schema_names(operation: Mapping[str, Any]) -> list[str]:
    """Schema names used by an operation's request body and responses.

    Names are unique and in first-seen order.
    """
    seen: dict[str, None] = {}
    schemas = list(_content_schemas(operation.get("requestBody")))
    for response in _as_dict(operation.get("responses")).values():
        schemas.extend(_content_schemas(response))

    for schema in schemas:
        for name in referenced_schema_names(schema):
            seen.setdefault(name, None)
    return list(seen)


def operation_parameter_names(op: Operation) -> list[str]:
    """Component parameter names referenced at path or operation level."""
    seen: dict[str, None] = {}
    for source in (op.path_item.get("parameters"), op.definition.get("parameters")):
        for parameter in _as_list(source):
            name = ref_name(parameter, PARAMETER_REF_PREFIX)
            if name:
                seen.setdefault(name, None)
    return list(seen)


@dataclass(frozen=True, slots=True)
class SpecificationFile:
    """A specification file as read from disk.

    ``document`` is ``None`` when the text could not be parsed; the reason is
    kept in ``parse_error``.
    """

    path: Path
    content: str
    document: SpecificationDocument | None
    part_name: str | None = None
    is_base: bool = False
    parse_error: str | None = None

    @property
    def is_common(self) -> bool:
        return self.part_name is not None and self.part_name.lower() == "common"

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def path_count(self) -> int:
        return len(self.document.paths) if self.document else 0

    @property
    def schema_count(self) -> int:
        return len(self.document.components.schemas) if self.document else 0

    @property
    def parameter_count(self) -> int:
        return len(self.document.components.parameters) if self.document else 0

    @property
    def operation_count(self) -> int:
        return self.document.operation_count() if self.document else 0

    def tag_names(self) -> list[str]:
        return self.document.tag_names() if self.document else []
