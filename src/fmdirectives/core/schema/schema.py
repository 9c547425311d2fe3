#!/usr/bin/env python3
"""
Purpose:
    Implements the Schema / SchemaProperty models: a JSON-Schema-shaped
    property tree whose `x-*` extension keys are gathered, bound to the
    dotted path of their property, and parsed once into typed directives.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, model_validator

from fmdirectives.core import constants as C
from fmdirectives.core.errors import EngineError, InvalidFormatError
from fmdirectives.core.formatting import format_pydantic_errors_simple
from fmdirectives.core.schema.directive_kind import DirectiveKind
from fmdirectives.core.schema.directives import Directive, collect_extensions, parse_directives


# --- Model --- #

class SchemaProperty(BaseModel):
    """
    One property node of a schema.

    Authoring:
      - `type`, `properties`, `items`, `description` as in JSON Schema
      - directive keys either directly on the node or inside an
        `extensions` object (direct keys win)

    Unknown JSON-Schema keywords (`required`, `minLength`, `$ref`, ...) are
    accepted and ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
    _path: str = PrivateAttr(default="")
    _directives: List[Directive] = PrivateAttr(default_factory=list)

    schema_type: Optional[Union[str, List[str]]] = Field(default=None, alias="type")
    description: Optional[str] = Field(default=None)
    properties: Dict[str, "SchemaProperty"] = Field(default_factory=dict)
    items: Optional["SchemaProperty"] = Field(default=None)
    extensions: Dict[str, Any] = Field(default_factory=dict)

    # --- Pre-parse: gather extension keys --- #
    @model_validator(mode="before")
    @classmethod
    def _gather_extensions(cls, data: Any) -> Any:
        """
        Collect `x-*` keys from the `extensions` sub-object and from the node
        itself into one `extensions` mapping. Tuple-form or boolean `items`
        are dropped (only a single item schema is modelled).
        """
        if not isinstance(data, dict):
            return data

        out = {k: v for k, v in data.items() if not (isinstance(k, str) and k.startswith("x-"))}
        out[C.EXTENSIONS_KEY] = collect_extensions(data)
        if "items" in out and not isinstance(out["items"], (dict, SchemaProperty)):
            out.pop("items")
        if not isinstance(out.get("properties", {}), dict):
            out.pop("properties")
        return out

    # --- Convenience --- #

    @property
    def path(self) -> str:
        """Dotted path of this node (`[]` marks array items)."""
        return self._path

    @property
    def name(self) -> str:
        return self._path.rsplit(".", 1)[-1] if self._path else ""

    @property
    def directives(self) -> List[Directive]:
        return list(self._directives)

    def has_type(self, type_name: str) -> bool:
        if isinstance(self.schema_type, list):
            return type_name in self.schema_type
        return self.schema_type == type_name

    @property
    def is_array(self) -> bool:
        return self.has_type("array")

    @property
    def is_object(self) -> bool:
        return self.has_type("object") or (self.schema_type is None and bool(self.properties))

    @property
    def frontmatter_part(self) -> bool:
        value = self.extensions.get(C.X_FRONTMATTER_PART)
        return value is not None and value is not False

    def directive(self, kind: DirectiveKind) -> Optional[Directive]:
        for d in self._directives:
            if d.kind == kind.value:
                return d
        return None

    def first_scalar_field(self) -> Optional[str]:
        """Name of the first declared property whose type is a JSON scalar."""
        for name, child in self.properties.items():
            if any(child.has_type(t) for t in ("string", "number", "integer", "boolean")):
                return name
        return None


class Schema(BaseModel):
    """
    Root of a directive-carrying JSON-Schema definition.

    On construction we:
        1) assign each property node its dotted `path`
        2) parse every node's extension block into typed directives

    Use `from_dict` / `from_file` to get engine errors (`InvalidFormatError`,
    `InvalidPathError`) instead of a Pydantic `ValidationError`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
    _raw: Dict[str, Any] = PrivateAttr(default_factory=dict)

    schema_uri: Optional[str] = Field(default=None, alias="$schema")
    title: Optional[str] = Field(default=None)
    schema_type: Optional[Union[str, List[str]]] = Field(default="object", alias="type")
    properties: Dict[str, SchemaProperty] = Field(default_factory=dict)

    # --- Normalization --- #

    @model_validator(mode="after")
    def _post_init(self) -> "Schema":
        self._bind(self.properties, parent_path="")
        return self

    @classmethod
    def _bind(cls, props: Dict[str, SchemaProperty], parent_path: str) -> None:
        for name, prop in props.items():
            path = f"{parent_path}.{name}" if parent_path else name
            cls._bind_node(prop, path)

    @classmethod
    def _bind_node(cls, prop: SchemaProperty, path: str) -> None:
        prop._path = path
        prop._directives = parse_directives(prop.extensions, path, target_is_array=prop.is_array)
        cls._bind(prop.properties, parent_path=path)
        if prop.items is not None:
            # `[]` keeps item-level targets distinct from the array node itself
            cls._bind_node(prop.items, f"{path}[]")

    # --- Queries --- #

    def iter_properties(self) -> Iterator[Tuple[str, SchemaProperty]]:
        """Depth-first walk in declaration order; yields `(path, property)`."""
        for prop in self.properties.values():
            yield from _walk(prop)

    def get_property(self, path: str) -> Optional[SchemaProperty]:
        for p, prop in self.iter_properties():
            if p == path:
                return prop
        return None

    def directives(self, kind: Optional[DirectiveKind] = None) -> List[Directive]:
        """All directives in declaration order, optionally of one kind."""
        out: List[Directive] = []
        for _, prop in self.iter_properties():
            out.extend(d for d in prop.directives if kind is None or d.kind == kind.value)
        return out

    def directive_kinds(self) -> List[DirectiveKind]:
        """Distinct kinds present, in precedence order."""
        present = {DirectiveKind(d.kind) for d in self.directives()}
        return sorted(present, key=lambda k: k.priority)

    def find_frontmatter_part(self) -> Optional[Tuple[str, SchemaProperty]]:
        """First property marked `x-frontmatter-part` (depth-first), or None."""
        for path, prop in self.iter_properties():
            if prop.frontmatter_part:
                return path, prop
        return None

    @property
    def raw(self) -> Dict[str, Any]:
        """The mapping this schema was built from (empty if built otherwise)."""
        return self._raw

    # --- Construction --- #

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """
        Build a Schema from a parsed JSON-Schema mapping.

        Raises:
            InvalidFormatError: malformed schema or directive value shape
            InvalidPathError: unparsable directive path expression
        """
        if not isinstance(data, dict):
            raise InvalidFormatError(f"Schema must be a JSON object, got {type(data).__name__}")
        try:
            schema = cls.model_validate(data)
        except ValidationError as e:
            original = _engine_error_from(e)
            if original is not None:
                raise original from e
            raise InvalidFormatError("Invalid schema: " + "; ".join(format_pydantic_errors_simple(e))) from e
        schema._raw = data
        return schema

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Schema":
        """
        Load a Schema from a JSON file.

        Raises:
            FileNotFoundError: if the file does not exist
            InvalidFormatError: if the extension is unsupported, the JSON is
                malformed, or the payload fails validation
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"The file {str(p)!r} does not exist")
        if p.suffix.lower() not in C.SUPPORTED_SCHEMA_EXT:
            raise InvalidFormatError(
                f"Invalid schema file extension for {p.name!r}; expected one of {sorted(C.SUPPORTED_SCHEMA_EXT)}"
            )
        try:
            data = json.loads(p.read_text(encoding=C.DEFAULT_TEXT_ENCODING))
        except json.JSONDecodeError as e:
            raise InvalidFormatError(f"Invalid JSON in {p.name!r}: {e.msg} (line {e.lineno}, col {e.colno})") from e
        return cls.from_dict(data)


# --- Internals --- #

def _walk(prop: SchemaProperty) -> Iterator[Tuple[str, SchemaProperty]]:
    yield prop.path, prop
    for child in prop.properties.values():
        yield from _walk(child)
    if prop.items is not None:
        yield from _walk(prop.items)


def _engine_error_from(exc: ValidationError) -> Optional[EngineError]:
    """Recover an engine error raised inside a validator, if any."""
    for err in exc.errors():
        original = (err.get("ctx") or {}).get("error")
        if isinstance(original, EngineError):
            return original
    return None


SchemaProperty.model_rebuild()
