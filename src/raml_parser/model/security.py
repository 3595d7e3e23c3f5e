"""Security schemes and `securedBy` resolution."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from raml_parser.errors import InvalidDefinitionError, UndefinedSecuritySchemeError

from .named_parameter import NamedParameter

if TYPE_CHECKING:
    from raml_parser.typesystem.registry import TypeRegistry

NULL_SCHEME_KEY = "null"


class SecuritySchemeDescription(BaseModel):
    """The `describedBy` block of a security scheme."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    headers: dict[str, NamedParameter] = {}
    query_parameters: dict[str, NamedParameter] = Field(default_factory=dict, alias="queryParameters")
    responses: dict[str, Any] = {}

    @classmethod
    def from_definition(
        cls, definition: Mapping, registry: "TypeRegistry | None" = None
    ) -> "SecuritySchemeDescription":
        return cls(
            headers=_parameters(definition.get("headers"), registry),
            query_parameters=_parameters(definition.get("queryParameters"), registry),
            responses={str(code): response for code, response in (definition.get("responses") or {}).items()},
        )


class SecurityScheme(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    type: str | None = None
    display_name: str | None = None
    description: str | None = None
    described_by: SecuritySchemeDescription = Field(default_factory=SecuritySchemeDescription)
    settings: dict[str, Any] = {}

    @classmethod
    def from_definition(
        cls, key: str, definition: Any = None, registry: "TypeRegistry | None" = None
    ) -> "SecurityScheme":
        definition = definition or {}
        if not isinstance(definition, Mapping):
            raise InvalidDefinitionError(f"Invalid definition for security scheme '{key}'")
        return cls(
            key=key,
            type=definition.get("type"),
            display_name=definition.get("displayName", key),
            description=definition.get("description"),
            described_by=SecuritySchemeDescription.from_definition(definition.get("describedBy") or {}, registry),
            settings=dict(definition.get("settings") or {}),
        )

    @classmethod
    def anonymous(cls) -> "SecurityScheme":
        """The scheme installed by a null `securedBy` entry."""
        return cls(key=NULL_SCHEME_KEY)

    @property
    def is_anonymous(self) -> bool:
        return self.key == NULL_SCHEME_KEY

    def merge_settings(self, overrides: Mapping | None) -> "SecurityScheme":
        """Return a copy of this scheme with `overrides` merged into its settings."""
        return self.model_copy(update={"settings": {**self.settings, **(overrides or {})}})


def resolve_secured_by(entries: Any, schemes: Mapping[str, SecurityScheme]) -> dict[str, SecurityScheme]:
    """Turn a `securedBy` list into security schemes keyed by name.

    An entry is either a falsy value (anonymous access), a scheme name, or a
    single-key mapping of scheme name to settings overrides.
    """
    if not isinstance(entries, list):
        entries = [entries]

    resolved: dict[str, SecurityScheme] = {}
    for entry in entries:
        if not entry:
            scheme = SecurityScheme.anonymous()
        elif isinstance(entry, Mapping):
            key, overrides = next(iter(entry.items()))
            scheme = _lookup(schemes, key).merge_settings(overrides)
        else:
            scheme = _lookup(schemes, entry)
        resolved[scheme.key] = scheme
    return resolved


def _lookup(schemes: Mapping[str, SecurityScheme], key: str) -> SecurityScheme:
    if key not in schemes:
        raise UndefinedSecuritySchemeError(key)
    return schemes[key]


def _parameters(definition: Mapping | None, registry: "TypeRegistry | None") -> dict[str, NamedParameter]:
    return {
        key: NamedParameter.from_definition(key, value, registry=registry)
        for key, value in (definition or {}).items()
    }
