"""HTTP methods, request/response bodies and responses."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, SerializeAsAny

from raml_parser.errors import InvalidDefinitionError
from raml_parser.typesystem.base import BaseType
from raml_parser.typesystem.determine import determine_type
from raml_parser.typesystem.proxy import LazyProxyType

from .annotation import Annotation, AnnotationTarget, parse_annotations
from .named_parameter import NamedParameter
from .security import SecurityScheme, resolve_secured_by

if TYPE_CHECKING:
    from .api_definition import ApiDefinition

VALID_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE", "CONNECT")

DEFAULT_MEDIA_TYPE = "application/json"

TYPE_KEYS = ("type", "schema", "properties")


class Body(BaseModel):
    media_type: str
    type: SerializeAsAny[BaseType] | None = None
    example: Any = None
    description: str | None = None


class Response(BaseModel):
    status_code: int
    description: str | None = None
    headers: dict[str, NamedParameter] = {}
    bodies: dict[str, Body] = {}


class Method(BaseModel):
    type: str
    display_name: str | None = None
    description: str | None = None
    headers: dict[str, NamedParameter] = {}
    query_parameters: dict[str, NamedParameter] = {}
    protocols: list[str] = []
    bodies: dict[str, Body] = {}
    responses: dict[int, Response] = {}
    security_schemes: dict[str, SecurityScheme] = {}
    annotations: dict[str, Annotation] = {}

    @classmethod
    def from_definition(
        cls,
        verb: str,
        definition: Any,
        api: "ApiDefinition",
        security_schemes: Mapping[str, SecurityScheme] | None = None,
    ) -> "Method":
        """Build a method; its own `securedBy` entries are laid over the resource's schemes."""
        definition = definition or {}
        if not isinstance(definition, Mapping):
            raise InvalidDefinitionError(f"Invalid definition for method '{verb}'")

        method = cls(
            type=verb.upper(),
            display_name=definition.get("displayName"),
            description=definition.get("description"),
            headers=_parameters(definition.get("headers"), api),
            query_parameters=_parameters(definition.get("queryParameters"), api),
            protocols=[p.upper() for p in definition.get("protocols") or []],
            security_schemes=dict(security_schemes or {}),
        )
        if "securedBy" in definition:
            method.security_schemes.update(resolve_secured_by(definition["securedBy"], api.security_schemes))
        method.annotations = parse_annotations(definition, api.annotation_types, AnnotationTarget.METHOD)

        if definition.get("body") is not None:
            method.bodies = parse_bodies(definition["body"], api, f"{method.type} body")
        for code, response in (definition.get("responses") or {}).items():
            response = response or {}
            method.responses[int(code)] = Response(
                status_code=int(code),
                description=response.get("description"),
                headers=_parameters(response.get("headers"), api),
                bodies=parse_bodies(response.get("body") or {}, api, f"{method.type} {code} body"),
            )
        return method


def parse_bodies(definition: Any, api: "ApiDefinition", name: str) -> dict[str, Body]:
    """Parse a `body` node keyed by media type, or a single bare type body."""
    if isinstance(definition, str) or (
        isinstance(definition, Mapping) and any(key in definition for key in TYPE_KEYS)
    ):
        media_type = api.media_type or DEFAULT_MEDIA_TYPE
        return {media_type: _body(media_type, definition, api, name)}
    if not isinstance(definition, Mapping):
        raise InvalidDefinitionError(f"Invalid body definition for '{name}'")
    return {media_type: _body(media_type, body, api, name) for media_type, body in definition.items()}


def _body(media_type: str, definition: Any, api: "ApiDefinition", name: str) -> Body:
    if definition is None:
        return Body(media_type=media_type)

    body_type = None
    if isinstance(definition, str) or any(key in definition for key in TYPE_KEYS):
        body_type = determine_type(name, definition, api.types)
        if isinstance(body_type, LazyProxyType):
            body_type.resolve()
    example = definition.get("example") if isinstance(definition, Mapping) else None
    description = definition.get("description") if isinstance(definition, Mapping) else None
    return Body(media_type=media_type, type=body_type, example=example, description=description)


def _parameters(definition: Mapping | None, api: "ApiDefinition") -> dict[str, NamedParameter]:
    return {
        key: NamedParameter.from_definition(key, value, registry=api.types)
        for key, value in (definition or {}).items()
    }
