import pytest

from raml_parser.errors import (
    InvalidAnnotationTargetError,
    InvalidUriError,
    MethodNotFoundError,
    TypeValidationError,
    UndefinedAnnotationTypeError,
    UndefinedSecuritySchemeError,
)
from raml_parser.model.api_definition import ApiDefinition
from raml_parser.model.resource import Resource


def _api(data: dict | None = None) -> ApiDefinition:
    return ApiDefinition.from_definition("Test API", data or {})


class TestResourceConstruction:
    def test_uri_must_start_with_slash(self):
        with pytest.raises(InvalidUriError):
            Resource.from_definition("songs", {}, _api())

    def test_display_name_defaults_to_uri(self):
        resource = Resource.from_definition("/songs", {}, _api())
        assert resource.display_name == "/songs"

    def test_methods_and_nested_resources(self):
        resource = Resource.from_definition("/songs", {
            "get": {"description": "List songs"},
            "post": None,
            "/{songId}": {"delete": None},
        }, _api())

        assert set(resource.methods) == {"GET", "POST"}
        child = resource.resources["/{songId}"]
        assert child.uri == "/songs/{songId}"
        assert child.relative_uri == "/{songId}"
        assert set(child.methods) == {"DELETE"}

    def test_get_method_is_case_insensitive(self):
        resource = Resource.from_definition("/songs", {"get": None}, _api())
        assert resource.get_method("get").type == "GET"
        with pytest.raises(MethodNotFoundError):
            resource.get_method("put")

    def test_base_uri_parameters_inherited_from_api(self):
        api = _api({"baseUri": "https://{region}.example.com", "baseUriParameters": {"region": {"enum": ["eu"]}}})
        resource = Resource.from_definition("/songs", {}, api)
        assert resource.base_uri_parameters["region"].enum == ["eu"]


class TestUriParameterInheritance:
    def test_child_inherits_parent_parameters(self):
        resource = Resource.from_definition("/users/{userId}", {
            "uriParameters": {"userId": {"type": "integer"}},
            "/songs/{songId}": {"uriParameters": {"songId": {"type": "integer"}}},
        }, _api())

        child = resource.resources["/songs/{songId}"]
        assert set(child.uri_parameters) == {"userId", "songId"}

    def test_child_declaration_wins_on_collision(self):
        resource = Resource.from_definition("/users/{userId}", {
            "uriParameters": {"userId": {"type": "integer"}},
            "/x": {"uriParameters": {"userId": {"type": "string", "description": "override"}}},
        }, _api())

        assert resource.resources["/x"].uri_parameters["userId"].description == "override"
        assert resource.uri_parameters["userId"].type == "integer"


class TestSecurityInheritance:
    API = {
        "securitySchemes": {
            "oauth": {"type": "OAuth 2.0", "settings": {"scopes": ["read"]}},
            "basic": {"type": "Basic Authentication"},
        },
        "securedBy": ["oauth"],
    }

    def test_api_security_applies_to_resource_and_method(self):
        resource = Resource.from_definition("/songs", {"get": None}, _api(self.API))
        assert list(resource.security_schemes) == ["oauth"]
        assert list(resource.get_method("GET").security_schemes) == ["oauth"]

    def test_null_entry_is_added_to_inherited_schemes(self):
        resource = Resource.from_definition("/public", {"securedBy": [None]}, _api(self.API))
        assert list(resource.security_schemes) == ["oauth", "null"]
        assert resource.security_schemes["null"].is_anonymous

    def test_declared_schemes_overlay_inherited_ones(self):
        resource = Resource.from_definition("/songs", {"securedBy": ["basic"]}, _api(self.API))
        assert set(resource.security_schemes) == {"oauth", "basic"}

    def test_inline_settings_clone_named_scheme(self):
        api = _api(self.API)
        resource = Resource.from_definition("/admin", {"securedBy": [{"oauth": {"scopes": ["write"]}}]}, api)

        assert resource.security_schemes["oauth"].settings["scopes"] == ["write"]
        assert api.security_schemes["oauth"].settings["scopes"] == ["read"]

    def test_method_overlays_resource_schemes(self):
        resource = Resource.from_definition("/songs", {"get": {"securedBy": ["basic"]}}, _api(self.API))
        assert list(resource.get_method("GET").security_schemes) == ["oauth", "basic"]
        assert list(resource.security_schemes) == ["oauth"]

    def test_undeclared_scheme(self):
        with pytest.raises(UndefinedSecuritySchemeError):
            Resource.from_definition("/songs", {"securedBy": ["digest"]}, _api(self.API))


class TestAnnotations:
    API = {
        "annotationTypes": {
            "deprecated": {"allowedTargets": ["Resource"]},
            "methodOnly": {"allowedTargets": ["Method"]},
            "owner": "string",
        },
    }

    def test_annotation_on_resource(self):
        resource = Resource.from_definition("/songs", {"(owner)": "team-a"}, _api(self.API))
        assert resource.annotations["owner"].value == "team-a"

    def test_annotations_flow_to_nested_resources(self):
        resource = Resource.from_definition("/songs", {
            "(deprecated)": None,
            "/{id}": {"(owner)": "team-b"},
        }, _api(self.API))

        child = resource.resources["/{id}"]
        assert set(child.annotations) == {"deprecated", "owner"}

    def test_undeclared_annotation_type(self):
        with pytest.raises(UndefinedAnnotationTypeError):
            Resource.from_definition("/songs", {"(unknown)": 1}, _api(self.API))

    def test_disallowed_target(self):
        with pytest.raises(InvalidAnnotationTargetError):
            Resource.from_definition("/songs", {"(methodOnly)": True}, _api(self.API))

    def test_allowed_on_method(self):
        resource = Resource.from_definition("/songs", {"get": {"(methodOnly)": True}}, _api(self.API))
        assert resource.get_method("get").annotations["methodOnly"].value is True


class TestMatchesUri:
    def test_templated_segment(self):
        resource = Resource.from_definition("/songs/{songId}", {}, _api())
        assert resource.matches_uri("/songs/123")
        assert not resource.matches_uri("/songs/123/extra")
        assert not resource.matches_uri("/songs")

    def test_declared_parameter_pattern(self):
        resource = Resource.from_definition(
            "/songs/{songId}", {"uriParameters": {"songId": {"type": "integer"}}}, _api()
        )
        assert resource.matches_uri("/songs/42")
        assert not resource.matches_uri("/songs/abc")

    def test_query_string_ignored(self):
        resource = Resource.from_definition("/songs/{songId}", {}, _api())
        assert resource.matches_uri("/songs/1?x=1")

    def test_optional_placeholder(self):
        resource = Resource.from_definition("/files/~{name}", {}, _api())
        assert resource.matches_uri("/files/")
        assert resource.matches_uri("/files/a.txt")

    def test_declared_optional_placeholder(self):
        resource = Resource.from_definition(
            "/files/~{version}", {"uriParameters": {"version": {"type": "integer"}}}, _api()
        )
        assert resource.matches_uri("/files/")
        assert resource.matches_uri("/files/3")
        assert not resource.matches_uri("/files/v3")

    def test_literal_characters_are_escaped(self):
        resource = Resource.from_definition("/songs.json", {}, _api())
        assert resource.matches_uri("/songs.json")
        assert not resource.matches_uri("/songsxjson")


class TestMethodParameters:
    def test_query_parameters_accept_type_expressions(self):
        api = _api({"types": {"Genre": {"type": "string", "enum": ["rock", "jazz"]}}})
        resource = Resource.from_definition("/songs", {
            "get": {"queryParameters": {"tags": "string[]", "genre": "Genre", "page": "integer?"}},
        }, api)

        params = resource.get_method("GET").query_parameters
        params["tags"].validate_value(["live"])
        params["genre"].validate_value("jazz")
        with pytest.raises(TypeValidationError):
            params["genre"].validate_value("polka")
        assert params["page"].required is False
