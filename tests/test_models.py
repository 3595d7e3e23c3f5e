import pytest

from raml_parser.errors import (
    InvalidAnnotationTargetError,
    InvalidDefinitionError,
    TypeValidationError,
    UndefinedSecuritySchemeError,
)
from raml_parser.model.annotation import AnnotationTarget, AnnotationType
from raml_parser.model.security import SecurityScheme, resolve_secured_by
from raml_parser.typesystem.scalars import StringType


class TestSecurityScheme:
    def test_create_from_definition(self):
        scheme = SecurityScheme.from_definition("oauth", {
            "type": "OAuth 2.0",
            "describedBy": {
                "headers": {"Authorization": {"type": "string"}},
                "queryParameters": {"access_token": "string"},
                "responses": {401: {"description": "Bad token"}},
            },
            "settings": {"scopes": ["read"]},
        })
        assert scheme.type == "OAuth 2.0"
        assert scheme.display_name == "oauth"
        assert set(scheme.described_by.headers) == {"Authorization"}
        assert set(scheme.described_by.query_parameters) == {"access_token"}
        assert set(scheme.described_by.responses) == {"401"}

    def test_invalid_definition(self):
        with pytest.raises(InvalidDefinitionError):
            SecurityScheme.from_definition("oauth", ["not", "a", "mapping"])

    def test_merge_settings_returns_copy(self):
        scheme = SecurityScheme.from_definition("oauth", {"settings": {"scopes": ["read"], "uri": "x"}})
        merged = scheme.merge_settings({"scopes": ["write"]})

        assert merged.settings == {"scopes": ["write"], "uri": "x"}
        assert scheme.settings == {"scopes": ["read"], "uri": "x"}

    def test_anonymous(self):
        assert SecurityScheme.anonymous().is_anonymous
        assert not SecurityScheme(key="basic").is_anonymous


class TestResolveSecuredBy:
    SCHEMES = {"basic": SecurityScheme(key="basic"), "oauth": SecurityScheme(key="oauth")}

    def test_order_is_kept(self):
        assert list(resolve_secured_by(["oauth", None, "basic"], self.SCHEMES)) == ["oauth", "null", "basic"]

    def test_single_entry(self):
        assert list(resolve_secured_by("basic", self.SCHEMES)) == ["basic"]

    def test_unknown_scheme(self):
        with pytest.raises(UndefinedSecuritySchemeError) as exc_info:
            resolve_secured_by(["digest"], self.SCHEMES)
        assert exc_info.value.key == "digest"


class TestAnnotationType:
    def test_marker_annotation_has_no_value_type(self):
        annotation_type = AnnotationType.from_definition("deprecated", None)
        assert annotation_type.value_type is None
        assert annotation_type.allows(AnnotationTarget.METHOD)

    def test_string_shorthand_sets_value_type(self):
        annotation_type = AnnotationType.from_definition("owner", "string")
        assert isinstance(annotation_type.value_type, StringType)

    def test_allowed_targets(self):
        annotation_type = AnnotationType.from_definition("internal", {"allowedTargets": ["Resource", "Method"]})
        assert annotation_type.allows(AnnotationTarget.RESOURCE)
        assert not annotation_type.allows(AnnotationTarget.API)

    def test_unknown_target(self):
        with pytest.raises(InvalidAnnotationTargetError):
            AnnotationType.from_definition("internal", {"allowedTargets": ["Parameter"]})

    def test_validate_value(self):
        annotation_type = AnnotationType.from_definition("priority", {"type": "integer", "maximum": 5})
        annotation_type.validate_value(3)
        with pytest.raises(TypeValidationError):
            annotation_type.validate_value(9)
