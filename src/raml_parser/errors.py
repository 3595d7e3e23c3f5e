"""Exceptions raised while parsing RAML documents and validating values."""


class RamlError(Exception):
    """Base exception for all raml-parser errors."""
    pass


# Malformed input

class RamlParserError(RamlError):
    """Exception raised when a document or fragment has the wrong shape."""
    pass


class InvalidDefinitionError(RamlParserError):
    """Exception raised when a definition fragment has an unsupported data shape."""
    pass


class InvalidUriError(RamlParserError):
    """Exception raised when a resource URI does not start with a slash."""
    pass


class InvalidProtocolError(RamlParserError):
    """Exception raised for protocols other than HTTP and HTTPS."""
    pass


class MutuallyExclusiveElementsError(RamlParserError):
    """Exception raised when `schemas` and `types` are both declared."""

    def __init__(self, message: str = "'schemas' and 'types' are mutually exclusive"):
        super().__init__(message)


class InvalidSchemaDefinitionError(RamlParserError):
    """Exception raised for embedded schemas that cannot be decoded."""
    pass


class InvalidAnnotationTargetError(RamlParserError):
    """Exception raised when an annotation is used on a target it does not allow."""
    pass


# Reference errors

class RamlReferenceError(RamlError):
    """Exception raised when a named declaration cannot be found."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Undefined reference: '{key}'")


class UndefinedSecuritySchemeError(RamlReferenceError):
    def __init__(self, key: str):
        super().__init__(key, f"There is no security scheme named '{key}'")


class UndefinedAnnotationTypeError(RamlReferenceError):
    def __init__(self, key: str):
        super().__init__(key, f"There is no annotationType defined for a '{key}' annotation")


class UnresolvedTypeError(RamlReferenceError):
    def __init__(self, key: str, referenced_by: str | None = None):
        self.referenced_by = referenced_by
        message = f"Type '{key}' is not declared"
        if referenced_by:
            message += f" (referenced by '{referenced_by}')"
        super().__init__(key, message)


class InheritanceCycleError(RamlReferenceError):
    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(chain[0], "Cyclic type inheritance: " + " -> ".join(chain))


# Value validation

class TypeValidationError(RamlError):
    """Exception raised when a value does not satisfy a type's constraints.

    Carries the offending property name and a readable description of the
    violated constraint.
    """

    def __init__(self, property_name: str, constraint: str):
        self.property_name = property_name
        self.constraint = constraint
        super().__init__(f"{property_name}: {constraint}")


# Lookup misses

class NotFoundError(RamlError, LookupError):
    """Exception raised when a query against a parsed definition has no result."""
    pass


class ResourceNotFoundError(NotFoundError):
    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Resource not found for uri '{uri}'")


class MethodNotFoundError(NotFoundError):
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Method not found: '{method}'")
