"""Scalar type variants: string, number, integer, boolean, nil and file."""

import math
import re
from typing import Any, ClassVar

from pydantic import Field

from .base import BaseType

INTEGER_FORMATS = {
    "int8": (-2**7, 2**7 - 1),
    "int16": (-2**15, 2**15 - 1),
    "int32": (-2**31, 2**31 - 1),
    "int64": (-2**63, 2**63 - 1),
    "int": (-2**31, 2**31 - 1),
    "long": (-2**63, 2**63 - 1),
}


class StringType(BaseType):
    """A string with optional length bounds and a regular expression."""

    kind: ClassVar[str] = "string"

    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, str):
            self._fail("Value is not a string.")
        if self.min_length is not None and len(value) < self.min_length:
            self._fail(f"Minimum allowed length: {self.min_length}.")
        if self.max_length is not None and len(value) > self.max_length:
            self._fail(f"Maximum allowed length: {self.max_length}.")
        if self.pattern is not None and re.search(self.pattern, value) is None:
            self._fail(f"String does not match required pattern: {self.pattern}.")
        self._check_enum(value)


class NumberType(BaseType):
    kind: ClassVar[str] = "number"

    minimum: int | float | None = None
    maximum: int | float | None = None
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")
    format: str | None = None

    def validate_value(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self._fail("Value is not a number.")
        self._check_bounds(value)
        self._check_enum(value)

    def _check_bounds(self, value: int | float) -> None:
        if self.minimum is not None and value < self.minimum:
            self._fail(f"Minimum allowed value: {self.minimum}.")
        if self.maximum is not None and value > self.maximum:
            self._fail(f"Maximum allowed value: {self.maximum}.")
        if self.multiple_of:
            remainder = math.fmod(value, self.multiple_of)
            if not (math.isclose(remainder, 0, abs_tol=1e-9)
                    or math.isclose(abs(remainder), abs(self.multiple_of), abs_tol=1e-9)):
                self._fail(f"Value must be a multiple of {self.multiple_of}.")


class IntegerType(NumberType):
    kind: ClassVar[str] = "integer"

    def validate_value(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            self._fail("Value is not an integer.")
        if self.format in INTEGER_FORMATS:
            low, high = INTEGER_FORMATS[self.format]
            if not low <= value <= high:
                self._fail(f"Value is out of range for format {self.format}.")
        self._check_bounds(value)
        self._check_enum(value)


class BooleanType(BaseType):
    kind: ClassVar[str] = "boolean"

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, bool):
            self._fail("Value is not a boolean.")
        self._check_enum(value)


class NilType(BaseType):
    kind: ClassVar[str] = "nil"

    def validate_value(self, value: Any) -> None:
        if value is not None:
            self._fail("Value is not null.")


class FileType(BaseType):
    """File content; only the byte length is checked, not the media type."""

    kind: ClassVar[str] = "file"

    file_types: list[str] | None = Field(default=None, alias="fileTypes")
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, (bytes, bytearray)):
            self._fail("Value is not file content.")
        if self.min_length is not None and len(value) < self.min_length:
            self._fail(f"Minimum allowed file size: {self.min_length} bytes.")
        if self.max_length is not None and len(value) > self.max_length:
            self._fail(f"Maximum allowed file size: {self.max_length} bytes.")
