"""The `#%RAML <version>[ <Fragment>]` document header.

RAML 0.8 documents carry no fragment. A RAML 1.0 header may name one of
the fragment kinds below; any other name is read as the default fragment.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from raml_parser.errors import RamlParserError

RAML_08 = "0.8"
RAML_10 = "1.0"

_HEADER_RE = re.compile(r"^#%RAML\s(?P<version>\d\.\d)\s?(?P<fragment>[a-zA-Z]+)?$")


class Fragment(str, Enum):
    DOCUMENTATION_ITEM = "DocumentationItem"
    DATA_TYPE = "DataType"
    NAMED_EXAMPLE = "NamedExample"
    RESOURCE_TYPE = "ResourceType"
    TRAIT = "Trait"
    ANNOTATION_TYPE_DECLARATION = "AnnotationTypeDeclaration"
    LIBRARY = "Library"
    OVERLAY = "Overlay"
    EXTENSION = "Extension"
    SECURITY_SCHEME = "SecurityScheme"
    DEFAULT = "Default"


@dataclass(frozen=True)
class RamlHeader:
    version: str
    fragment: Optional[Fragment] = None

    def __str__(self) -> str:
        if self.fragment is None:
            return f"#%RAML {self.version}"
        return f"#%RAML {self.version} {self.fragment.value}"


def parse_version(raw: str) -> str:
    """Return `raw` if it is a supported RAML version.

    Raises:
        RamlParserError: For anything other than 0.8 or 1.0.
    """
    if raw not in (RAML_08, RAML_10):
        raise RamlParserError(f"Invalid RAML version: {raw}")
    return raw


def parse_fragment(raw: str) -> Fragment:
    try:
        return Fragment(raw)
    except ValueError:
        return Fragment.DEFAULT


def parse_header(line: str) -> RamlHeader:
    """Parse the first line of a RAML document."""
    m = _HEADER_RE.match(line.strip())
    if m is None:
        raise RamlParserError(f"Invalid RAML header: {line!r}")

    version = parse_version(m.group("version"))
    if version != RAML_10 or m.group("fragment") is None:
        return RamlHeader(version=version)
    return RamlHeader(version=version, fragment=parse_fragment(m.group("fragment")))
