"""Load RAML documents from disk.

Decodes the YAML body with PyYAML and builds an ApiDefinition from it.
`!include` and other multi-file references are not followed.
"""

import logging
from pathlib import Path

import yaml

from raml_parser.errors import InvalidDefinitionError, RamlParserError
from raml_parser.header import Fragment, parse_header
from raml_parser.model.api_definition import ApiDefinition

logger = logging.getLogger(__name__)


def load_api_definition(file_path: Path) -> ApiDefinition:
    """Parse a RAML file into an ApiDefinition."""
    text = file_path.read_text(encoding="utf-8")
    api = parse_raml(text)
    logger.info("Loaded %s: '%s' with %d routes", file_path, api.title, len(api.get_routes()))
    return api


def parse_raml(text: str) -> ApiDefinition:
    """Parse RAML source text (header line included) into an ApiDefinition."""
    header = parse_header(text.split("\n", 1)[0])
    if header.fragment not in (None, Fragment.DEFAULT):
        raise RamlParserError(f"A {header.fragment.value} fragment is not an API definition")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RamlParserError(f"Invalid RAML document: {e}") from e

    if not isinstance(data, dict):
        raise InvalidDefinitionError("The RAML document root must be a mapping")
    if not data.get("title"):
        raise InvalidDefinitionError("The RAML document has no title")

    api = ApiDefinition.from_definition(str(data["title"]), data)
    api.raml_version = header.version
    return api
