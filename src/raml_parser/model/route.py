"""Flattened route entries for an API definition."""

from pydantic import BaseModel

from .method import Method
from .named_parameter import NamedParameter


class Route(BaseModel):
    """One HTTP verb on one full resource path."""

    base_url: str | None = None
    path: str
    protocols: list[str] = []
    verb: str
    uri_parameters: dict[str, NamedParameter] = {}
    method: Method

    @property
    def key(self) -> str:
        return f"{self.verb} {self.path}"
