"""Exceptions, settings and shared types."""

from ._config import Settings, settings
from ._exceptions import AmbiguousPathMatch, DataError, MalformedModel
from ._exceptions import NoActiveReveal
from ._types import JSONObject, JSONScalar, JSONValue

__all__ = [
    "Settings",
    "settings",
    "DataError",
    "MalformedModel",
    "NoActiveReveal",
    "AmbiguousPathMatch",
    "JSONObject",
    "JSONScalar",
    "JSONValue",
]
