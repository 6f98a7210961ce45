"""Decoding of registry JSON documents into metadata models."""

from __future__ import annotations

from typing import Any, Callable, Dict, TypeVar

from common.errors import InvalidMetadataError
from common.http_models import FetchedResponse

T = TypeVar("T")


def decode_metadata(url: str, response: FetchedResponse, build: Callable[[Dict[str, Any]], T]) -> T:
    """Parse ``response`` as a JSON object and hand it to ``build``.

    Raises:
        InvalidMetadataError: the body is not JSON, not an object, or has
            fields of the wrong shape.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise InvalidMetadataError(url, f"not JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise InvalidMetadataError(url, f"expected an object, got {type(data).__name__}")
    try:
        return build(data)
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidMetadataError(url, str(exc)) from exc
