"""JSON response decoding into typed outputs."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar, get_origin

from pydantic import TypeAdapter, ValidationError

from .errors import CentralDecodeError

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(output_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(output_type)


def decode_json(content: bytes, output_type: type[T] | Any) -> T:
    """Parse ``content`` as JSON into ``output_type``.

    Args:
        content: Raw response body.
        output_type: Any type pydantic can validate, e.g. ``User`` or
            ``list[Membership]``.

    Returns:
        A freshly constructed value of ``output_type``.

    Raises:
        CentralDecodeError: If the body is not valid JSON or does not match
            the expected shape.
    """
    try:
        value: T = _adapter(output_type).validate_json(content)
    except ValidationError as e:
        raise CentralDecodeError(
            f"Cannot decode response as {_type_name(output_type)}: {e}"
        ) from e
    return value


def _type_name(output_type: Any) -> str:
    if get_origin(output_type) is not None:
        return repr(output_type)
    return getattr(output_type, "__name__", None) or repr(output_type)
