"""JSON boundary between Python values and cached strings."""

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json

from context_store.core.exceptions import SerializationError


@lru_cache(maxsize=128)
def _adapter(schema: Any) -> TypeAdapter[Any]:
    return TypeAdapter(schema)


def dumps(value: Any) -> str:
    """Encode a value (dicts, lists, scalars, pydantic models, datetimes) as JSON."""
    try:
        return to_json(value).decode("utf-8")
    except PydanticSerializationError as e:
        raise SerializationError(
            "Value is not JSON serializable",
            {"type": type(value).__name__, "error": str(e)},
        ) from e


def loads(raw: str | bytes, schema: Any = None) -> Any:
    """Decode JSON, optionally validating against ``schema``.

    ``schema`` is anything pydantic's ``TypeAdapter`` accepts: a model
    class, ``dict[str, int]``, ``list[MyModel]`` and so on.
    """
    try:
        return _adapter(schema if schema is not None else Any).validate_json(raw)
    except PydanticValidationError as e:
        raise SerializationError(
            "Cached value could not be decoded",
            {"schema": getattr(schema, "__name__", str(schema)), "error": str(e)},
        ) from e
