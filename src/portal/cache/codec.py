"""JSON codec for cached values.

Values cross the Redis boundary as UTF-8 JSON produced by orjson. Pydantic
models are dumped in JSON mode first so dates, UUIDs and decimals survive the
trip; typed reads go back through a pydantic ``TypeAdapter``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import orjson
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from portal.cache.errors import SerializationError

_any_adapter: TypeAdapter[Any] = TypeAdapter(Any)


@lru_cache(maxsize=128)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def encode(key: str, value: Any) -> bytes:
    """Serialize a value to JSON bytes."""
    try:
        return orjson.dumps(_any_adapter.dump_python(value, mode="json"))
    except (PydanticSerializationError, TypeError) as e:
        raise SerializationError(key, str(e)) from e


def decode(key: str, raw: bytes | str, model: Any = None) -> Any:
    """Deserialize JSON bytes, validating against ``model`` when given.

    ``model`` is any type pydantic can validate: a model class, ``list[Model]``,
    ``dict[str, int]`` and so on. Without it the plain JSON structure is returned.
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise SerializationError(key, str(e)) from e

    if model is None:
        return data

    try:
        return _adapter(model).validate_python(data)
    except ValidationError as e:
        raise SerializationError(key, str(e)) from e
