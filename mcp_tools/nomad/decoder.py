"""Response decoding for catalog operations."""

from typing import Any, Dict

from pydantic import TypeAdapter, ValidationError

from .catalog import Operation, ResultMode
from .client import NomadDecodeError

_adapters: Dict[str, TypeAdapter] = {}
_ANY = TypeAdapter(Any)


def _adapter(operation: Operation) -> TypeAdapter:
    adapter = _adapters.get(operation.name)
    if adapter is None:
        adapter = TypeAdapter(operation.shape)
        _adapters[operation.name] = adapter
    return adapter


def decode_response(operation: Operation, raw: bytes, context: Dict[str, Any]) -> Any:
    """Turn a successful response body into the operation's result.

    TYPED bodies are validated against the declared shape, RAW bodies are
    returned as text without any reformatting and MESSAGE operations
    ignore the body entirely.

    Raises:
        NomadDecodeError: If a TYPED body is not valid JSON of the right shape
    """
    if operation.result_mode == ResultMode.RAW:
        return raw.decode("utf-8", errors="replace")

    if operation.result_mode == ResultMode.MESSAGE:
        try:
            return {"message": operation.message.format(**context)}
        except (KeyError, IndexError) as e:
            raise NomadDecodeError(f"Cannot render result message for {operation.name}: {e}") from e

    try:
        return _adapter(operation).validate_json(raw)
    except ValidationError as e:
        raise NomadDecodeError(f"Error decoding response for {operation.name}: {e}") from e


def to_jsonable(result: Any) -> Any:
    """Convert a decoded result to plain JSON data using Nomad's key names."""
    return _ANY.dump_python(result, mode="json", by_alias=True)
