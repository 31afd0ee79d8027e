"""Argument validation for catalog operations.

Each operation gets a pydantic model built from its argument schema the
first time it is invoked. Validation happens before any request is built,
so a bad call never reaches the network.
"""

from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StrictBool,
    StrictStr,
    StringConstraints,
    ValidationError,
    create_model,
)

from .catalog import Argument, ArgumentKind, Operation
from .client import NomadValidationError


def _to_int(value: Any) -> Any:
    # bool is an int subclass; JSON true/false is never a count
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    if isinstance(value, str):
        raise ValueError("expected a number, got a string")
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError) as e:
            raise ValueError(f"expected a finite number, got {value}") from e
    return value


def _to_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


Number = Annotated[int, BeforeValidator(_to_int)]
RequiredString = Annotated[str, StringConstraints(strict=True, min_length=1)]
StringList = Annotated[List[StrictStr], BeforeValidator(_to_list)]


class _ArgumentsBase(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _annotation(arg: Argument) -> Any:
    if arg.kind == ArgumentKind.STRING:
        if arg.allowed:
            choices = tuple(sorted(arg.allowed))
            # An empty optional enum means "unset"
            if not arg.required:
                choices = choices + ("",)
            return Literal[choices]
        return RequiredString if arg.required else StrictStr
    if arg.kind == ArgumentKind.NUMBER:
        return Number
    if arg.kind == ArgumentKind.BOOL:
        return StrictBool
    if arg.kind == ArgumentKind.MAP:
        return Dict[str, Any]
    if arg.kind == ArgumentKind.LIST:
        return StringList
    raise ValueError(f"Unknown argument kind: {arg.kind}")


_models: Dict[str, Type[BaseModel]] = {}


def arguments_model(operation: Operation) -> Type[BaseModel]:
    """Return (and cache) the pydantic model for an operation's arguments."""
    model = _models.get(operation.name)
    if model is not None:
        return model

    fields: Dict[str, Any] = {}
    for arg in operation.arguments:
        annotation = _annotation(arg)
        if arg.required:
            fields[arg.name] = (annotation, ...)
        else:
            fields[arg.name] = (Optional[annotation], arg.default)

    model = create_model(
        f"{operation.name.title().replace('_', '')}Arguments",
        __base__=_ArgumentsBase,
        **fields,
    )
    _models[operation.name] = model
    return model


def _describe(error: Dict[str, Any]) -> NomadValidationError:
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else None
    if error.get("type") == "missing":
        return NomadValidationError(f"Missing required argument: {field}", field=field)
    return NomadValidationError(f"Invalid value for '{field}': {error.get('msg')}", field=field)


def validate_arguments(operation: Operation, args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Validate raw tool arguments against an operation's schema.

    Unknown keys are dropped. Omitted optional arguments come back as
    their declared default (or None).

    Raises:
        NomadValidationError: On the first offending field
    """
    if args is None:
        args = {}
    if not isinstance(args, Mapping):
        raise NomadValidationError("Arguments must be an object")

    # Explicit nulls behave like omitted arguments
    cleaned = {k: v for k, v in args.items() if v is not None}

    model = arguments_model(operation)
    try:
        instance = model.model_validate(cleaned)
    except ValidationError as e:
        raise _describe(e.errors()[0]) from e

    values = instance.model_dump()
    for arg in operation.arguments:
        if values.get(arg.name) is None and arg.default is not None:
            values[arg.name] = arg.default
    return values


def json_schema(operation: Operation) -> Dict[str, Any]:
    """JSON Schema of an operation's arguments for tool listings."""
    properties: Dict[str, Any] = {}
    required = []
    for arg in operation.arguments:
        prop: Dict[str, Any] = {"description": arg.description}
        if arg.kind == ArgumentKind.STRING:
            prop["type"] = "string"
            if arg.allowed:
                prop["enum"] = sorted(arg.allowed)
        elif arg.kind == ArgumentKind.NUMBER:
            prop["type"] = "number"
        elif arg.kind == ArgumentKind.BOOL:
            prop["type"] = "boolean"
        elif arg.kind == ArgumentKind.MAP:
            prop["type"] = "object"
        elif arg.kind == ArgumentKind.LIST:
            prop["type"] = "array"
            prop["items"] = {"type": "string"}
        if arg.default is not None:
            prop["default"] = arg.default
        properties[arg.name] = prop
        if arg.required:
            required.append(arg.name)

    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema
