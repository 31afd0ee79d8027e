"""Invocation pipeline for Nomad operations.

validate -> preflight -> build request -> execute -> decode. Every
failure surfaces as a ``NomadError`` subclass; nothing is retried.
"""

import json
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from logging_config import get_logger, ToolInvocationLogger

from .catalog import Operation, ResultMode, get_operation
from .client import (
    NomadClient,
    NomadDecodeError,
    NomadValidationError,
    get_nomad_client,
)
from .decoder import decode_response
from .request_builder import NomadRequest, build_request
from .validation import validate_arguments

logger = get_logger(__name__)

JOB_PARSE_PATH = "jobs/parse"


async def _parse_job_spec(
    client: NomadClient,
    args: Dict[str, Any],
    timeout: Optional[float],
) -> Dict[str, Any]:
    """Convert an HCL job specification to JSON using the agent's parser.

    JSON specifications are passed through without a round trip.
    """
    spec = args["job_spec"]
    try:
        json.loads(spec)
        return args
    except ValueError:
        pass

    parse_request = NomadRequest(
        method="POST",
        path=JOB_PARSE_PATH,
        body={"JobHCL": spec, "Canonicalize": True},
    )
    raw = await client.execute(parse_request, timeout=timeout)
    try:
        job = json.loads(raw)
    except ValueError as e:
        raise NomadDecodeError(f"Error decoding parsed job specification: {e}") from e

    return {**args, "job_spec": json.dumps(job)}


Preflight = Callable[[NomadClient, Dict[str, Any], Optional[float]], Awaitable[Dict[str, Any]]]

PREFLIGHTS: Dict[str, Preflight] = {
    "parse_job_spec": _parse_job_spec,
}


def _log_context(args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    # Prefixed so argument names never clash with LogRecord attributes
    if not isinstance(args, Mapping):
        return {}
    return {
        f"arg_{key}": value
        for key, value in args.items()
        if isinstance(value, (str, int, float, bool))
    }


def _result_info(operation: Operation, result: Any) -> Dict[str, Any]:
    if operation.result_mode == ResultMode.RAW:
        return {"result_chars": len(result)}
    if isinstance(result, list):
        return {"item_count": len(result)}
    return {}


def _install_token(client: NomadClient, result: Any) -> None:
    secret = getattr(result, "secret_id", "")
    if not secret:
        raise NomadDecodeError("Bootstrap response did not contain a SecretID")
    client.set_token(secret)
    logger.info("Installed bootstrap ACL token", extra={"accessor_id": result.accessor_id})


async def invoke(
    name: str,
    args: Optional[Mapping[str, Any]] = None,
    client: Optional[NomadClient] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Invoke a catalog operation by name.

    Args:
        name: Operation name (e.g. "list_jobs")
        args: Caller-supplied arguments
        client: Client to use (defaults to the process-wide client)
        timeout: Optional per-call deadline in seconds; can only shorten
            the fixed request timeout

    Returns:
        Decoded result (pydantic models or lists of them), raw text, or a
        ``{"message": ...}`` dict depending on the operation's result mode

    Raises:
        NomadValidationError: Unknown operation or invalid arguments (no request sent)
        NomadConnectionError: Agent unreachable
        NomadAPIError: Agent answered with status >= 400
        NomadDecodeError: Response did not match the declared shape
    """
    operation = get_operation(name)
    if operation is None:
        raise NomadValidationError(f"Unknown operation: {name}", field="operation")

    invocation_logger = ToolInvocationLogger(logger)
    invocation_logger.start(name, **_log_context(args))

    try:
        values = validate_arguments(operation, args)

        if client is None:
            client = await get_nomad_client()

        if operation.preflight:
            values = await PREFLIGHTS[operation.preflight](client, values, timeout)

        request = build_request(operation, values)
        raw = await client.execute(request, timeout=timeout)
        result = decode_response(operation, raw, request.context)

        if operation.installs_token:
            _install_token(client, result)

    except Exception as e:
        invocation_logger.failure(
            str(e),
            error_type=type(e).__name__,
            status_code=getattr(e, "status_code", None),
        )
        raise

    invocation_logger.success(**_result_info(operation, result))
    return result
