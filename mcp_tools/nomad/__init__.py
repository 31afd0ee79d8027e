"""Nomad cluster management tools package.

Exposes every operation of the Nomad catalog as an MCP tool:
- Jobs: list, inspect, run, stop, scale and job sub-resources
- Nodes: list, inspect, drain and eligibility
- Namespaces, allocations (including logs), variables and volumes
- ACL tokens, policies and roles, plus the one-shot bootstrap
- Deployments, cluster raft state, regions and Sentinel policies
"""

from typing import Any, Dict

from tool_registry import ToolRegistry, get_registry

from .catalog import OPERATIONS, Operation
from .client import (
    NomadAPIError,
    NomadClient,
    NomadConnectionError,
    NomadDecodeError,
    NomadError,
    NomadValidationError,
    close_nomad_client,
    error_to_dict,
    get_nomad_client,
)
from .decoder import to_jsonable
from .operations import invoke
from .validation import json_schema


def _make_handler(operation: Operation):
    async def handler(params: Dict[str, Any]) -> Any:
        result = await invoke(operation.name, params)
        return to_jsonable(result)

    handler.__name__ = operation.name
    return handler


def register_tools(registry: ToolRegistry) -> None:
    """Register every catalog operation with a tool registry."""
    for operation in OPERATIONS.values():
        registry.register(
            name=operation.name,
            description=operation.description,
            input_schema=json_schema(operation),
            handler=_make_handler(operation),
            tags=list(operation.tags),
        )


register_tools(get_registry())

__all__ = [
    "NomadAPIError",
    "NomadClient",
    "NomadConnectionError",
    "NomadDecodeError",
    "NomadError",
    "NomadValidationError",
    "close_nomad_client",
    "error_to_dict",
    "get_nomad_client",
    "invoke",
    "register_tools",
]
