"""Turns a validated argument set into a concrete Nomad request.

Namespace routing, optional query parameters and request bodies are all
resolved here from the operation's catalog row, so the client only ever
sees a method, a path, ordered query pairs and a JSON body.
"""

import json
import string
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from .catalog import DEFAULT_NAMESPACE, NamespaceMode, Operation
from .client import NomadValidationError

# Nomad has no line-based tail, so tail is approximated in bytes
LOG_BYTES_PER_LINE = 200

# Path arguments whose "/" separators are part of the resource name
_SLASH_PRESERVING = frozenset({"path"})


@dataclass
class NomadRequest:
    """A request ready to be sent by ``NomadClient.execute``."""

    method: str
    path: str
    query: List[Tuple[str, str]] = field(default_factory=list)
    body: Any = None
    # Values for MESSAGE templates; never sent
    context: Dict[str, Any] = field(default_factory=dict)


def render_query_value(value: Any) -> Optional[str]:
    """Render a query value, or None when it should be omitted.

    Empty strings, zero or negative numbers and False mean "not supplied".
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else None
    if isinstance(value, (int, float)):
        return str(int(value)) if value > 0 else None
    text = str(value)
    return text or None


def resolve_namespace(args: Dict[str, Any]) -> str:
    return args.get("namespace") or DEFAULT_NAMESPACE


def format_path(template: str, args: Dict[str, Any]) -> str:
    """Fill path placeholders with URL-quoted argument values."""
    values = {}
    for _, name, _, _ in string.Formatter().parse(template):
        if not name:
            continue
        raw = args.get(name)
        if raw is None or raw == "":
            raise NomadValidationError(f"Missing required argument: {name}", field=name)
        safe = "/" if name in _SLASH_PRESERVING else ""
        values[name] = quote(str(raw).strip("/") if safe else str(raw), safe=safe)
    return template.format(**values)


# -----------------------------------------------------------------------------
# Payload builders
#
# Each takes the validated arguments and returns (body, extra_query,
# message_context).
# -----------------------------------------------------------------------------

PayloadResult = Tuple[Any, List[Tuple[str, str]], Dict[str, Any]]


def _job_run(args: Dict[str, Any]) -> PayloadResult:
    try:
        job = json.loads(args["job_spec"])
    except ValueError as e:
        raise NomadValidationError(f"Job specification is not valid JSON: {e}", field="job_spec") from e

    if not isinstance(job, dict):
        raise NomadValidationError("Job specification must be a JSON object", field="job_spec")

    # Accept both a bare job and the {"Job": {...}} envelope
    if set(job) == {"Job"}:
        job = job["Job"]

    # POST jobs has no namespace route; the job carries its own
    namespace = resolve_namespace(args)
    if namespace != DEFAULT_NAMESPACE:
        job = {**job, "Namespace": namespace}
    return {"Job": job}, [], {}


def _scale(args: Dict[str, Any]) -> PayloadResult:
    body = {
        "Count": args["count"],
        "Target": {"Group": args["group"]},
        "Meta": {"reason": "Scaled via API"},
    }
    return body, [], {}


def _drain(args: Dict[str, Any]) -> PayloadResult:
    deadline = args.get("deadline")
    if deadline is None:
        deadline = -1

    if not args["enable"]:
        body = {"DrainSpec": None, "Meta": {"reason": "Drain disabled via API"}}
        return body, [], {"drain_state": "disabled"}

    body = {
        "DrainSpec": {"Deadline": deadline, "IgnoreSystemJobs": False},
        "Meta": {"reason": "Initiated via API"},
    }
    if deadline > 0:
        state = f"enabled with deadline {deadline} seconds"
    else:
        state = "enabled with no deadline"
    return body, [], {"drain_state": state}


def _eligibility(args: Dict[str, Any]) -> PayloadResult:
    return {"Eligibility": args["eligible"]}, [], {}


def _namespace(args: Dict[str, Any]) -> PayloadResult:
    body = {"Name": args["name"], "Description": args.get("description") or ""}
    return body, [], {}


def _item_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _variable(args: Dict[str, Any]) -> PayloadResult:
    items = args.get("items")
    if items:
        items = {str(k): _item_value(v) for k, v in items.items()}
    elif args.get("key"):
        items = {args["key"]: args.get("value") or ""}
    else:
        raise NomadValidationError(
            "Either items or key/value must be provided", field="items"
        )

    body: Dict[str, Any] = {"Items": items}
    cas = args.get("cas") or 0
    if cas > 0:
        body["CAS"] = cas
    if args.get("lock_operation"):
        body["LockOperation"] = args["lock_operation"]
    return body, [], {}


def _acl_token(args: Dict[str, Any]) -> PayloadResult:
    body = {
        "Name": args["name"],
        "Type": args["type"],
        "Policies": list(args.get("policies") or []),
        "Global": bool(args.get("global")),
    }
    return body, [], {}


def _acl_policy(args: Dict[str, Any]) -> PayloadResult:
    body = {
        "Name": args["name"],
        "Description": args.get("description") or "",
        "Rules": args["rules"],
    }
    return body, [], {}


def _acl_role(args: Dict[str, Any]) -> PayloadResult:
    policies = [{"Name": name} for name in args.get("policies") or []]
    if not policies:
        raise NomadValidationError("An ACL role needs at least one policy", field="policies")
    body = {
        "Name": args["name"],
        "Description": args.get("description") or "",
        "Policies": policies,
    }
    return body, [], {}


def _sentinel_policy(args: Dict[str, Any]) -> PayloadResult:
    body = {
        "Name": args["name"],
        "Description": args.get("description") or "",
        "Scope": args["scope"],
        "EnforcementLevel": args["enforcement_level"],
        "Policy": args["policy"],
    }
    return body, [], {}


def _logs(args: Dict[str, Any]) -> PayloadResult:
    query = [
        ("task", args["task"]),
        ("type", args.get("type") or "stdout"),
        ("follow", "true" if args.get("follow") else "false"),
    ]
    tail = args.get("tail") or 0
    offset = args.get("offset") or 0
    if tail > 0:
        query.append(("origin", "end"))
        query.append(("offset", str(tail * LOG_BYTES_PER_LINE)))
    elif offset > 0:
        query.append(("offset", str(offset)))
    return None, query, {}


PAYLOAD_BUILDERS: Dict[str, Callable[[Dict[str, Any]], PayloadResult]] = {
    "job_run": _job_run,
    "scale": _scale,
    "drain": _drain,
    "eligibility": _eligibility,
    "namespace": _namespace,
    "variable": _variable,
    "acl_token": _acl_token,
    "acl_policy": _acl_policy,
    "acl_role": _acl_role,
    "sentinel_policy": _sentinel_policy,
    "logs": _logs,
}


def build_request(operation: Operation, args: Dict[str, Any]) -> NomadRequest:
    """Build the request for an operation from validated arguments.

    Args:
        operation: Catalog row
        args: Output of ``validate_arguments``

    Returns:
        NomadRequest with the namespace encoded exactly once (or not at all
        for the default namespace)

    Raises:
        NomadValidationError: If a payload builder rejects the arguments
    """
    path = format_path(operation.path, args)
    query: List[Tuple[str, str]] = []

    namespace = resolve_namespace(args)
    if namespace != DEFAULT_NAMESPACE:
        if operation.namespace_mode == NamespaceMode.PATH_SEGMENT:
            path = f"namespace/{quote(namespace, safe='')}/{path}"
        elif operation.namespace_mode == NamespaceMode.QUERY_PARAM:
            query.append(("namespace", namespace))

    for arg_name, param in operation.query:
        rendered = render_query_value(args.get(arg_name))
        if rendered is not None:
            query.append((param, rendered))

    body = None
    context = dict(args)
    if operation.payload:
        builder = PAYLOAD_BUILDERS[operation.payload]
        body, extra_query, extra_context = builder(args)
        query.extend(extra_query)
        context.update(extra_context)

    query.extend(operation.fixed_query)

    return NomadRequest(
        method=operation.method,
        path=path,
        query=query,
        body=body,
        context=context,
    )
