"""Static catalog of Nomad operations exposed as tools.

Each ``Operation`` is pure data: HTTP method, path template, how the
namespace is encoded, the argument schema and how the response is
decoded. Adding an operation means adding a row to ``_CATALOG``; the
client and decoder never change.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from . import models

DEFAULT_NAMESPACE = "default"


class NamespaceMode(str, Enum):
    """Where the namespace goes in the request.

    Nomad mixes both conventions across endpoint families, so the mode is
    fixed per operation.
    """
    NONE = "none"
    PATH_SEGMENT = "path_segment"
    QUERY_PARAM = "query_param"


class ResultMode(str, Enum):
    TYPED = "typed"
    RAW = "raw"
    MESSAGE = "message"


class ArgumentKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    MAP = "map"
    LIST = "list"


@dataclass(frozen=True)
class Argument:
    name: str
    kind: ArgumentKind
    description: str = ""
    required: bool = False
    allowed: Optional[FrozenSet[str]] = None
    default: Any = None


@dataclass(frozen=True)
class Operation:
    """Definition of one Nomad API operation.

    Attributes:
        name: Tool name (e.g. "list_jobs")
        description: Human-readable description
        method: HTTP method
        path: Path template relative to /v1, placeholders named after arguments
        namespace_mode: Namespace encoding for this endpoint
        arguments: Ordered argument schema
        result_mode: How the response body is turned into a result
        shape: Declared result type for TYPED operations
        query: (argument, query parameter) pairs sent when the value is set
        fixed_query: Constant query parameters
        payload: Name of the body builder in request_builder.PAYLOAD_BUILDERS
        message: Format template for MESSAGE results
        preflight: Name of a preparatory step run before the request
        installs_token: Result's SecretID becomes the client token on success
        tags: Tags for categorization
    """
    name: str
    description: str
    method: str
    path: str
    namespace_mode: NamespaceMode = NamespaceMode.NONE
    arguments: Tuple[Argument, ...] = ()
    result_mode: ResultMode = ResultMode.TYPED
    shape: Any = None
    query: Tuple[Tuple[str, str], ...] = ()
    fixed_query: Tuple[Tuple[str, str], ...] = ()
    payload: Optional[str] = None
    message: Optional[str] = None
    preflight: Optional[str] = None
    installs_token: bool = False
    tags: Tuple[str, ...] = field(default=())

    def argument(self, name: str) -> Optional[Argument]:
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


# -----------------------------------------------------------------------------
# Argument helpers
# -----------------------------------------------------------------------------

def _string(name, description, required=False, allowed=None, default=None) -> Argument:
    return Argument(
        name=name,
        kind=ArgumentKind.STRING,
        description=description,
        required=required,
        allowed=frozenset(allowed) if allowed else None,
        default=default,
    )


def _number(name, description, required=False, default=None) -> Argument:
    return Argument(name=name, kind=ArgumentKind.NUMBER, description=description,
                    required=required, default=default)


def _bool(name, description, required=False, default=None) -> Argument:
    return Argument(name=name, kind=ArgumentKind.BOOL, description=description,
                    required=required, default=default)


def _map(name, description, required=False) -> Argument:
    return Argument(name=name, kind=ArgumentKind.MAP, description=description, required=required)


def _list(name, description, required=False) -> Argument:
    return Argument(name=name, kind=ArgumentKind.LIST, description=description, required=required)


def _namespace(what: str) -> Argument:
    return _string("namespace", f"The namespace of the {what} (default: default)",
                   default=DEFAULT_NAMESPACE)


_JOB_ID = _string("job_id", "The ID of the job", required=True)
_NEXT_TOKEN = _string("next_token", "Token for pagination")
_PER_PAGE = _number("per_page", "Number of results per page")
_FILTER = _string("filter", "Expression to filter results")
_PREFIX = _string("prefix", "Only return results whose ID starts with this prefix")

_PAGINATION = (_NEXT_TOKEN, _PER_PAGE, _FILTER)
_PAGINATION_QUERY = (("next_token", "next_token"), ("per_page", "per_page"), ("filter", "filter"))


def _job_subresource(name, description, suffix, result_mode, shape=None) -> Operation:
    return Operation(
        name=name,
        description=description,
        method="GET",
        path=f"job/{{job_id}}/{suffix}",
        namespace_mode=NamespaceMode.PATH_SEGMENT,
        arguments=(_JOB_ID, _namespace("job")),
        result_mode=result_mode,
        shape=shape,
        tags=("nomad", "jobs"),
    )


# -----------------------------------------------------------------------------
# Jobs
# -----------------------------------------------------------------------------

_JOBS = [
    Operation(
        name="list_jobs",
        description="List jobs in a namespace, optionally filtered by status",
        method="GET",
        path="jobs",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(
            _namespace("jobs"),
            _string("status", "Filter by job status", allowed=("pending", "running", "dead")),
            _PREFIX,
        ) + _PAGINATION,
        shape=List[models.JobListStub],
        query=(("status", "status"), ("prefix", "prefix")) + _PAGINATION_QUERY,
        tags=("nomad", "jobs"),
    ),
    Operation(
        name="get_job",
        description="Get job details by ID",
        method="GET",
        path="job/{job_id}",
        namespace_mode=NamespaceMode.PATH_SEGMENT,
        arguments=(_JOB_ID, _namespace("job")),
        shape=models.Job,
        tags=("nomad", "jobs"),
    ),
    Operation(
        name="run_job",
        description="Run a job from a JSON or HCL job specification",
        method="POST",
        path="jobs",
        arguments=(
            _string("job_spec", "The job specification in HCL or JSON format", required=True),
            _bool("detach", "Return immediately instead of monitoring deployment", default=False),
            _string("namespace", "Namespace to register the job in (default: the job's own Namespace)",
                    default=DEFAULT_NAMESPACE),
        ),
        shape=models.EvaluationResponse,
        query=(("detach", "detach"),),
        payload="job_run",
        preflight="parse_job_spec",
        tags=("nomad", "jobs"),
    ),
    Operation(
        name="stop_job",
        description="Stop a running job",
        method="DELETE",
        path="job/{job_id}",
        namespace_mode=NamespaceMode.PATH_SEGMENT,
        arguments=(
            _JOB_ID,
            _namespace("job"),
            _bool("purge", "Purge the job from Nomad instead of only stopping it", default=False),
        ),
        shape=models.EvaluationResponse,
        query=(("purge", "purge"),),
        tags=("nomad", "jobs"),
    ),
    Operation(
        name="scale_job",
        description="Scale a task group of a job to a new count",
        method="POST",
        path="job/{job_id}/scale",
        namespace_mode=NamespaceMode.PATH_SEGMENT,
        arguments=(
            _JOB_ID,
            _string("group", "The task group to scale", required=True),
            _number("count", "The desired number of instances", required=True),
            _namespace("job"),
        ),
        shape=models.EvaluationResponse,
        payload="scale",
        tags=("nomad", "jobs"),
    ),
    Operation(
        name="get_job_scale_status",
        description="Get the scaling status of every task group of a job",
        method="GET",
        path="job/{job_id}/scale",
        namespace_mode=NamespaceMode.PATH_SEGMENT,
        arguments=(_JOB_ID, _namespace("job")),
        shape=models.JobScaleStatus,
        tags=("nomad", "jobs"),
    ),
    _job_subresource("get_job_allocations", "List allocations of a job",
                     "allocations", ResultMode.TYPED, List[models.Allocation]),
    _job_subresource("get_job_evaluations", "List evaluations of a job",
                     "evaluations", ResultMode.RAW),
    _job_subresource("get_job_deployments", "List deployments of a job",
                     "deployments", ResultMode.TYPED, List[models.Deployment]),
    _job_subresource("get_job_summary", "Get the allocation summary of a job",
                     "summary", ResultMode.TYPED, models.JobSummary),
    _job_subresource("get_job_services", "List services registered by a job",
                     "services", ResultMode.RAW),
    _job_subresource("get_job_versions", "List all versions of a job",
                     "versions", ResultMode.TYPED, models.JobVersions),
    _job_subresource("get_job_submission", "Get the original submitted source of a job",
                     "submission", ResultMode.RAW),
]


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------

_NODE_ID = _string("node_id", "The ID of the node", required=True)

_NODES = [
    Operation(
        name="list_nodes",
        description="List client nodes in the cluster",
        method="GET",
        path="nodes",
        arguments=(
            _string("status", "Filter by node status", allowed=("ready", "down")),
            _PREFIX,
        ),
        shape=List[models.NodeStub],
        query=(("status", "status"), ("prefix", "prefix")),
        tags=("nomad", "nodes"),
    ),
    Operation(
        name="get_node",
        description="Get node details by ID",
        method="GET",
        path="node/{node_id}",
        arguments=(_NODE_ID,),
        shape=models.Node,
        tags=("nomad", "nodes"),
    ),
    Operation(
        name="drain_node",
        description="Enable or disable drain mode for a node",
        method="POST",
        path="node/{node_id}/drain",
        arguments=(
            _NODE_ID,
            _bool("enable", "Enable or disable drain mode", required=True),
            _number("deadline", "Deadline in seconds for the drain (default: -1, no deadline)",
                    default=-1),
        ),
        result_mode=ResultMode.MESSAGE,
        payload="drain",
        message="Node drain {drain_state}",
        tags=("nomad", "nodes"),
    ),
    Operation(
        name="eligibility_node",
        description="Set the scheduling eligibility of a node",
        method="POST",
        path="node/{node_id}/eligibility",
        arguments=(
            _NODE_ID,
            _string("eligible", "The eligibility to set", required=True,
                    allowed=("eligible", "ineligible")),
        ),
        shape=models.NodeUpdateResponse,
        payload="eligibility",
        tags=("nomad", "nodes"),
    ),
]


# -----------------------------------------------------------------------------
# Namespaces
# -----------------------------------------------------------------------------

_NAMESPACES = [
    Operation(
        name="list_namespaces",
        description="List all namespaces",
        method="GET",
        path="namespaces",
        shape=List[models.Namespace],
        tags=("nomad", "namespaces"),
    ),
    Operation(
        name="create_namespace",
        description="Create a namespace",
        method="POST",
        path="namespace",
        arguments=(
            _string("name", "The name of the namespace", required=True),
            _string("description", "Description of the namespace", default=""),
        ),
        result_mode=ResultMode.MESSAGE,
        payload="namespace",
        message="Successfully created namespace {name}",
        tags=("nomad", "namespaces"),
    ),
    Operation(
        name="delete_namespace",
        description="Delete a namespace",
        method="DELETE",
        path="namespace/{name}",
        arguments=(_string("name", "The name of the namespace to delete", required=True),),
        result_mode=ResultMode.MESSAGE,
        message="Successfully deleted namespace {name}",
        tags=("nomad", "namespaces"),
    ),
]


# -----------------------------------------------------------------------------
# Allocations
# -----------------------------------------------------------------------------

_ALLOCATION_ID = _string("allocation_id", "The ID of the allocation", required=True)

_ALLOCATIONS = [
    Operation(
        name="list_allocations",
        description="List allocations in a namespace",
        method="GET",
        path="allocations",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_namespace("allocations"), _PREFIX) + _PAGINATION,
        shape=List[models.Allocation],
        query=(("prefix", "prefix"),) + _PAGINATION_QUERY,
        tags=("nomad", "allocations"),
    ),
    Operation(
        name="get_allocation",
        description="Get allocation details by ID",
        method="GET",
        path="allocation/{allocation_id}",
        arguments=(_ALLOCATION_ID,),
        shape=models.Allocation,
        tags=("nomad", "allocations"),
    ),
    Operation(
        name="stop_allocation",
        description="Stop a running allocation",
        method="POST",
        path="allocation/{allocation_id}/stop",
        arguments=(_ALLOCATION_ID,),
        result_mode=ResultMode.MESSAGE,
        message="Allocation {allocation_id} stopped successfully",
        tags=("nomad", "allocations"),
    ),
    Operation(
        name="get_allocation_logs",
        description="Get logs of a task in an allocation",
        method="GET",
        path="client/fs/logs/{allocation_id}",
        arguments=(
            _ALLOCATION_ID,
            _string("task", "The name of the task", required=True),
            _string("type", "The log stream to read", allowed=("stdout", "stderr"),
                    default="stdout"),
            _bool("follow", "Whether to follow the log stream", default=False),
            _number("tail", "Number of lines to read from the end", default=0),
            _number("offset", "Byte offset to start reading from (ignored with tail)", default=0),
        ),
        result_mode=ResultMode.RAW,
        fixed_query=(("plain", "true"),),
        payload="logs",
        tags=("nomad", "allocations", "logs"),
    ),
]


# -----------------------------------------------------------------------------
# Variables
# -----------------------------------------------------------------------------

_VARIABLE_PATH = _string("path", "The path of the variable", required=True)
_CAS = _number("cas", "Check-and-set index for optimistic concurrency control", default=0)

_VARIABLES = [
    Operation(
        name="list_variables",
        description="List variables in a namespace",
        method="GET",
        path="vars",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_namespace("variables"), _string("prefix", "Only list variables under this path prefix"))
        + _PAGINATION,
        shape=List[models.VariableMetadata],
        query=(("prefix", "prefix"),) + _PAGINATION_QUERY,
        tags=("nomad", "variables"),
    ),
    Operation(
        name="get_variable",
        description="Get a variable and its items by path",
        method="GET",
        path="var/{path}",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_VARIABLE_PATH, _namespace("variable")),
        shape=models.Variable,
        tags=("nomad", "variables"),
    ),
    Operation(
        name="create_variable",
        description="Create or update a variable",
        method="PUT",
        path="var/{path}",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(
            _VARIABLE_PATH,
            _map("items", "Key/value items to store in the variable"),
            _string("key", "Single item key (alternative to items)"),
            _string("value", "Single item value (alternative to items)"),
            _namespace("variable"),
            _CAS,
            _string("lock_operation", "Lock operation to perform", allowed=("acquire", "release")),
        ),
        result_mode=ResultMode.MESSAGE,
        payload="variable",
        message="Variable created at path: {path}",
        tags=("nomad", "variables"),
    ),
    Operation(
        name="delete_variable",
        description="Delete a variable",
        method="DELETE",
        path="var/{path}",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_VARIABLE_PATH, _namespace("variable"), _CAS),
        result_mode=ResultMode.MESSAGE,
        query=(("cas", "cas"),),
        message="Variable deleted at path: {path}",
        tags=("nomad", "variables"),
    ),
]


# -----------------------------------------------------------------------------
# ACL
# -----------------------------------------------------------------------------

_ACCESSOR_ID = _string("accessor_id", "Accessor ID of the token", required=True)
_POLICY_NAME = _string("name", "Name of the policy", required=True)
_ROLE_ID = _string("id", "ID of the role", required=True)

_ACL = [
    Operation(
        name="list_acl_tokens",
        description="List all ACL tokens",
        method="GET",
        path="acl/tokens",
        shape=List[models.ACLToken],
        tags=("nomad", "acl"),
    ),
    Operation(
        name="get_acl_token",
        description="Get details of an ACL token",
        method="GET",
        path="acl/token/{accessor_id}",
        arguments=(_ACCESSOR_ID,),
        shape=models.ACLToken,
        tags=("nomad", "acl"),
    ),
    Operation(
        name="create_acl_token",
        description="Create an ACL token",
        method="POST",
        path="acl/token",
        arguments=(
            _string("name", "Name of the token", required=True),
            _string("type", "Type of the token", required=True, allowed=("client", "management")),
            _list("policies", "Policy names to attach to the token"),
            _bool("global", "Whether the token is replicated to all regions", default=False),
        ),
        shape=models.ACLToken,
        payload="acl_token",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="delete_acl_token",
        description="Delete an ACL token",
        method="DELETE",
        path="acl/token/{accessor_id}",
        arguments=(_ACCESSOR_ID,),
        result_mode=ResultMode.MESSAGE,
        message="ACL token {accessor_id} deleted successfully",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="list_acl_policies",
        description="List all ACL policies",
        method="GET",
        path="acl/policies",
        shape=List[models.ACLPolicy],
        tags=("nomad", "acl"),
    ),
    Operation(
        name="get_acl_policy",
        description="Get an ACL policy by name",
        method="GET",
        path="acl/policy/{name}",
        arguments=(_POLICY_NAME,),
        shape=models.ACLPolicy,
        tags=("nomad", "acl"),
    ),
    Operation(
        name="create_acl_policy",
        description="Create or update an ACL policy",
        method="POST",
        path="acl/policy/{name}",
        arguments=(
            _POLICY_NAME,
            _string("description", "Description of the policy", default=""),
            _string("rules", "HCL rules of the policy", required=True),
        ),
        result_mode=ResultMode.MESSAGE,
        payload="acl_policy",
        message="Successfully created ACL policy {name}",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="delete_acl_policy",
        description="Delete an ACL policy",
        method="DELETE",
        path="acl/policy/{name}",
        arguments=(_POLICY_NAME,),
        result_mode=ResultMode.MESSAGE,
        message="ACL policy {name} deleted successfully",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="list_acl_roles",
        description="List all ACL roles",
        method="GET",
        path="acl/roles",
        shape=List[models.ACLRole],
        tags=("nomad", "acl"),
    ),
    Operation(
        name="get_acl_role",
        description="Get an ACL role by ID",
        method="GET",
        path="acl/role/{id}",
        arguments=(_ROLE_ID,),
        shape=models.ACLRole,
        tags=("nomad", "acl"),
    ),
    Operation(
        name="create_acl_role",
        description="Create an ACL role linking one or more policies",
        method="POST",
        path="acl/role",
        arguments=(
            _string("name", "Name of the role", required=True),
            _string("description", "Description of the role", default=""),
            _list("policies", "Names of the policies linked to the role", required=True),
        ),
        shape=models.ACLRole,
        payload="acl_role",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="delete_acl_role",
        description="Delete an ACL role",
        method="DELETE",
        path="acl/role/{id}",
        arguments=(_ROLE_ID,),
        result_mode=ResultMode.MESSAGE,
        message="ACL role {id} deleted successfully",
        tags=("nomad", "acl"),
    ),
    Operation(
        name="bootstrap_acl_token",
        description="Bootstrap the ACL system and use the initial management token",
        method="POST",
        path="acl/bootstrap",
        shape=models.ACLToken,
        installs_token=True,
        tags=("nomad", "acl"),
    ),
]


# -----------------------------------------------------------------------------
# Volumes
# -----------------------------------------------------------------------------

_VOLUME_ID = _string("volume_id", "ID of the volume", required=True)

_VOLUMES = [
    Operation(
        name="list_volumes",
        description="List host volumes in a namespace",
        method="GET",
        path="volumes",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(
            _namespace("volumes"),
            _string("node_id", "Only list volumes on this node"),
            _string("plugin_id", "Only list volumes of this plugin"),
        ) + _PAGINATION,
        shape=List[models.Volume],
        query=(("node_id", "node_id"), ("plugin_id", "plugin_id")) + _PAGINATION_QUERY,
        fixed_query=(("type", "host"),),
        tags=("nomad", "volumes"),
    ),
    Operation(
        name="get_volume",
        description="Get details of a host volume",
        method="GET",
        path="volume/host/{volume_id}",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_VOLUME_ID, _namespace("volume")),
        shape=models.Volume,
        tags=("nomad", "volumes"),
    ),
    Operation(
        name="delete_volume",
        description="Delete a host volume",
        method="DELETE",
        path="volume/host/{volume_id}",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_VOLUME_ID, _namespace("volume")),
        result_mode=ResultMode.MESSAGE,
        message="Volume {volume_id} deleted successfully",
        tags=("nomad", "volumes"),
    ),
]


# -----------------------------------------------------------------------------
# Deployments
# -----------------------------------------------------------------------------

_DEPLOYMENTS = [
    Operation(
        name="list_deployments",
        description="List deployments in a namespace",
        method="GET",
        path="deployments",
        namespace_mode=NamespaceMode.QUERY_PARAM,
        arguments=(_namespace("deployments"),),
        shape=List[models.Deployment],
        tags=("nomad", "deployments"),
    ),
    Operation(
        name="get_deployment",
        description="Get deployment details by ID",
        method="GET",
        path="deployment/{deployment_id}",
        arguments=(_string("deployment_id", "The ID of the deployment", required=True),),
        shape=models.Deployment,
        tags=("nomad", "deployments"),
    ),
]


# -----------------------------------------------------------------------------
# Cluster
# -----------------------------------------------------------------------------

_CLUSTER = [
    Operation(
        name="get_cluster_leader",
        description="Get the Raft configuration, including which server is the leader",
        method="GET",
        path="operator/raft/configuration",
        shape=models.RaftConfiguration,
        tags=("nomad", "cluster"),
    ),
    Operation(
        name="list_cluster_peers",
        description="List the Raft peers of the cluster",
        method="GET",
        path="operator/raft/configuration",
        shape=models.RaftConfiguration,
        tags=("nomad", "cluster"),
    ),
    Operation(
        name="list_regions",
        description="List all known regions",
        method="GET",
        path="regions",
        result_mode=ResultMode.RAW,
        tags=("nomad", "cluster"),
    ),
]


# -----------------------------------------------------------------------------
# Sentinel
# -----------------------------------------------------------------------------

_SENTINEL_NAME = _string("name", "The name of the Sentinel policy", required=True)

_SENTINEL = [
    Operation(
        name="list_sentinel_policies",
        description="List all Sentinel policies",
        method="GET",
        path="sentinel/policies",
        shape=List[models.SentinelPolicy],
        tags=("nomad", "sentinel"),
    ),
    Operation(
        name="get_sentinel_policy",
        description="Get a Sentinel policy by name",
        method="GET",
        path="sentinel/policy/{name}",
        arguments=(_SENTINEL_NAME,),
        shape=models.SentinelPolicy,
        tags=("nomad", "sentinel"),
    ),
    Operation(
        name="create_sentinel_policy",
        description="Create or update a Sentinel policy",
        method="POST",
        path="sentinel/policy/{name}",
        arguments=(
            _SENTINEL_NAME,
            _string("description", "Description of the policy", default=""),
            _string("scope", "Scope of the policy (e.g. submit-job)", required=True),
            _string("enforcement_level", "Enforcement level of the policy", required=True,
                    allowed=("advisory", "soft-mandatory", "hard-mandatory")),
            _string("policy", "Sentinel source of the policy", required=True),
        ),
        result_mode=ResultMode.MESSAGE,
        payload="sentinel_policy",
        message="Successfully created Sentinel policy {name}",
        tags=("nomad", "sentinel"),
    ),
    Operation(
        name="delete_sentinel_policy",
        description="Delete a Sentinel policy",
        method="DELETE",
        path="sentinel/policy/{name}",
        arguments=(_SENTINEL_NAME,),
        result_mode=ResultMode.MESSAGE,
        message="Successfully deleted Sentinel policy {name}",
        tags=("nomad", "sentinel"),
    ),
]


_CATALOG = (
    _JOBS + _NODES + _NAMESPACES + _ALLOCATIONS + _VARIABLES
    + _ACL + _VOLUMES + _DEPLOYMENTS + _CLUSTER + _SENTINEL
)

OPERATIONS: Dict[str, Operation] = {op.name: op for op in _CATALOG}


def get_operation(name: str) -> Optional[Operation]:
    """Look up an operation by tool name."""
    return OPERATIONS.get(name)
