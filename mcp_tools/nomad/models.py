"""Pydantic shapes for decoded Nomad API responses.

Field names are snake_case with Nomad's PascalCase keys as aliases.
Unknown keys are kept (``extra="allow"``) so a newer agent never loses
data on the way through; dump with ``by_alias=True`` to get the remote
representation back.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NomadModel(BaseModel):
    """Base for all response shapes."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# -----------------------------------------------------------------------------
# Jobs
# -----------------------------------------------------------------------------

class JobListStub(NomadModel):
    """Entry of ``GET /v1/jobs``."""

    id: str = Field(alias="ID")
    parent_id: str = Field(default="", alias="ParentID")
    name: str = Field(default="", alias="Name")
    namespace: str = Field(default="", alias="Namespace")
    type: str = Field(default="", alias="Type")
    priority: int = Field(default=0, alias="Priority")
    status: str = Field(default="", alias="Status")
    status_description: str = Field(default="", alias="StatusDescription")
    job_summary: Optional[Dict[str, Any]] = Field(default=None, alias="JobSummary")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")
    job_modify_index: int = Field(default=0, alias="JobModifyIndex")


class Job(NomadModel):
    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    namespace: str = Field(default="", alias="Namespace")
    type: str = Field(default="", alias="Type")
    priority: int = Field(default=0, alias="Priority")
    status: str = Field(default="", alias="Status")
    stop: bool = Field(default=False, alias="Stop")
    version: int = Field(default=0, alias="Version")
    datacenters: Optional[List[str]] = Field(default=None, alias="Datacenters")
    task_groups: Optional[List[Dict[str, Any]]] = Field(default=None, alias="TaskGroups")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")
    job_modify_index: int = Field(default=0, alias="JobModifyIndex")


class JobVersions(NomadModel):
    """Response of ``GET /v1/job/:id/versions``."""

    versions: List[Job] = Field(default_factory=list, alias="Versions")
    diffs: Optional[List[Dict[str, Any]]] = Field(default=None, alias="Diffs")


class JobSummary(NomadModel):
    """Response of ``GET /v1/job/:id/summary``."""

    job_id: str = Field(alias="JobID")
    namespace: str = Field(default="", alias="Namespace")
    summary: Dict[str, Dict[str, int]] = Field(default_factory=dict, alias="Summary")
    children: Optional[Dict[str, int]] = Field(default=None, alias="Children")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class JobScaleStatus(NomadModel):
    job_id: str = Field(alias="JobID")
    namespace: str = Field(default="", alias="Namespace")
    job_stopped: bool = Field(default=False, alias="JobStopped")
    task_groups: Optional[Dict[str, Dict[str, Any]]] = Field(default=None, alias="TaskGroups")


class EvaluationResponse(NomadModel):
    """Register / deregister / scale responses carrying an evaluation."""

    eval_id: str = Field(default="", alias="EvalID")
    eval_create_index: int = Field(default=0, alias="EvalCreateIndex")
    job_modify_index: int = Field(default=0, alias="JobModifyIndex")
    warnings: str = Field(default="", alias="Warnings")
    index: int = Field(default=0, alias="Index")


# -----------------------------------------------------------------------------
# Deployments
# -----------------------------------------------------------------------------

class Deployment(NomadModel):
    id: str = Field(alias="ID")
    namespace: str = Field(default="", alias="Namespace")
    job_id: str = Field(default="", alias="JobID")
    job_version: int = Field(default=0, alias="JobVersion")
    status: str = Field(default="", alias="Status")
    status_description: str = Field(default="", alias="StatusDescription")
    task_groups: Optional[Dict[str, Dict[str, Any]]] = Field(default=None, alias="TaskGroups")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------

class NodeStub(NomadModel):
    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    datacenter: str = Field(default="", alias="Datacenter")
    node_class: str = Field(default="", alias="NodeClass")
    address: str = Field(default="", alias="Address")
    drain: bool = Field(default=False, alias="Drain")
    scheduling_eligibility: str = Field(default="", alias="SchedulingEligibility")
    status: str = Field(default="", alias="Status")
    status_description: str = Field(default="", alias="StatusDescription")
    version: str = Field(default="", alias="Version")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class Node(NodeStub):
    http_addr: str = Field(default="", alias="HTTPAddr")
    attributes: Optional[Dict[str, str]] = Field(default=None, alias="Attributes")
    meta: Optional[Dict[str, str]] = Field(default=None, alias="Meta")
    drain_strategy: Optional[Dict[str, Any]] = Field(default=None, alias="DrainStrategy")


class NodeUpdateResponse(NomadModel):
    """Response of the drain and eligibility endpoints."""

    eval_ids: Optional[List[str]] = Field(default=None, alias="EvalIDs")
    eval_create_index: int = Field(default=0, alias="EvalCreateIndex")
    node_modify_index: int = Field(default=0, alias="NodeModifyIndex")
    index: int = Field(default=0, alias="Index")


# -----------------------------------------------------------------------------
# Namespaces
# -----------------------------------------------------------------------------

class Namespace(NomadModel):
    name: str = Field(alias="Name")
    description: str = Field(default="", alias="Description")
    quota: str = Field(default="", alias="Quota")
    meta: Optional[Dict[str, str]] = Field(default=None, alias="Meta")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


# -----------------------------------------------------------------------------
# Allocations
# -----------------------------------------------------------------------------

class Allocation(NomadModel):
    id: str = Field(alias="ID")
    eval_id: str = Field(default="", alias="EvalID")
    name: str = Field(default="", alias="Name")
    namespace: str = Field(default="", alias="Namespace")
    node_id: str = Field(default="", alias="NodeID")
    node_name: str = Field(default="", alias="NodeName")
    job_id: str = Field(default="", alias="JobID")
    job_version: int = Field(default=0, alias="JobVersion")
    task_group: str = Field(default="", alias="TaskGroup")
    desired_status: str = Field(default="", alias="DesiredStatus")
    client_status: str = Field(default="", alias="ClientStatus")
    client_description: str = Field(default="", alias="ClientDescription")
    task_states: Optional[Dict[str, Dict[str, Any]]] = Field(default=None, alias="TaskStates")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")
    create_time: int = Field(default=0, alias="CreateTime")
    modify_time: int = Field(default=0, alias="ModifyTime")


# -----------------------------------------------------------------------------
# Variables
# -----------------------------------------------------------------------------

class VariableMetadata(NomadModel):
    """Entry of ``GET /v1/vars``; list responses never carry items."""

    namespace: str = Field(default="", alias="Namespace")
    path: str = Field(alias="Path")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")
    create_time: int = Field(default=0, alias="CreateTime")
    modify_time: int = Field(default=0, alias="ModifyTime")


class Variable(VariableMetadata):
    items: Dict[str, str] = Field(default_factory=dict, alias="Items")


# -----------------------------------------------------------------------------
# ACL
# -----------------------------------------------------------------------------

class ACLToken(NomadModel):
    accessor_id: str = Field(default="", alias="AccessorID")
    secret_id: str = Field(default="", alias="SecretID")
    name: str = Field(default="", alias="Name")
    type: str = Field(default="", alias="Type")
    policies: Optional[List[str]] = Field(default=None, alias="Policies")
    roles: Optional[List[Dict[str, Any]]] = Field(default=None, alias="Roles")
    global_: bool = Field(default=False, alias="Global")
    expiration_time: Optional[str] = Field(default=None, alias="ExpirationTime")
    create_time: Optional[str] = Field(default=None, alias="CreateTime")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class ACLPolicy(NomadModel):
    name: str = Field(alias="Name")
    description: str = Field(default="", alias="Description")
    rules: str = Field(default="", alias="Rules")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class ACLRole(NomadModel):
    id: str = Field(default="", alias="ID")
    name: str = Field(alias="Name")
    description: str = Field(default="", alias="Description")
    policies: Optional[List[Dict[str, str]]] = Field(default=None, alias="Policies")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


# -----------------------------------------------------------------------------
# Volumes
# -----------------------------------------------------------------------------

class Volume(NomadModel):
    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    namespace: str = Field(default="", alias="Namespace")
    plugin_id: str = Field(default="", alias="PluginID")
    node_id: str = Field(default="", alias="NodeID")
    node_pool: str = Field(default="", alias="NodePool")
    capacity_bytes: int = Field(default=0, alias="CapacityBytes")
    state: str = Field(default="", alias="State")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


# -----------------------------------------------------------------------------
# Sentinel
# -----------------------------------------------------------------------------

class SentinelPolicy(NomadModel):
    name: str = Field(alias="Name")
    description: str = Field(default="", alias="Description")
    scope: str = Field(default="", alias="Scope")
    enforcement_level: str = Field(default="", alias="EnforcementLevel")
    policy: str = Field(default="", alias="Policy")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


# -----------------------------------------------------------------------------
# Cluster
# -----------------------------------------------------------------------------

class RaftServer(NomadModel):
    id: str = Field(default="", alias="ID")
    node: str = Field(default="", alias="Node")
    address: str = Field(default="", alias="Address")
    leader: bool = Field(default=False, alias="Leader")
    voter: bool = Field(default=False, alias="Voter")
    raft_protocol: str = Field(default="", alias="RaftProtocol")


class RaftConfiguration(NomadModel):
    """Response of ``GET /v1/operator/raft/configuration``."""

    servers: List[RaftServer] = Field(default_factory=list, alias="Servers")
    index: int = Field(default=0, alias="Index")
