"""Tests for the Nomad operation catalog."""

import string

from mcp_tools.nomad.catalog import (
    OPERATIONS,
    ArgumentKind,
    NamespaceMode,
    ResultMode,
    get_operation,
)
from mcp_tools.nomad.request_builder import PAYLOAD_BUILDERS
from mcp_tools.nomad.operations import PREFLIGHTS


EXPECTED_OPERATIONS = {
    "list_jobs", "get_job", "run_job", "stop_job", "scale_job",
    "get_job_allocations", "get_job_evaluations", "get_job_deployments",
    "get_job_summary", "get_job_services", "get_job_versions",
    "get_job_submission", "get_job_scale_status",
    "list_nodes", "get_node", "drain_node", "eligibility_node",
    "list_namespaces", "create_namespace", "delete_namespace",
    "list_allocations", "get_allocation", "stop_allocation", "get_allocation_logs",
    "list_variables", "get_variable", "create_variable", "delete_variable",
    "list_acl_tokens", "get_acl_token", "create_acl_token", "delete_acl_token",
    "list_acl_policies", "get_acl_policy", "create_acl_policy", "delete_acl_policy",
    "list_acl_roles", "get_acl_role", "create_acl_role", "delete_acl_role",
    "bootstrap_acl_token",
    "list_volumes", "get_volume", "delete_volume",
    "list_deployments", "get_deployment",
    "get_cluster_leader", "list_cluster_peers", "list_regions",
    "list_sentinel_policies", "get_sentinel_policy",
    "create_sentinel_policy", "delete_sentinel_policy",
}


class TestCatalogContents:
    """Tests for the set of catalog operations."""

    def test_all_operations_present(self):
        """Test every resource family is covered."""
        assert set(OPERATIONS) == EXPECTED_OPERATIONS

    def test_get_operation(self):
        """Test lookup by name."""
        assert get_operation("list_jobs").path == "jobs"
        assert get_operation("does_not_exist") is None

    def test_job_operations_use_path_segment(self):
        """Test job-scoped endpoints encode the namespace in the path."""
        for name in ("get_job", "stop_job", "scale_job", "get_job_summary",
                     "get_job_allocations", "get_job_versions"):
            assert OPERATIONS[name].namespace_mode == NamespaceMode.PATH_SEGMENT

    def test_run_job_posts_to_jobs_root(self):
        """Test job registration has no namespace route."""
        operation = OPERATIONS["run_job"]

        assert operation.path == "jobs"
        assert operation.namespace_mode == NamespaceMode.NONE

    def test_list_and_variable_operations_use_query_param(self):
        """Test list-style, variable and volume endpoints use the query."""
        for name in ("list_jobs", "list_allocations", "list_variables",
                     "get_variable", "create_variable", "delete_variable",
                     "list_volumes", "get_volume", "list_deployments"):
            assert OPERATIONS[name].namespace_mode == NamespaceMode.QUERY_PARAM

    def test_cluster_wide_operations_ignore_namespace(self):
        """Test nodes, ACL and cluster endpoints have no namespace."""
        for name in ("list_nodes", "drain_node", "list_acl_tokens",
                     "bootstrap_acl_token", "list_regions", "get_cluster_leader"):
            operation = OPERATIONS[name]
            assert operation.namespace_mode == NamespaceMode.NONE
            assert operation.argument("namespace") is None

    def test_raw_operations(self):
        """Test passthrough operations are flagged RAW."""
        raw = {name for name, op in OPERATIONS.items() if op.result_mode == ResultMode.RAW}
        assert raw == {
            "get_job_evaluations", "get_job_services", "get_job_submission",
            "get_allocation_logs", "list_regions",
        }

    def test_only_bootstrap_installs_token(self):
        """Test the token is only ever replaced by bootstrap."""
        installers = [name for name, op in OPERATIONS.items() if op.installs_token]
        assert installers == ["bootstrap_acl_token"]


class TestCatalogConsistency:
    """Tests that every row is internally consistent."""

    def test_path_placeholders_are_required_arguments(self):
        """Test each path placeholder names a required argument."""
        for operation in OPERATIONS.values():
            placeholders = [
                field for _, field, _, _ in string.Formatter().parse(operation.path) if field
            ]
            for placeholder in placeholders:
                arg = operation.argument(placeholder)
                assert arg is not None, f"{operation.name}: {placeholder}"
                assert arg.required, f"{operation.name}: {placeholder}"

    def test_query_arguments_exist(self):
        """Test query mappings reference declared arguments."""
        for operation in OPERATIONS.values():
            for arg_name, _ in operation.query:
                assert operation.argument(arg_name) is not None, operation.name

    def test_typed_operations_declare_shape(self):
        """Test TYPED rows have a shape and MESSAGE rows a template."""
        for operation in OPERATIONS.values():
            if operation.result_mode == ResultMode.TYPED:
                assert operation.shape is not None, operation.name
            if operation.result_mode == ResultMode.MESSAGE:
                assert operation.message, operation.name

    def test_named_builders_exist(self):
        """Test payload and preflight names resolve."""
        for operation in OPERATIONS.values():
            if operation.payload:
                assert operation.payload in PAYLOAD_BUILDERS
            if operation.preflight:
                assert operation.preflight in PREFLIGHTS

    def test_namespace_argument_matches_mode(self):
        """Test namespaced rows declare a namespace argument defaulting to default."""
        for operation in OPERATIONS.values():
            arg = operation.argument("namespace")
            if operation.name == "run_job":
                # Carried in the job body rather than the URL
                assert arg is not None and arg.default == "default"
            elif operation.namespace_mode == NamespaceMode.NONE:
                assert arg is None, operation.name
            else:
                assert arg is not None, operation.name
                assert arg.kind == ArgumentKind.STRING
                assert arg.default == "default"

    def test_enumerations(self):
        """Test enumerated arguments carry their allowed values."""
        assert OPERATIONS["list_jobs"].argument("status").allowed == {"pending", "running", "dead"}
        assert OPERATIONS["create_acl_token"].argument("type").allowed == {"client", "management"}
        assert OPERATIONS["eligibility_node"].argument("eligible").allowed == {"eligible", "ineligible"}
        assert OPERATIONS["create_sentinel_policy"].argument("enforcement_level").allowed == {
            "advisory", "soft-mandatory", "hard-mandatory",
        }
