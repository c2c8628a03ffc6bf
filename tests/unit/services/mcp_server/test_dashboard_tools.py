"""
Unit tests for dashboard tools invoked through execute_tool.

Tools receive camelCase params exactly as an agent host sends them and
must always return a ToolResponse, never raise.
"""

from unittest.mock import patch

import pytest

from dashboard_builder.services.mcp_server import DashboardContext, DashboardMCPServer, execute_tool
from tests.helpers.factories import make_component_spec, make_schema_data, make_static_config

GRID = {
    "columns": "200px 1fr",
    "rows": "auto 1fr",
    "gap": "16px",
    "templateAreas": ["header header", "sidebar main"],
}


@pytest.fixture
def context(service):
    return DashboardContext(dashboard=service, session_id="test-session")


class TestExecuteTool:
    """Tests for dispatch."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, context):
        response = await execute_tool(context, "drop_tables", {})
        assert response.success is False
        assert response.error == "Unknown tool: drop_tables"

    @pytest.mark.asyncio
    async def test_missing_required_param(self, context):
        response = await execute_tool(context, "remove_component", {})
        assert response.success is False
        assert "id" in response.error

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error(self, context):
        with patch.object(context.dashboard, "remove_component", side_effect=RuntimeError("kaboom")):
            response = await execute_tool(context, "remove_component", {"id": "c1"})

        assert response.success is False
        assert "kaboom" in response.error

    @pytest.mark.asyncio
    async def test_unknown_params_ignored(self, context):
        response = await execute_tool(context, "get_dashboard", {"verbose": True})
        assert response.success is True


class TestGridTools:
    """Tests for set_grid_layout / get_grid_info / get_dashboard."""

    @pytest.mark.asyncio
    async def test_set_grid_layout(self, context):
        response = await execute_tool(
            context,
            "set_grid_layout",
            {**GRID, "templateAreas": ['"header header"', '"sidebar main"']},
        )

        assert response.success is True
        assert response.data["templateAreas"] == ["header header", "sidebar main"]
        assert response.data["gridAreas"] == ["header", "sidebar", "main"]
        assert response.data["stats"]["availableAreas"] == 3

    @pytest.mark.asyncio
    async def test_invalid_grid(self, context):
        response = await execute_tool(
            context, "set_grid_layout", {**GRID, "templateAreas": ["a a", "b"]}
        )
        assert response.success is False
        assert response.error.startswith("Invalid grid layout:")

    @pytest.mark.asyncio
    async def test_orphaning_grid_leaves_state_unchanged(self, context):
        await execute_tool(context, "create_component", make_component_spec("c1", "main"))
        before = context.dashboard.state

        response = await execute_tool(
            context, "set_grid_layout", {**GRID, "templateAreas": ["header"]}
        )

        assert response.success is False
        assert "orphaned" in response.error
        assert context.dashboard.state is before

    @pytest.mark.asyncio
    async def test_get_grid_info(self, context):
        await execute_tool(context, "create_component", make_component_spec("c1", "main"))

        response = await execute_tool(context, "get_grid_info", {})

        assert response.data["grid"]["templateAreas"] == GRID["templateAreas"]
        assert response.data["stats"]["usedAreas"] == 1
        assert response.data["components"] == [
            {"id": "c1", "type": "table", "gridArea": "main", "title": "C1"}
        ]

    @pytest.mark.asyncio
    async def test_get_dashboard(self, context):
        response = await execute_tool(context, "get_dashboard")
        assert response.success is True
        assert response.data["grid"]["gap"] == "16px"
        assert response.data["components"] == {}


class TestComponentTools:
    """Tests for component tools."""

    @pytest.mark.asyncio
    async def test_create_component_scenario(self, context):
        first = await execute_tool(context, "create_component", make_component_spec("c1", "main"))
        assert first.success is True
        assert first.message == 'Component "c1" created successfully in grid area "main"'
        assert first.data["component"]["metadata"]["fetchStatus"] == "idle"
        assert first.data["gridStats"]["availableAreas"] == 2
        assert first.data["suggestion"] == "2 grid area(s) still available: header, sidebar"

        second = await execute_tool(context, "create_component", make_component_spec("c2", "main"))
        assert second.success is False
        assert "already occupied" in second.error

        removed = await execute_tool(context, "remove_component", {"id": "c1"})
        assert removed.success is True

        third = await execute_tool(context, "create_component", make_component_spec("c2", "main"))
        assert third.success is True

    @pytest.mark.asyncio
    async def test_last_area_suggestion(self, context):
        await execute_tool(context, "create_component", make_component_spec("a", "header"))
        await execute_tool(context, "create_component", make_component_spec("b", "sidebar"))
        response = await execute_tool(context, "create_component", make_component_spec("c", "main"))

        assert response.data["suggestion"] == "All grid areas are now occupied"

    @pytest.mark.asyncio
    async def test_update_component_merge_and_path(self, context):
        await execute_tool(
            context,
            "create_component",
            make_component_spec("c1", "main", data={"columns": [], "rows": [{"total": 1}]}),
        )

        merged = await execute_tool(
            context, "update_component", {"id": "c1", "updates": {"title": "Orders"}}
        )
        assert merged.success is True
        assert merged.data["component"]["title"] == "Orders"
        assert merged.data["component"]["metadata"]["updatedAt"] is not None

        by_path = await execute_tool(
            context, "update_component", {"id": "c1", "path": "$.data.rows[0].total", "updates": 7}
        )
        assert by_path.success is True
        assert by_path.data["component"]["data"]["rows"] == [{"total": 7}]

    @pytest.mark.asyncio
    async def test_update_missing_component(self, context):
        response = await execute_tool(context, "update_component", {"id": "ghost", "updates": {}})
        assert response.success is False
        assert response.error == 'Component "ghost" not found'

    @pytest.mark.asyncio
    async def test_get_component(self, context):
        await execute_tool(context, "create_component", make_component_spec("c1", "main"))

        found = await execute_tool(context, "get_component", {"id": "c1"})
        assert found.data["gridArea"] == "main"

        missing = await execute_tool(context, "get_component", {"id": "ghost"})
        assert missing.success is False
        assert missing.to_dict()["data"] is None


class TestDataTools:
    """Tests for fetch/refresh/cache tools."""

    @pytest.mark.asyncio
    async def test_fetch_component_data(self, context):
        await execute_tool(
            context,
            "create_component",
            make_component_spec(
                "c1",
                "main",
                dataConfig=make_static_config(
                    [{"region": "n", "v": 2}, {"region": "n", "v": 3}],
                    queryTransform={"query": "SELECT region, SUM(v) AS v FROM data GROUP BY region"},
                ),
            ),
        )

        response = await execute_tool(context, "fetch_component_data", {"id": "c1"})

        assert response.success is True
        assert response.data == [{"region": "n", "v": 5}]
        assert context.dashboard.get_component("c1").metadata.fetch_status == "success"

    @pytest.mark.asyncio
    async def test_fetch_failure(self, context):
        await execute_tool(
            context,
            "create_component",
            make_component_spec(
                "c1", "main", dataConfig={"source": {"type": "postgresql", "query": "SELECT 1"}}
            ),
        )

        response = await execute_tool(context, "fetch_component_data", {"id": "c1"})

        assert response.success is False
        assert "Connection refused" in response.error
        assert context.dashboard.get_component("c1").metadata.fetch_status == "error"

    @pytest.mark.asyncio
    async def test_refresh_with_one_unreachable_source(self, context):
        await execute_tool(context, "create_component", make_component_spec("a", "header"))
        await execute_tool(context, "create_component", make_component_spec("b", "sidebar"))
        await execute_tool(
            context,
            "create_component",
            make_component_spec(
                "c", "main", dataConfig={"source": {"type": "postgresql", "query": "SELECT 1"}}
            ),
        )

        response = await execute_tool(context, "refresh_all_components", {})

        statuses = {
            cid: c.metadata.fetch_status for cid, c in context.dashboard.state.components.items()
        }
        assert response.success is True
        assert response.message == "Refreshed 3 components"
        assert response.data["refreshedCount"] == 3
        assert statuses == {"a": "success", "b": "success", "c": "error"}

    @pytest.mark.asyncio
    async def test_clear_data_cache(self, context):
        all_cleared = await execute_tool(context, "clear_data_cache", {})
        assert all_cleared.message == "Cache cleared for all components"

        missing = await execute_tool(context, "clear_data_cache", {"id": "ghost"})
        assert missing.success is False

    @pytest.mark.asyncio
    async def test_set_graphql_endpoint(self, context):
        response = await execute_tool(
            context, "set_graphql_endpoint", {"endpoint": "http://gql.test/graphql"}
        )
        assert response.data == {"endpoint": "http://gql.test/graphql"}
        assert context.dashboard.state.graphql_endpoint == "http://gql.test/graphql"


class TestSchemaTools:
    """Tests for schema tools."""

    @pytest.mark.asyncio
    async def test_get_without_schema(self, context):
        response = await execute_tool(context, "get_postgres_schema", {})
        assert response.success is False
        assert response.error == "No PostgreSQL schema configured"
        assert response.to_dict()["data"] is None

    @pytest.mark.asyncio
    async def test_set_and_query(self, context):
        stored = await execute_tool(context, "set_postgres_schema", {"schema": make_schema_data()})
        assert stored.success is True

        table = await execute_tool(
            context, "query_postgres_schema", {"tableName": "orders", "schemaName": "sales"}
        )
        assert table.data["schema"] == "sales"
        assert table.data["columns"][1]["name"] == "total"

        tables = await execute_tool(context, "query_postgres_schema", {"schemaName": "public"})
        assert [t["name"] for t in tables.data] == ["users", "orders"]

        schemas = await execute_tool(context, "query_postgres_schema", {})
        assert schemas.data == ["public", "sales"]

        missing = await execute_tool(context, "query_postgres_schema", {"tableName": "nope"})
        assert missing.success is False


class TestTemplateTools:
    """Tests for template generator tools."""

    @pytest.mark.asyncio
    async def test_generate_chart_template(self, context):
        response = await execute_tool(
            context, "generate_chart_template", {"labelField": "month", "valueFields": ["revenue"]}
        )
        assert response.success is True
        assert '"labels"' in response.data["template"]

    @pytest.mark.asyncio
    async def test_generate_table_template(self, context):
        response = await execute_tool(
            context, "generate_table_template", {"columns": [{"key": "id", "label": "ID"}]}
        )
        assert '"rows"' in response.data["template"]

    @pytest.mark.asyncio
    async def test_generate_table_template_bad_columns(self, context):
        response = await execute_tool(context, "generate_table_template", {"columns": [{"label": "x"}]})
        assert response.success is False

    @pytest.mark.asyncio
    async def test_generate_stat_card_template(self, context):
        response = await execute_tool(
            context, "generate_stat_card_template", {"valueField": "total", "trendField": "delta"}
        )
        assert '"trend"' in response.data["template"]


class TestDashboardMCPServer:
    """Tests for DashboardMCPServer."""

    def test_server_is_cached(self, context):
        mcp_server = DashboardMCPServer(context)

        server = mcp_server.get_server()

        assert server is mcp_server.get_server()
        assert server.name == "dashboard-builder"

    def test_tool_names(self, context):
        names = DashboardMCPServer(context).get_tool_names()
        assert "create_component" in names
        assert len(names) == len(set(names))
