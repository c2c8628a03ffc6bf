"""
Dashboard Tools

All dashboard tool implementations live in this package.
Each tool has the @system_tool decorator which registers it automatically.

To add a new tool:
1. Add your function to the appropriate file (or create a new one)
2. Add the @system_tool decorator with metadata
3. Import the module in this __init__.py

Structure:
- dashboard.py  - dashboard state, grid layout, grid info
- components.py - component create/update/remove/get
- data.py       - fetch, refresh, cache, GraphQL endpoint
- schema.py     - PostgreSQL schema snapshot
- templates.py  - data template generators
"""

# Import all tool modules to trigger registration
from dashboard_builder.services.mcp_server.tools import dashboard  # noqa: F401
from dashboard_builder.services.mcp_server.tools import components  # noqa: F401
from dashboard_builder.services.mcp_server.tools import data  # noqa: F401
from dashboard_builder.services.mcp_server.tools import schema  # noqa: F401
from dashboard_builder.services.mcp_server.tools import templates  # noqa: F401
