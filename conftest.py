"""Root conftest: load the harness pytest plugin (options, markers, fixtures)."""

pytest_plugins = ["github_mcp_e2e.pytest_plugin", "pytester"]
