"""GitHub MCP server end-to-end harness.

A black-box test harness for the GitHub MCP server: it invokes tools over an MCP
session and asserts on their results, probes which tools the server exposes, tracks
the remote repositories it creates and deletes them when a test ends, and drives
concurrent load for reliability checks.

Run the live scenarios with: pytest --e2e
Probe a server from the shell with: python -m github_mcp_e2e --list-tools
"""

__version__ = "0.1.0"

from .capabilities import CapabilityProber, CapabilitySet
from .client import ToolClient
from .config import HarnessConfig, load_config_from_env
from .context import TestContext, open_test_context
from .errors import HarnessError
from .resources import ResourceTracker, TeardownStack

__all__ = [
    "CapabilityProber",
    "CapabilitySet",
    "HarnessConfig",
    "HarnessError",
    "ResourceTracker",
    "TeardownStack",
    "TestContext",
    "ToolClient",
    "load_config_from_env",
    "open_test_context",
]
