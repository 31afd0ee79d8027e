"""MCP Tools package.

Contains all tool implementations organized by category.
"""

# Import tool packages to trigger registration
from . import nomad

__all__ = ["nomad"]
