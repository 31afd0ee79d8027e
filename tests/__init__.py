"""Tests for the Nomad MCP Server."""
