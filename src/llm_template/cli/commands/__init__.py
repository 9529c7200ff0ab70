"""CLI commands for llm-template."""
