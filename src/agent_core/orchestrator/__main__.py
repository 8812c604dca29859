"""Allow running the agent as: python -m agent_core.orchestrator [--config path] [command]."""

from agent_core.orchestrator.runner import cli

cli()
