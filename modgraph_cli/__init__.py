"""ModGraph CLI: structural views over Go workspaces for humans and LLMs."""

__version__ = "0.1.0"
