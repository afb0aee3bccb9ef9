"""Discord listeners and slash commands."""
