"""Built-in CLI command groups for wskauth."""
