"""Local (SQLite / LiteLLM) implementations."""
