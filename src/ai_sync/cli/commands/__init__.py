"""Top-level ai-sync commands (auto-discovered)."""
