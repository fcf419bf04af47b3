"""Core library for ai-sync: configuration, conditions, and composition."""
