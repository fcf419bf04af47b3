"""
ai-sync - compose AI tool rules, personas, and commands

Shared markdown documents are composed once (includes, `when:` conditions)
and rendered per target tool (Cursor, Claude, Factory).
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
