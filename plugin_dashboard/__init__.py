"""
Plugin dashboard: browse and manage Claude Code plugins from the terminal.
"""

__version__ = "0.1.0"
