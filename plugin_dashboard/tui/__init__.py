"""
Terminal user interface.
"""
