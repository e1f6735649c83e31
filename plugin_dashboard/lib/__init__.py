"""
Shared helpers: paths, errors, logging.
"""
