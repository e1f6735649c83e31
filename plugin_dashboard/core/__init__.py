"""
Core logic: document access, aggregation, queries, plugin actions and the
interaction state machine.
"""
