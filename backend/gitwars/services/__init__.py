"""Domain services: shared timer and team bookkeeping.

Imported by HTTP routes and socket handlers, keeping transport concerns
separated from the core logic.
"""
