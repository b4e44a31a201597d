"""Use-case layer for the connection lifecycle and state synchronization.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving Hexagonal boundaries.
"""
