"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports: the Socket.IO
    transport, the REST API client, the in-memory state store, the logging
    status sink, and local settings storage.

Dependencies:
    Individual submodules depend on ``python-socketio``, ``requests``,
    filesystem APIs, and domain protocol definitions.

Call context:
    Imported by app composition modules (for runtime wiring) and by tests (for
    transport-level behavior verification).
"""
