"""Command-line host that wires adapters and runs a connection session."""
