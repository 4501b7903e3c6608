"""Command implementations for HostAlloc CLI."""
