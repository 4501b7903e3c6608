"""Helper utilities for HostAlloc CLI."""
