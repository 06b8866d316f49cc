"""Platform-specific idle time probes."""
