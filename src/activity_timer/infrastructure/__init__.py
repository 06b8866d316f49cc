"""Infrastructure adapters: storage, activity feed and OS probes."""
