"""End-to-end tests running real commands through the service."""
