"""Read-only repository listing and statistics service."""

SERVICE_NAME = "repo-stats-service"
