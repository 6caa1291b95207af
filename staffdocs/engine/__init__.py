"""staffdocs engine — configuration, error hierarchy, structured audit logging."""
