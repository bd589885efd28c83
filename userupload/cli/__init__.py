"""Command-line entry points for UserUpload."""
