"""CLI command modules.

This package contains the CLI commands split into logical groups:
- config: Configuration management
- courses: Registering, listing and removing courses
- refresh: Refreshing a course cache
"""
