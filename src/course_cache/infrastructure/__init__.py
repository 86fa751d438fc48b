"""Infrastructure for persistence, configuration, logging and external processes."""
