"""
Course cache refresher.

Refreshes a course of programming exercises from its source repository into a
versioned on-disk cache: per-exercise solution trees, stub trees, checksums
and downloadable archives.

## Modules:

- `course_cache.core`: The domain model and the default collaborators.
- `course_cache.refresh`: The refresh pipeline and its orchestrator.
- `course_cache.infrastructure`: Persistence, configuration, logging and processes.
- `course_cache.cli`: The command line interface.
"""

__version__ = "0.3.0"
