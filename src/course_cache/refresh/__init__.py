"""The course refresh pipeline.

The stages run in a fixed order inside `CourseRefresher.refresh_course`:
repository sync, metadata sync, artifact building, checksumming and
packaging, and permission propagation.
"""

from course_cache.refresh.orchestrator import CourseRefresher, refresh_course

__all__ = [
    "CourseRefresher",
    "refresh_course",
]
