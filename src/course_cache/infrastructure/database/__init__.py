from course_cache.infrastructure.database.course_store import CourseStore, CourseTransaction

__all__ = [
    "CourseStore",
    "CourseTransaction",
]
