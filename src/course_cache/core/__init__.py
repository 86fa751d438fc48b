"""
The core classes of the course_cache package.

These classes represent the domain model of the application: courses,
exercises and their available points, plus the pluggable collaborators used
while refreshing a course.

Modules in this package may only depend on `course_cache.core`.

## Modules

- `course_cache.core.course`: Courses, exercises and available points.
- `course_cache.core.cache_paths`: Paths of a versioned course cache.
- `course_cache.core.report`: The refresh report and the refresh errors.
- `course_cache.core.exercise_dir`: Discovery of exercise directories.
- `course_cache.core.options`: Course and exercise option files.
- `course_cache.core.file_filter`: Building solution and stub trees.
- `course_cache.core.test_scanner`: Extracting point names from tests.
"""
