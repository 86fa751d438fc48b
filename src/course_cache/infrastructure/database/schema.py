"""SQLite schema for courses, exercises and available points."""

import sqlite3
from pathlib import Path

DATABASE_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS courses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    source_backend TEXT NOT NULL DEFAULT 'git',
    source_url TEXT NOT NULL,
    git_branch TEXT NOT NULL DEFAULT 'master',
    cache_version INTEGER NOT NULL DEFAULT 0,
    options TEXT NOT NULL DEFAULT '{}',  -- JSON
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS exercises (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    course_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    relative_path TEXT NOT NULL,
    options TEXT NOT NULL DEFAULT '{}',  -- JSON
    checksum TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

    UNIQUE(course_id, name),
    FOREIGN KEY (course_id) REFERENCES courses(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_exercises_course ON exercises(course_id, name);

CREATE TABLE IF NOT EXISTS available_points (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exercise_id INTEGER NOT NULL,
    name TEXT NOT NULL,

    UNIQUE(exercise_id, name),
    FOREIGN KEY (exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_available_points_exercise ON available_points(exercise_id);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def init_database(db_path: Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Initialize the database with the required schema.

    Args:
        db_path: Path to SQLite database file
        timeout: Seconds to wait for a lock held by another connection

    Returns:
        SQLite connection object
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.execute("PRAGMA foreign_keys=ON")
    if get_schema_version(conn) == DATABASE_VERSION:
        # Schema is current, nothing to write
        return conn
    conn.executescript(SCHEMA_SQL)
    conn.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (DATABASE_VERSION,))
    conn.commit()
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    try:
        cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
        row = cursor.fetchone()
        return row[0] if row else None
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return None
