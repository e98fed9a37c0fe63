"""Database schema (SQLite dialect) and default lookup data."""

import uuid

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL CHECK(role IN ('admin', 'professor', 'student')),
        avatar TEXT,
        professor_id TEXT REFERENCES users(id) ON DELETE SET NULL,
        class_group TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS curriculum_components (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE COLLATE NOCASE,
        created_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS series (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE COLLATE NOCASE,
        created_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS books (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        cover_url TEXT NOT NULL DEFAULT '',
        pdf_url TEXT,
        curriculum_component TEXT NOT NULL,
        book_type TEXT NOT NULL DEFAULT 'student' CHECK(book_type IN ('student', 'professor')),
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS book_class_groups (
        book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        class_group TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS book_assignments (
        id TEXT PRIMARY KEY,
        book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        assigned_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
        progress REAL NOT NULL DEFAULT 0 CHECK(progress >= 0 AND progress <= 100),
        UNIQUE (book_id, user_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_users_role ON users(role)",
    "CREATE INDEX IF NOT EXISTS idx_users_professor ON users(professor_id)",
    "CREATE INDEX IF NOT EXISTS idx_books_component ON books(curriculum_component)",
    "CREATE INDEX IF NOT EXISTS idx_book_class_groups_book ON book_class_groups(book_id)",
    "CREATE INDEX IF NOT EXISTS idx_book_class_groups_group ON book_class_groups(class_group)",
    "CREATE INDEX IF NOT EXISTS idx_assignments_user ON book_assignments(user_id)",
]

DEFAULT_CURRICULUM_COMPONENTS = [
    "Mathematics",
    "Portuguese Language",
    "Science",
    "History",
    "Geography",
    "English",
    "Arts",
    "Physical Education",
    "Philosophy",
    "Sociology",
]

DEFAULT_SERIES = ["1st Year", "2nd Year", "3rd Year", "4th Year", "5th Year"]


def new_id() -> str:
    """Generate a primary key."""
    return str(uuid.uuid4())
