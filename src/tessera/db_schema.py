"""Database schema definitions for the tessera issue tracker.

Contains the canonical SQL schema, the default tag seed set, and the
current schema version constant.
"""

from __future__ import annotations

SCHEMA_SQL = """\
-- users and sessions belong to the auth subsystem; the core only reads them
CREATE TABLE IF NOT EXISTS users (
    id          TEXT PRIMARY KEY,
    email       TEXT NOT NULL UNIQUE,
    name        TEXT NOT NULL,
    created_at  INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS sessions (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    expires_at  INTEGER NOT NULL,
    created_at  INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);

CREATE TABLE IF NOT EXISTS issues (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    title               TEXT NOT NULL,
    description         TEXT,
    status              TEXT NOT NULL DEFAULT 'not_started',
    priority            TEXT NOT NULL DEFAULT 'medium',
    assigned_user_id    TEXT REFERENCES users(id) ON DELETE SET NULL,
    created_by_user_id  TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at          INTEGER NOT NULL,
    updated_at          INTEGER NOT NULL,

    CHECK (length(title) > 0 AND length(title) <= 200),
    CHECK (status IN ('not_started', 'in_progress', 'done')),
    CHECK (priority IN ('low', 'medium', 'high'))
);

CREATE INDEX IF NOT EXISTS idx_issues_status ON issues(status);
CREATE INDEX IF NOT EXISTS idx_issues_priority ON issues(priority);
CREATE INDEX IF NOT EXISTS idx_issues_assigned ON issues(assigned_user_id);
CREATE INDEX IF NOT EXISTS idx_issues_created_by ON issues(created_by_user_id);
CREATE INDEX IF NOT EXISTS idx_issues_created_at ON issues(created_at DESC, id DESC);

CREATE TABLE IF NOT EXISTS tags (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL UNIQUE COLLATE NOCASE,
    color       TEXT NOT NULL,
    created_at  INTEGER NOT NULL,

    CHECK (length(name) > 0 AND length(name) <= 50),
    CHECK (color GLOB '#[0-9a-fA-F][0-9a-fA-F][0-9a-fA-F][0-9a-fA-F][0-9a-fA-F][0-9a-fA-F]')
);

CREATE TABLE IF NOT EXISTS issue_tags (
    issue_id  INTEGER NOT NULL REFERENCES issues(id) ON DELETE CASCADE,
    tag_id    INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (issue_id, tag_id)
);

CREATE INDEX IF NOT EXISTS idx_issue_tags_tag ON issue_tags(tag_id);
"""

DEFAULT_TAGS: tuple[tuple[str, str], ...] = (
    ("bug", "#ef4444"),
    ("feature", "#8b5cf6"),
    ("enhancement", "#f59e0b"),
    ("documentation", "#6b7280"),
    ("frontend", "#3b82f6"),
    ("backend", "#10b981"),
)

CURRENT_SCHEMA_VERSION = 1
