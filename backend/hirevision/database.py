import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from hirevision.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- ORGANIZATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS organizations (
    id         TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    domains    TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id                  TEXT PRIMARY KEY,
    email               TEXT NOT NULL UNIQUE,
    display_name        TEXT NOT NULL,
    role                TEXT NOT NULL DEFAULT 'Candidate'
                        CHECK(role IN ('Candidate','Recruiter','Interviewer')),
    organization_id     TEXT REFERENCES organizations(id) ON DELETE SET NULL,
    password_hash       TEXT,
    sso_provider        TEXT,
    sso_id              TEXT,
    headline            TEXT,
    bio                 TEXT,
    location            TEXT,
    skills              TEXT NOT NULL DEFAULT '[]',
    years_of_experience INTEGER,
    avatar_url          TEXT,
    resume_key          TEXT,
    resume_text         TEXT,
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
CREATE INDEX IF NOT EXISTS idx_users_organization ON users(organization_id);

-- ============================================================
-- AUTH THROTTLE
-- ============================================================
CREATE TABLE IF NOT EXISTS auth_throttle (
    key             TEXT PRIMARY KEY,
    failed_attempts INTEGER NOT NULL,
    last_failed_at  REAL NOT NULL
);

-- ============================================================
-- JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS jobs (
    id                  TEXT PRIMARY KEY,
    organization_id     TEXT NOT NULL,
    created_by          TEXT,
    title               TEXT NOT NULL,
    company             TEXT,
    department          TEXT,
    location            TEXT,
    is_remote           INTEGER NOT NULL DEFAULT 0,
    employment_type     TEXT,
    salary_range        TEXT,
    description         TEXT NOT NULL,
    requirements        TEXT,
    responsibilities    TEXT,
    skills              TEXT NOT NULL DEFAULT '[]',
    experience_required TEXT,
    status              TEXT NOT NULL DEFAULT 'open'
                        CHECK(status IN ('open','paused','closed')),
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_jobs_organization ON jobs(organization_id);

-- ============================================================
-- APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS applications (
    id            TEXT PRIMARY KEY,
    job_id        TEXT NOT NULL,
    candidate_id  TEXT NOT NULL,
    status        TEXT NOT NULL DEFAULT 'applied'
                  CHECK(status IN ('applied','screening','interview','offer','hired','rejected')),
    cover_letter  TEXT,
    resume_key    TEXT,
    fit_score     INTEGER,
    fit_reasoning TEXT,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_applications_job_candidate ON applications(job_id, candidate_id);
CREATE INDEX IF NOT EXISTS idx_applications_candidate ON applications(candidate_id);

-- ============================================================
-- INTERVIEWS
-- ============================================================
CREATE TABLE IF NOT EXISTS interviews (
    id               TEXT PRIMARY KEY,
    application_id   TEXT NOT NULL,
    organization_id  TEXT,
    scheduled_at     TEXT NOT NULL,
    type             TEXT NOT NULL DEFAULT 'video'
                     CHECK(type IN ('phone','video','onsite','technical')),
    status           TEXT NOT NULL DEFAULT 'scheduled'
                     CHECK(status IN ('scheduled','completed','cancelled')),
    duration_minutes INTEGER NOT NULL DEFAULT 60,
    location         TEXT,
    notes            TEXT,
    interviewer_ids  TEXT NOT NULL DEFAULT '[]',
    feedback         TEXT NOT NULL DEFAULT '[]',
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_interviews_application ON interviews(application_id);
CREATE INDEX IF NOT EXISTS idx_interviews_status ON interviews(status);

-- ============================================================
-- CONVERSATIONS / MESSAGES
-- ============================================================
CREATE TABLE IF NOT EXISTS conversations (
    id              TEXT PRIMARY KEY,
    participants    TEXT NOT NULL DEFAULT '[]',
    participant_ids TEXT NOT NULL DEFAULT '[]',
    last_message    TEXT NOT NULL DEFAULT '',
    last_message_at TEXT NOT NULL,
    unread_count    TEXT NOT NULL DEFAULT '{}',
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS messages (
    id              TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    sender_id       TEXT NOT NULL,
    sender_name     TEXT NOT NULL,
    sender_role     TEXT NOT NULL,
    receiver_id     TEXT NOT NULL,
    type            TEXT NOT NULL DEFAULT 'text',
    content         TEXT NOT NULL,
    is_read         INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, created_at);
CREATE INDEX IF NOT EXISTS idx_messages_receiver ON messages(receiver_id, is_read);

-- ============================================================
-- COMMUNITY
-- ============================================================
CREATE TABLE IF NOT EXISTS posts (
    id              TEXT PRIMARY KEY,
    author_id       TEXT NOT NULL,
    author_name     TEXT NOT NULL,
    author_username TEXT NOT NULL,
    author_avatar   TEXT,
    content         TEXT NOT NULL,
    image_key       TEXT,
    hashtags        TEXT NOT NULL DEFAULT '[]',
    likes           TEXT NOT NULL DEFAULT '[]',
    comments        TEXT NOT NULL DEFAULT '[]',
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_posts_author ON posts(author_id);
CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created_at);

CREATE TABLE IF NOT EXISTS connections (
    id           TEXT PRIMARY KEY,
    requester_id TEXT NOT NULL,
    receiver_id  TEXT NOT NULL,
    status       TEXT NOT NULL DEFAULT 'pending'
                 CHECK(status IN ('pending','accepted','declined')),
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_connections_pair ON connections(requester_id, receiver_id);

-- ============================================================
-- FTS5
-- ============================================================
CREATE VIRTUAL TABLE IF NOT EXISTS jobs_fts USING fts5(
    title, company, department, description, skills,
    content='jobs', content_rowid='rowid'
);

CREATE VIRTUAL TABLE IF NOT EXISTS posts_fts USING fts5(
    content, hashtags,
    content='posts', content_rowid='rowid'
);
"""

FTS_TRIGGERS_SQL = """\
-- Jobs FTS sync triggers
CREATE TRIGGER IF NOT EXISTS jobs_ai AFTER INSERT ON jobs BEGIN
    INSERT INTO jobs_fts(rowid, title, company, department, description, skills)
    VALUES (new.rowid, new.title, new.company, new.department, new.description, new.skills);
END;

CREATE TRIGGER IF NOT EXISTS jobs_ad AFTER DELETE ON jobs BEGIN
    INSERT INTO jobs_fts(jobs_fts, rowid, title, company, department, description, skills)
    VALUES ('delete', old.rowid, old.title, old.company, old.department, old.description, old.skills);
END;

CREATE TRIGGER IF NOT EXISTS jobs_au AFTER UPDATE ON jobs BEGIN
    INSERT INTO jobs_fts(jobs_fts, rowid, title, company, department, description, skills)
    VALUES ('delete', old.rowid, old.title, old.company, old.department, old.description, old.skills);
    INSERT INTO jobs_fts(rowid, title, company, department, description, skills)
    VALUES (new.rowid, new.title, new.company, new.department, new.description, new.skills);
END;

-- Posts FTS sync triggers
CREATE TRIGGER IF NOT EXISTS posts_ai AFTER INSERT ON posts BEGIN
    INSERT INTO posts_fts(rowid, content, hashtags)
    VALUES (new.rowid, new.content, new.hashtags);
END;

CREATE TRIGGER IF NOT EXISTS posts_ad AFTER DELETE ON posts BEGIN
    INSERT INTO posts_fts(posts_fts, rowid, content, hashtags)
    VALUES ('delete', old.rowid, old.content, old.hashtags);
END;

CREATE TRIGGER IF NOT EXISTS posts_au AFTER UPDATE ON posts BEGIN
    INSERT INTO posts_fts(posts_fts, rowid, content, hashtags)
    VALUES ('delete', old.rowid, old.content, old.hashtags);
    INSERT INTO posts_fts(rowid, content, hashtags)
    VALUES (new.rowid, new.content, new.hashtags);
END;
"""


MIGRATIONS: list[str] = [
    # ALTER TABLE statements for databases created before a column existed
]


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.executescript(FTS_TRIGGERS_SQL)
    # ALTER TABLE fails if the column already exists
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # already applied
    conn.close()
