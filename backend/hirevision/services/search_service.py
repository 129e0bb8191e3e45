from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

JOBS_SQL = """
SELECT j.id AS id, j.title AS title, j.company AS subtitle,
       'job' AS source,
       snippet(jobs_fts, 3, '<mark>', '</mark>', '...', 32) AS snippet,
       rank
FROM jobs_fts
JOIN jobs j ON j.rowid = jobs_fts.rowid
WHERE jobs_fts MATCH :query
ORDER BY rank
LIMIT :limit OFFSET :offset
"""

POSTS_SQL = """
SELECT p.id AS id, p.author_name AS title, p.created_at AS subtitle,
       'post' AS source,
       snippet(posts_fts, 0, '<mark>', '</mark>', '...', 32) AS snippet,
       rank
FROM posts_fts
JOIN posts p ON p.rowid = posts_fts.rowid
WHERE posts_fts MATCH :query
ORDER BY rank
LIMIT :limit OFFSET :offset
"""


def search_fts(db: Session, query: str, scope: str = "all", limit: int = 20, offset: int = 0) -> list[dict]:
    statements = []
    if scope in ("all", "jobs"):
        statements.append(JOBS_SQL)
    if scope in ("all", "posts"):
        statements.append(POSTS_SQL)

    results = []
    params = {"query": query, "limit": limit, "offset": offset}
    for sql in statements:
        try:
            rows = db.execute(text(sql), params).mappings().all()
        except OperationalError as exc:
            # FTS5 syntax errors surface as 400, not 500
            db.rollback()
            raise ValueError("Invalid search query") from exc
        results.extend(dict(r) for r in rows)

    results.sort(key=lambda r: r["rank"])
    return results
