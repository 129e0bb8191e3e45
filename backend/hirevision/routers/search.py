from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.schemas.search import SearchResponse, SearchResult
from hirevision.services.search_service import search_fts

router = APIRouter(
    prefix="/search",
    tags=["search"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1),
    scope: str = Query("all", pattern="^(all|jobs|posts)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    offset = (page - 1) * per_page
    try:
        results = search_fts(db, q, scope=scope, limit=per_page, offset=offset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return SearchResponse(
        results=[
            SearchResult(
                id=r["id"],
                title=r["title"],
                subtitle=r.get("subtitle"),
                source=r["source"],
                snippet=r["snippet"],
                rank=r["rank"],
            )
            for r in results
        ],
        total=len(results),
        query=q,
    )
