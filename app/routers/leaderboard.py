import logging
from functools import lru_cache
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.settings import load_settings
from app.domain.leaderboard.service import LeaderboardService
from app.schemas.leaderboard import LeaderboardOut, ErrorOut

log = logging.getLogger("leaderboard")

router = APIRouter(tags=["leaderboard"])

@lru_cache(maxsize=1)
def get_leaderboard_service() -> LeaderboardService:
    return LeaderboardService(load_settings())

@router.get(
    "/leaderboard",
    response_model=LeaderboardOut,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorOut}},
)
@router.get(
    "/api/get-scores",
    response_model=LeaderboardOut,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorOut}},
    include_in_schema=False,
)
def get_leaderboard(service: LeaderboardService = Depends(get_leaderboard_service)):
    """Leaderboard completo, ordenado por badges. Sin parámetros."""
    try:
        rows, source = service.get_leaderboard()
    except Exception as e:
        log.exception("API Error")
        return JSONResponse(status_code=500, content={"error": str(e)})
    return LeaderboardOut(source=source, data=rows)
