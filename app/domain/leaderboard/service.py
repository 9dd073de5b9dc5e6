import logging
from typing import Callable, List, Optional, Tuple

from app.core.settings import LeaderboardSettings
from app.domain.leaderboard.assembler import assemble
from app.domain.leaderboard.cache import CacheLayer, build_store
from app.domain.leaderboard.errors import LeaderboardError, RefreshFailure
from app.domain.leaderboard.executor import run_bounded
from app.domain.leaderboard.roster import RosterSource, build_roster_source
from app.domain.leaderboard.scraper import ProfileScraper
from app.schemas.leaderboard import LeaderboardRow, Participant, ScoreRecord

log = logging.getLogger("leaderboard")

class LeaderboardService:
    """
    Orquesta un pedido: cache hit -> devuelve; miss -> roster, scraping
    con concurrencia acotada, armado/orden y escritura en cache.
    """

    def __init__(
        self,
        settings: LeaderboardSettings,
        *,
        cache: Optional[CacheLayer] = None,
        roster_factory: Optional[Callable[[], RosterSource]] = None,
        scraper: Optional[ProfileScraper] = None,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else CacheLayer(build_store(settings))
        # el roster se resuelve en cada refresh: sin config falla el pedido, no el arranque
        self.roster_factory = roster_factory or (lambda: build_roster_source(settings))
        self.scraper = scraper or ProfileScraper(
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            arcade_marker=settings.arcade_marker,
        )

    def _scrape(self, participant: Participant) -> ScoreRecord:
        return self.scraper.scrape(participant.url)

    def refresh(self) -> List[dict]:
        try:
            participants = self.roster_factory().load()
            scores = run_bounded(
                participants,
                self._scrape,
                self.settings.concurrency_limit,
                on_error=lambda p, e: ScoreRecord(error=str(e)),
            )
            rows = assemble(participants, scores)
        except LeaderboardError:
            raise
        except Exception as e:
            raise RefreshFailure(str(e)) from e

        failed = sum(1 for r in rows if r.error)
        log.info("Leaderboard recalculado: %s filas (%s con error)", len(rows), failed)
        return [r.model_dump(exclude_none=True) for r in rows]

    def get_leaderboard(self) -> Tuple[List[LeaderboardRow], str]:
        payload, source = self.cache.get_or_refresh(
            self.settings.cache_key,
            self.settings.cache_ttl_seconds,
            self.refresh,
        )
        return [LeaderboardRow(**r) for r in payload], source
