import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from app.schemas.leaderboard import ScoreRecord

log = logging.getLogger("leaderboard.scraper")

PROFILE_ERROR = "Private or Invalid Profile"

# Selectores del perfil público de Cloud Skills Boost.
# Si Google cambia el markup hay que actualizarlos aquí.
BADGE_SELECTOR = "div.profile-badge"
BADGE_TITLE_SELECTOR = "span.ql-title-medium"

def find_badge_titles(html: str) -> List[str]:
    """Devuelve el texto del título de cada badge encontrado en el HTML."""
    soup = BeautifulSoup(html or "", "html.parser")
    titles = []
    for el in soup.select(BADGE_SELECTOR):
        # un badge puede tener varios spans de título; se unen todos
        spans = el.select(BADGE_TITLE_SELECTOR)
        titles.append(" ".join(s.get_text(strip=True) for s in spans))
    return titles

def count_badges(titles: List[str], arcade_marker: str = "The Arcade") -> ScoreRecord:
    badge_count = 0
    arcade = 0
    for t in titles:
        if arcade_marker in t:
            arcade = 1
        else:
            badge_count += 1
    return ScoreRecord(badgeCount=badge_count, arcadeComplete=arcade)

def is_profile_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ProfileScraper:
    """
    Descarga un perfil y cuenta sus badges. Nunca lanza: cualquier fallo
    se devuelve como ScoreRecord con `error` y contadores en cero.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        arcade_marker: str = "The Arcade",
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent} if user_agent else {}
        self.arcade_marker = arcade_marker

    def scrape(self, url: str) -> ScoreRecord:
        if not is_profile_url(url):
            # sin URL válida no hay request: cero badges, sin error
            return ScoreRecord()

        try:
            r = self.session.get(url.strip(), headers=self.headers, timeout=self.timeout)
            r.raise_for_status()
            titles = find_badge_titles(r.text)
        except Exception as e:
            log.warning("Error scraping %s: %s", url, e)
            return ScoreRecord(error=PROFILE_ERROR)

        return count_badges(titles, self.arcade_marker)
