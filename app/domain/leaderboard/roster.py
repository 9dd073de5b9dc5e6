import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Protocol

import requests

from app.core.settings import LeaderboardSettings
from app.domain.leaderboard.errors import ConfigurationError, RosterUnavailable
from app.schemas.leaderboard import Participant

log = logging.getLogger("leaderboard.roster")

SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"

class RosterSource(Protocol):
    def load(self) -> List[Participant]:
        """Lista ordenada de participantes. Lanza RosterUnavailable si no hay filas."""
        ...


def rows_to_participants(
    rows: Iterable[Mapping[str, str]],
    name_column: str = "User Name",
    url_column: str = "Google Cloud Skills Boost Profile URL",
) -> List[Participant]:
    out: List[Participant] = []
    for row in rows:
        name = (row.get(name_column) or "").strip()
        url = (row.get(url_column) or "").strip()
        if not name or not url:
            log.warning("Fila con campos faltantes: name=%r url=%r", name, url)
        # la fila se emite igual, con valores por defecto
        out.append(Participant(name=name or "Unknown", url=url))
    if not out:
        raise RosterUnavailable("No rows found in the roster")
    log.info("Roster: %s participantes", len(out))
    return out


class CsvRosterSource:
    def __init__(self, path, *, name_column: str = "User Name",
                 url_column: str = "Google Cloud Skills Boost Profile URL"):
        self.path = Path(path)
        self.name_column = name_column
        self.url_column = url_column

    def load(self) -> List[Participant]:
        try:
            with self.path.open(newline="", encoding="utf-8-sig") as f:
                rows = list(csv.DictReader(f))
        except OSError as e:
            raise RosterUnavailable(f"No se pudo leer el roster {self.path}: {e}") from e
        return rows_to_participants(rows, self.name_column, self.url_column)


class GoogleSheetRosterSource:
    """Lee la primera hoja (o `gid`) de un Google Sheet publicado, vía export CSV."""

    def __init__(self, sheet_id: str, gid: str = "0", *, session=None, timeout: float = 15.0,
                 name_column: str = "User Name",
                 url_column: str = "Google Cloud Skills Boost Profile URL"):
        self.sheet_id = sheet_id
        self.gid = gid
        self.session = session or requests.Session()
        self.timeout = timeout
        self.name_column = name_column
        self.url_column = url_column

    @property
    def export_url(self) -> str:
        return SHEET_EXPORT_URL.format(sheet_id=self.sheet_id, gid=self.gid)

    def load(self) -> List[Participant]:
        log.info("Cargando Google Sheet %s (gid=%s)", self.sheet_id, self.gid)
        try:
            r = self.session.get(self.export_url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise RosterUnavailable(f"Failed to load sheet: {e}") from e
        # el export viene en UTF-8; r.text adivinaría latin-1 sin charset
        text = r.content.decode("utf-8-sig")
        rows = list(csv.DictReader(io.StringIO(text)))
        return rows_to_participants(rows, self.name_column, self.url_column)


def build_roster_source(settings: LeaderboardSettings) -> RosterSource:
    if settings.roster_csv_path:
        return CsvRosterSource(
            settings.roster_csv_path,
            name_column=settings.name_column,
            url_column=settings.url_column,
        )
    if settings.google_sheet_id:
        return GoogleSheetRosterSource(
            settings.google_sheet_id,
            settings.google_sheet_gid,
            name_column=settings.name_column,
            url_column=settings.url_column,
        )
    raise ConfigurationError("Define ROSTER_CSV_PATH o GOOGLE_SHEET_ID")
