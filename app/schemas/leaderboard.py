from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, List

class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Unknown"
    url: str = ""

class ScoreRecord(BaseModel):
    badgeCount: int = Field(default=0, ge=0)
    arcadeComplete: Literal[0, 1] = 0
    error: Optional[str] = None

class LeaderboardRow(BaseModel):
    name: str
    badgeCount: int = 0
    arcadeComplete: Literal[0, 1] = 0
    error: Optional[str] = None

class LeaderboardOut(BaseModel):
    source: Literal["cache", "fresh"]
    data: List[LeaderboardRow]

class ErrorOut(BaseModel):
    error: str
