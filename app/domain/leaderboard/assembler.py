from typing import List, Sequence
from app.schemas.leaderboard import Participant, ScoreRecord, LeaderboardRow

def assemble(participants: Sequence[Participant], scores: Sequence[ScoreRecord]) -> List[LeaderboardRow]:
    """
    Une participants[i] con scores[i] y ordena por badgeCount DESC.
    Desempate: orden original del roster (índice ASC).
    """
    if len(participants) != len(scores):
        raise ValueError(
            f"participants ({len(participants)}) y scores ({len(scores)}) no tienen el mismo largo"
        )
    joined = [
        (i, LeaderboardRow(name=p.name, **s.model_dump()))
        for i, (p, s) in enumerate(zip(participants, scores))
    ]
    joined.sort(key=lambda pair: (-pair[1].badgeCount, pair[0]))
    return [row for _, row in joined]
