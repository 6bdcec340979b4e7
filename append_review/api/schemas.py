from pydantic import BaseModel

from append_review.domain.note import CamelModel, Note
from append_review.ranking.elo import Outcome
from append_review.ranking.leaderboard import RankingStats


class MarkdownUpdate(BaseModel):
    content: str


class VoteRequest(BaseModel):
    winner: Outcome


class SelectionWeightsUpdate(CamelModel):
    recency: float | None = None
    low_votes: float | None = None
    random: float | None = None


class SettingsUpdate(CamelModel):
    """Partial ranking settings, only the fields sent are changed."""

    initial_rating: int | None = None
    k_factor: float | None = None
    pair_rating_window: float | None = None
    min_candidates: int | None = None
    recency_cap_days: float | None = None
    selection_weights: SelectionWeightsUpdate | None = None


class RankingsResponse(CamelModel):
    notes: list[Note]
    stats: RankingStats
