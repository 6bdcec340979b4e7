from fastapi import APIRouter, HTTPException
from loguru import logger

from append_review.api.schemas import (
    MarkdownUpdate,
    RankingsResponse,
    SettingsUpdate,
    VoteRequest,
)
from append_review.domain.note import Note, NotePair
from append_review.domain.settings import RankingSettings
from append_review.ranking.leaderboard import (
    SortDirection,
    SortField,
    filter_notes,
    ranking_stats,
    sort_notes,
)
from append_review.session import ReviewSession


def _create_vote_endpoint(session: ReviewSession):
    """Create the vote endpoint handler."""

    async def vote(request: VoteRequest) -> NotePair | None:
        if session.current_pair is None:
            raise HTTPException(status_code=409, detail="No pair to vote on")

        try:
            return session.submit_vote(request.winner)
        except Exception as e:
            logger.error(f"Error recording vote: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return vote


def _create_archive_endpoint(session: ReviewSession):
    """Create the archive endpoint handler."""

    async def archive_note(note_id: str) -> list[Note]:
        if not any(note.id == note_id for note in session.active_notes):
            raise HTTPException(status_code=404, detail="Note not found")

        session.archive_note(note_id)
        logger.info(f"Archived note {note_id}")
        return session.archived_notes

    return archive_note


def _create_unarchive_endpoint(session: ReviewSession):
    """Create the unarchive endpoint handler."""

    async def unarchive_note(note_id: str) -> list[Note]:
        if not any(note.id == note_id for note in session.archived_notes):
            raise HTTPException(status_code=404, detail="Archived note not found")

        session.unarchive_note(note_id)
        logger.info(f"Restored note {note_id}")
        return session.active_notes

    return unarchive_note


def _create_rankings_endpoint(session: ReviewSession):
    """Create the leaderboard endpoint handler."""

    async def rankings(
        q: str | None = None,
        sort: SortField = "rating",
        direction: SortDirection = "desc",
    ) -> RankingsResponse:
        notes = session.active_notes
        return RankingsResponse(
            notes=sort_notes(filter_notes(notes, q), sort, direction),
            stats=ranking_stats(notes),
        )

    return rankings


def get_endpoints_router(*, session: ReviewSession) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/data")
    async def get_data():
        return session.store.get_snapshot().to_json_dict()

    @router.put("/api/markdown")
    async def update_markdown(update: MarkdownUpdate):
        session.update_markdown(update.content)
        return session.store.get_snapshot().to_json_dict()

    @router.post("/api/notes/parse")
    async def parse_notes() -> list[Note]:
        return session.parse_and_apply()

    @router.get("/api/pair")
    async def current_pair() -> NotePair | None:
        if session.current_pair is not None:
            return session.current_pair
        return session.generate_pair()

    @router.post("/api/pair")
    async def new_pair() -> NotePair | None:
        return session.generate_pair()

    @router.get("/api/archive")
    async def archived_notes(
        q: str | None = None,
        sort: SortField = "archivedAt",
        direction: SortDirection = "desc",
    ) -> list[Note]:
        return sort_notes(filter_notes(session.archived_notes, q), sort, direction)

    @router.patch("/api/settings")
    async def update_settings(update: SettingsUpdate) -> RankingSettings:
        changes = update.model_dump(exclude_none=True)
        if changes:
            session.update_settings(**changes)
        return session.store.get_snapshot().settings

    @router.post("/api/rankings/reset")
    async def reset_rankings():
        session.reset_rankings()
        return {"status": "ok"}

    @router.delete("/api/data")
    async def clear_all_data():
        session.clear_all_data()
        return session.store.get_snapshot().to_json_dict()

    router.post("/api/vote")(_create_vote_endpoint(session))
    router.post("/api/notes/{note_id}/archive")(_create_archive_endpoint(session))
    router.post("/api/archive/{note_id}/unarchive")(_create_unarchive_endpoint(session))
    router.get("/api/rankings")(_create_rankings_endpoint(session))

    return router
