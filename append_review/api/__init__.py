import numpy as np
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from append_review.api.endpoints import get_endpoints_router
from append_review.config import settings
from append_review.session import ReviewSession
from append_review.stores.base import NoteStore


def create_app(*, store: NoteStore, rng: np.random.Generator | None = None) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    session = ReviewSession(store, rng=rng)
    app.state.session = session
    app.include_router(router=get_endpoints_router(session=session))

    return app
