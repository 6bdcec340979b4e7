import sys

from loguru import logger

from append_review.api import create_app
from append_review.config import settings
from append_review.stores.local import LocalNoteStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Starting append review with document {settings.local_store_path}")
store = LocalNoteStore(filepath=settings.local_store_path)
app = create_app(store=store)
