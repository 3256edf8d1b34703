from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from movie_library.models import Actor, Country, Genre, Language

logger = logging.getLogger(__name__)

REFERENCE_DATA = (
    (Genre, ("Action", "Comedy", "Drama", "Sci-Fi")),
    (Language, ("English", "Hindi", "Spanish")),
    (Country, ("USA", "India", "UK")),
    (Actor, ("Leonardo DiCaprio", "Tom Hardy", "Christian Bale")),
)


def seed_reference_data(db: Session) -> int:
    """Fill empty lookup tables with defaults. Tables that already hold rows are left alone."""
    inserted = 0
    for model, names in REFERENCE_DATA:
        if db.scalar(select(func.count()).select_from(model)):
            continue
        db.add_all(model(name=name) for name in names)
        inserted += len(names)
    db.commit()
    logger.info("Reference data seeded rows=%s", inserted)
    return inserted
