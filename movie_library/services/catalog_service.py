from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from movie_library.core.errors import APIError
from movie_library.models import Actor, Country, Genre, Language
from movie_library.schemas.catalog import NamedEntity

logger = logging.getLogger(__name__)

NamedModel = type[Genre] | type[Language] | type[Country] | type[Actor]


def list_named(db: Session, model: NamedModel) -> list[NamedEntity]:
    rows = db.scalars(select(model).order_by(model.name.asc())).all()
    return [NamedEntity.model_validate(row) for row in rows]


def create_named(db: Session, model: NamedModel, name: str) -> NamedEntity:
    existing = db.scalar(select(model).where(func.lower(model.name) == name.lower()))
    if existing is not None:
        raise APIError(
            status_code=409,
            code="duplicate_name",
            message=f"{model.__name__} '{name}' already exists",
        )
    row = model(name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("%s created id=%s", model.__name__, row.id)
    return NamedEntity.model_validate(row)
