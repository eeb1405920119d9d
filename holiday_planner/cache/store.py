"""
Persistent AI result cache.

Stores one payload per (scope, key, kind), where scope is a trip id or
None for trip-independent lookups. Entries never expire: callers fold any
mutable inputs into the key instead. Every persistence failure surfaces
as ``StoreError`` so the request pipeline can degrade to a cache miss.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from holiday_planner.persistence.models import AIResultCacheModel
from holiday_planner.shared.errors import StoreError


logger = logging.getLogger(__name__)


CACHE_KINDS = ("research", "comparison", "optimization", "suggestions", "plan_change")


@dataclass(frozen=True)
class CachedResult:
    """A previously computed AI payload."""

    scope: Optional[str]
    key: str
    kind: str
    payload: Any
    model: Optional[str]
    tokens_used: Optional[int]
    created_at: datetime


class ResultCacheStore:
    """
    Cache of AI payloads backed by the ``ai_research_cache`` table.

    Usage:
        store = ResultCacheStore(session_factory)
        hit = store.get(trip_id, key, "comparison")
        if hit is None:
            payload = generate()
            store.put(trip_id, key, "comparison", payload)
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, scope: Optional[str], key: str, kind: str) -> Optional[CachedResult]:
        """
        Look up a cached payload.

        A None scope only matches entries stored without a trip.

        Raises:
            StoreError: If the cache table cannot be read.
        """
        try:
            with self._session_factory() as session:
                model = self._find(session, scope, key, kind)
                return None if model is None else _to_result(model)
        except SQLAlchemyError as e:
            raise StoreError(f"Cache read failed: {e}") from e

    def put(
        self,
        scope: Optional[str],
        key: str,
        kind: str,
        payload: Any,
        model: Optional[str] = None,
        tokens_used: Optional[int] = None,
    ) -> CachedResult:
        """
        Store a payload, replacing any entry with the same (scope, key, kind).

        A concurrent insert of the same tuple is resolved by overwriting the
        row that won the race.

        Raises:
            ValueError: If kind is not a known cache kind.
            StoreError: If the cache table cannot be written.
        """
        if kind not in CACHE_KINDS:
            raise ValueError(f"Unknown cache kind '{kind}'")

        try:
            try:
                return self._upsert(scope, key, kind, payload, model, tokens_used)
            except IntegrityError:
                logger.info(f"Concurrent cache write detected, overwriting | kind={kind}")
                return self._upsert(scope, key, kind, payload, model, tokens_used)
        except SQLAlchemyError as e:
            raise StoreError(f"Cache write failed: {e}") from e

    def _upsert(
        self,
        scope: Optional[str],
        key: str,
        kind: str,
        payload: Any,
        model_name: Optional[str],
        tokens_used: Optional[int],
    ) -> CachedResult:
        with self._session_factory() as session, session.begin():
            existing = self._find(session, scope, key, kind)
            if existing is not None:
                existing.payload = payload
                existing.model = model_name
                existing.tokens_used = tokens_used
                row = existing
            else:
                row = AIResultCacheModel(
                    trip_id=scope,
                    cache_key=key,
                    kind=kind,
                    payload=payload,
                    model=model_name,
                    tokens_used=tokens_used,
                )
                session.add(row)
            session.flush()
            return _to_result(row)

    @staticmethod
    def _find(
        session: Session, scope: Optional[str], key: str, kind: str
    ) -> Optional[AIResultCacheModel]:
        scope_filter = (
            AIResultCacheModel.trip_id.is_(None)
            if scope is None
            else AIResultCacheModel.trip_id == scope
        )
        stmt = (
            select(AIResultCacheModel)
            .where(
                scope_filter,
                AIResultCacheModel.cache_key == key,
                AIResultCacheModel.kind == kind,
            )
            .order_by(AIResultCacheModel.updated_at.desc())
            .limit(1)
        )
        return session.execute(stmt).scalars().first()


def _to_result(model: AIResultCacheModel) -> CachedResult:
    return CachedResult(
        scope=model.trip_id,
        key=model.cache_key,
        kind=model.kind,
        payload=model.payload,
        model=model.model,
        tokens_used=model.tokens_used,
        created_at=model.created_at,
    )
