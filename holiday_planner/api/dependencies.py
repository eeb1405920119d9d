"""
FastAPI dependency injection for the AI endpoints.

Provides dependencies for:
- Authentication (current user from a Supabase access token)
- The user-scoped trip repository and the AI result cache
- The text generation provider and the page fetcher

Every dependency can be replaced through ``app.dependency_overrides``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from holiday_planner.cache.store import ResultCacheStore
from holiday_planner.operations.base import AIServices
from holiday_planner.operations.link_extraction import PageFetcher
from holiday_planner.persistence.database import get_session_factory
from holiday_planner.persistence.repository import TripRepository
from holiday_planner.shared.errors import AuthError
from holiday_planner.shared.llm import LLMProvider, OpenAIProvider
from holiday_planner.shared.settings import Settings, get_settings


logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller."""

    id: str
    email: str


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """
    Resolve the caller from the Bearer token.

    The token is verified with the configured secret and audience, then
    the email is checked against the allowlist when one is configured.

    Raises:
        AuthError: If the token is missing, invalid or not allowlisted
    """
    if credentials is None:
        raise AuthError("Unauthorized")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.jwt_audience,
        )
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token: %s", e)
        raise AuthError("Unauthorized") from e

    user_id = payload.get("sub")
    email = (payload.get("email") or "").lower()
    if not user_id:
        raise AuthError("Unauthorized")

    if settings.allowed_emails and email not in settings.allowed_emails:
        logger.warning("Rejected non-allowlisted user: %s", email)
        raise AuthError("Unauthorized")

    return CurrentUser(id=user_id, email=email)


def get_db_session_factory() -> sessionmaker[Session]:
    return get_session_factory()


def get_repository(
    user: CurrentUser = Depends(get_current_user),
    session_factory: sessionmaker[Session] = Depends(get_db_session_factory),
) -> TripRepository:
    return TripRepository(session_factory, user.id)


def get_cache_store(
    session_factory: sessionmaker[Session] = Depends(get_db_session_factory),
) -> ResultCacheStore:
    return ResultCacheStore(session_factory)


def get_provider() -> LLMProvider:
    return OpenAIProvider()


def get_page_fetcher(settings: Settings = Depends(get_settings)) -> PageFetcher:
    return PageFetcher(timeout=settings.link_fetch_timeout)


def get_services(
    provider: LLMProvider = Depends(get_provider),
    repository: TripRepository = Depends(get_repository),
    cache_store: ResultCacheStore = Depends(get_cache_store),
    page_fetcher: PageFetcher = Depends(get_page_fetcher),
) -> AIServices:
    """Bundle the collaborators for one AI request."""
    return AIServices(
        provider=provider,
        repository=repository,
        cache_store=cache_store,
        page_fetcher=page_fetcher,
    )
