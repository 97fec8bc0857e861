"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.insights.config_loader import InsightsConfig, get_insights_config
from src.insights.store import PostgresEventStore


@dataclass(frozen=True)
class AuthContext:
    """Authenticated subject extracted from the Clerk JWT."""

    subject_id: str  # stable id used to scope every check-in query
    email: str | None = None
    session_id: str | None = None


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated subject from the request state.

    The Clerk auth middleware sets ``request.state.auth`` before routes run.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


def get_event_store() -> PostgresEventStore:
    return PostgresEventStore()


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
EventStoreDep = Annotated[PostgresEventStore, Depends(get_event_store)]
InsightsConfigDep = Annotated[InsightsConfig, Depends(get_insights_config)]
