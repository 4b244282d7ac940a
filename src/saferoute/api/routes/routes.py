"""Route planning and selection endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from ...schemas.routing import (
    PanelVisibilityRequest,
    RoutePlanRequest,
    RoutePlanResponse,
    RouteSelectRequest,
)
from ...services.routing.service import plan_safe_routes, refresh_route_safety
from ...services.safety.session import RouteSafetySession

router = APIRouter(prefix="/routes", tags=["routes"])


def _session(request: Request) -> RouteSafetySession:
    session = getattr(request.app.state, "route_session", None)
    if session is None:
        session = RouteSafetySession()
        request.app.state.route_session = session
    return session


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest, request: Request) -> RoutePlanResponse:
    session = _session(request)
    try:
        snapshot = plan_safe_routes(payload, session)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ConnectionError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan routes: {str(exc)}",
        ) from exc
    return RoutePlanResponse.from_snapshot(snapshot)


@router.get("/current", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def current(request: Request) -> RoutePlanResponse:
    return RoutePlanResponse.from_snapshot(_session(request).snapshot())


@router.post("/refresh", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def refresh(request: Request) -> RoutePlanResponse:
    """Re-score the current alternatives after new reports came in."""
    try:
        snapshot = refresh_route_safety(_session(request))
    except Exception as exc:
        logging.exception(f"Error refreshing route safety: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to refresh route safety: {str(exc)}",
        ) from exc
    return RoutePlanResponse.from_snapshot(snapshot)


@router.post("/select", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def select(payload: RouteSelectRequest, request: Request) -> RoutePlanResponse:
    """Select a ranked route. Out-of-range indexes leave the selection unchanged."""
    session = _session(request)
    session.select(payload.index)
    return RoutePlanResponse.from_snapshot(session.snapshot())


@router.post("/panel", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def set_panel(payload: PanelVisibilityRequest, request: Request) -> RoutePlanResponse:
    session = _session(request)
    if payload.visible is None:
        session.toggle_panel()
    else:
        session.set_panel_visible(payload.visible)
    return RoutePlanResponse.from_snapshot(session.snapshot())
