"""FastAPI REST endpoints for calculator sessions.

Routes
------
POST   /calculators              Start a new calculator session
GET    /calculators              List sessions
GET    /calculators/{id}         Current view of a session
POST   /calculators/{id}/keys    Press a sequence of keys
POST   /calculators/{id}/clear   Reset the calculator
DELETE /calculators/{id}         Delete a session
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from models import CalculatorListResponse, CalculatorView, KeySequence
from store import CalculatorNotFoundError, CalculatorStore

router = APIRouter(prefix="/calculators", tags=["calculators"])

# The store instance is injected by the app factory (see app.py).
_store: CalculatorStore | None = None


def set_store(store: CalculatorStore) -> None:
    """Inject the store instance. Called once at app startup."""
    global _store
    _store = store


def get_store() -> CalculatorStore:
    assert _store is not None, "Store not initialized"
    return _store


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=404, detail=f"Calculator not found: {session_id}"
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=CalculatorView, status_code=201)
def create_calculator() -> CalculatorView:
    """Start a new calculator showing 0."""
    return get_store().create().view()


@router.get("", response_model=CalculatorListResponse)
def list_calculators(
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=50, ge=1, le=200, description="Pagination limit"),
) -> CalculatorListResponse:
    store = get_store()
    sessions = store.list(offset=offset, limit=limit)
    return CalculatorListResponse(
        items=[s.view() for s in sessions], total=store.count()
    )


@router.get("/{session_id}", response_model=CalculatorView)
def get_calculator(session_id: str) -> CalculatorView:
    try:
        return get_store().get(session_id).view()
    except CalculatorNotFoundError:
        raise _not_found(session_id)


@router.post("/{session_id}/keys", response_model=CalculatorView)
def press_keys(session_id: str, payload: KeySequence) -> CalculatorView:
    """Press keys in order and return the resulting view."""
    try:
        return get_store().press(session_id, payload.keys).view()
    except CalculatorNotFoundError:
        raise _not_found(session_id)


@router.post("/{session_id}/clear", response_model=CalculatorView)
def clear_calculator(session_id: str) -> CalculatorView:
    try:
        return get_store().reset(session_id).view()
    except CalculatorNotFoundError:
        raise _not_found(session_id)


@router.delete("/{session_id}", response_model=CalculatorView)
def delete_calculator(session_id: str) -> CalculatorView:
    """Delete a session and return its last view."""
    try:
        return get_store().delete(session_id).view()
    except CalculatorNotFoundError:
        raise _not_found(session_id)
