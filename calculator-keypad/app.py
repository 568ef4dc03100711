"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""
from __future__ import annotations

from fastapi import FastAPI

from api import router, set_store
from log_config import DEFAULT_LOG_LEVEL, setup_logging
from store import CalculatorStore


def create_app(
    store: CalculatorStore | None = None,
    log_level: int | str = DEFAULT_LOG_LEVEL,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional store for testing; creates a fresh one if omitted.
    """
    setup_logging(log_level)

    if store is None:
        store = CalculatorStore()

    set_store(store)

    app = FastAPI(
        title="Keypad Calculator API",
        description=(
            "Drive four-function keypad calculators by posting key presses. "
            "Each session holds one immediate-execution calculator; the "
            "response carries the display text and the pending operation."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
