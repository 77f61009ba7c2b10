"""
FastAPI dependencies shared by the endpoints.
"""
from typing import Any, Optional

from fastapi import Depends, Request

from rebalancer.container import Container

TRUE_VALUES = ("1", "true", "yes", "on")


def get_container(request: Request) -> Container:
    """Container attached to the running application."""
    return request.app.state.container


def parse_flag(value: Any) -> bool:
    """Interpret a query-string flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return False


async def resolve_dev_mode(
    request: Request,
    container: Container = Depends(get_container),
) -> bool:
    """
    Environment dev mode OR'd with the ``dev`` query flag on GET/DELETE.

    POST/PUT endpoints add their validated body ``dev`` field on top with
    ``simulate_requested``.
    """
    requested = False
    if request.method in ("GET", "DELETE"):
        requested = parse_flag(request.query_params.get("dev"))
    return requested or container.dev_mode


def simulate_requested(dev_mode: bool, body_dev: Optional[bool]) -> bool:
    """Final simulate decision for a request carrying a validated body flag."""
    return dev_mode or bool(body_dev)
