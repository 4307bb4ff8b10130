"""Internal JSON API package: FastAPI routes over Planning Center."""

from __future__ import annotations


def launch() -> None:
    """Run the worship planner API server."""
    from worship_planner.web.app import main

    main()
