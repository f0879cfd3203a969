"""ASGI entrypoint for running with uvicorn."""

from __future__ import annotations

from mavenrepo.factory import create_app

app = create_app()


if __name__ == "__main__":
    """
    Allow running `python -m mavenrepo.main` to start the Uvicorn
    development server.
    """
    import uvicorn

    uvicorn.run(
        "mavenrepo.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
