"""tickerview.api: FastAPI surface over the view-state machine."""

from tickerview.api.app import create_app

__all__ = ["create_app"]
