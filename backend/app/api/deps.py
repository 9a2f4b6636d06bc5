"""
Shared route dependencies.
"""

from typing import Optional

from starlette.requests import Request

from app.infrastructure.text_client import TextGenerator


def get_text_generator(request: Request) -> Optional[TextGenerator]:
    """Process-wide text generator created in the application lifespan."""
    return getattr(request.app.state, "text_generator", None)
