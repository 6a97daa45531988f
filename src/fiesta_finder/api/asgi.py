"""ASGI entrypoint for the Fiesta Finder API."""

from fiesta_finder.api.app import create_app
from fiesta_finder.containers import build_container

app = create_app(build_container())
