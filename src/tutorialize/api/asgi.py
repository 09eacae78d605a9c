"""ASGI entrypoint for the tutorial API."""

from tutorialize.api.app import create_app
from tutorialize.containers import build_container

app = create_app(build_container())
