"""ASGI entrypoint for the invite gate API."""

from invite_gate.api.app import create_app
from invite_gate.containers import build_container

app = create_app(build_container())
