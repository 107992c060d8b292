"""ASGI entrypoint for the mood journal API."""

from mood_journal.api.app import create_app
from mood_journal.containers import build_container

app = create_app(build_container())
