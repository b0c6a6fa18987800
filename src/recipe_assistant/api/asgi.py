"""ASGI entrypoint for the recipe assistant API."""

from recipe_assistant.api.app import create_app
from recipe_assistant.containers import build_container

app = create_app(build_container())
