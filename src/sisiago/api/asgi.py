"""ASGI entrypoint for the SISIAGO audit API."""

from sisiago.api.app import create_app
from sisiago.containers import build_container

app = create_app(build_container())
