"""Jinja2 environment shared by the HTML-based exports."""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from markupsafe import Markup, escape

TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache
def get_environment() -> Environment:
    """
    Return the cached template environment.

    Autoescaping is always on: every value in these documents is user text.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["nl2br"] = _nl2br
    return env


def _nl2br(value):
    return Markup("<br>").join(escape(line) for line in str(value or "").splitlines())
