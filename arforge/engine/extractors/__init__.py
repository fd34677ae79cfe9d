"""Geometry extractors. Importing this package registers all of them."""

from arforge.engine.extractors import photo, svg, text  # noqa: F401
