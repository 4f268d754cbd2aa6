"""Rendering and writing of assembled sites."""

from sitegen.assembly.renderer import render_page, render_site, render_styles
from sitegen.assembly.writer import SiteWriter

__all__ = [
    "SiteWriter",
    "render_page",
    "render_site",
    "render_styles",
]
