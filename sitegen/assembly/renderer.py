"""Renders a SiteArtifact into static HTML and CSS."""

from __future__ import annotations

import json
from html import escape

from sitegen.orchestration.orchestrator import SiteArtifact
from sitegen.stages.schemas import LayoutSection, PageLayout, StyleSystem


def render_styles(style: StyleSystem) -> str:
    """CSS custom properties plus a minimal base stylesheet."""
    variables = "\n".join(f"  --color-{name}: {value};" for name, value in style.colors.items())
    return f""":root {{
{variables}
  --font-heading: "{style.font_heading}", serif;
  --font-body: "{style.font_body}", sans-serif;
}}

body {{
  margin: 0;
  font-family: var(--font-body);
  color: var(--color-text);
  background: var(--color-background);
}}

h1, h2, h3 {{
  font-family: var(--font-heading);
  color: var(--color-primary);
}}

nav ul {{
  display: flex;
  gap: 1.5rem;
  list-style: none;
}}

section {{
  padding: 4rem 2rem;
}}

.bg-primary {{ background: var(--color-primary); color: var(--color-background); }}
.bg-secondary {{ background: var(--color-secondary); }}
.bg-accent {{ background: var(--color-accent); }}
.bg-muted {{ background: color-mix(in srgb, var(--color-secondary) 10%, var(--color-background)); }}
.bg-background {{ background: var(--color-background); }}

.cta {{
  display: inline-block;
  padding: 0.75rem 1.5rem;
  background: var(--color-accent);
  color: var(--color-background);
  text-decoration: none;
}}

.grid {{ display: grid; gap: 2rem; }}
.cols-2 {{ grid-template-columns: repeat(2, 1fr); }}
.cols-3 {{ grid-template-columns: repeat(3, 1fr); }}
.cols-4 {{ grid-template-columns: repeat(4, 1fr); }}

img.placeholder {{ opacity: 0.6; }}
"""


def _head(artifact: SiteArtifact, page: PageLayout) -> str:
    seo = artifact.seo_metadata
    is_home = page is artifact.layout.home
    title = seo.title if seo and is_home else f"{page.title} | {artifact.project_name}"

    lines = [
        '<meta charset="utf-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1">',
        f"<title>{escape(title)}</title>",
        '<link rel="stylesheet" href="styles/styles.css">',
    ]
    if seo and is_home:
        lines.extend([
            f'<meta name="description" content="{escape(seo.description)}">',
            f'<meta name="keywords" content="{escape(", ".join(seo.keywords))}">',
            f'<meta property="og:title" content="{escape(seo.og_title)}">',
            f'<meta property="og:description" content="{escape(seo.og_description)}">',
        ])
        if seo.og_image:
            lines.append(f'<meta property="og:image" content="{escape(seo.og_image)}">')
        schema = json.dumps(seo.schema_ld, indent=2).replace("</", "<\\/")
        lines.append(f'<script type="application/ld+json">\n{schema}\n</script>')
    return "\n    ".join(lines)


def _link(artifact: SiteArtifact, page: PageLayout, target: str) -> str:
    # Anchors point at the home page when rendered on another page
    if target.startswith("#") and page is not artifact.layout.home:
        return f"{artifact.layout.home.path}{target}"
    return target


def _navigation(artifact: SiteArtifact, page: PageLayout) -> str:
    items = []
    for target in artifact.layout.navigation:
        label = target.lstrip("#").split("-")[0].replace(".html", "").capitalize()
        href = _link(artifact, page, target)
        items.append(f'<li><a href="{escape(href)}">{escape(label)}</a></li>')
    return f"<nav><ul>{''.join(items)}</ul></nav>"


def _contact_href(artifact: SiteArtifact, current: PageLayout) -> str:
    for page in artifact.layout.pages:
        for section in page.sections:
            if section.type == "contact":
                anchor = f"#{section.key}"
                return anchor if page is current else f"{page.path}{anchor}"
    return "#"


def _section(artifact: SiteArtifact, page: PageLayout, section: LayoutSection) -> str:
    copy = artifact.copy_for(section.key)
    parts = []

    images = artifact.images.for_section(section.key) if artifact.images is not None else []
    for image in images:
        css = ' class="placeholder"' if image.placeholder else ""
        parts.append(f'<img src="{escape(image.url)}" alt="{escape(image.alt)}"{css}>')

    if copy is not None:
        tag = "h1" if section.type == "hero" else "h2"
        parts.append(f"<{tag}>{escape(copy.headline)}</{tag}>")
        if copy.subheadline:
            parts.append(f"<h3>{escape(copy.subheadline)}</h3>")
        if copy.paragraph:
            parts.append(f"<p>{escape(copy.paragraph)}</p>")
        if copy.bullets:
            bullets = "".join(f"<li>{escape(b)}</li>" for b in copy.bullets)
            grid = f"grid cols-{section.columns}" if section.columns > 1 else ""
            parts.append(f'<ul class="{grid}">{bullets}</ul>' if grid else f"<ul>{bullets}</ul>")
        if copy.cta_label:
            parts.append(f'<a class="cta" href="{_contact_href(artifact, page)}">{escape(copy.cta_label)}</a>')

    body = "\n      ".join(parts)
    return (
        f'<section id="{escape(section.key)}" class="{escape(section.type)} '
        f'variant-{escape(section.variant)} bg-{escape(section.background)}">\n'
        f"      {body}\n    </section>"
    )


def render_page(artifact: SiteArtifact, page: PageLayout) -> str:
    sections = "\n    ".join(_section(artifact, page, s) for s in page.sections)
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    {_head(artifact, page)}
  </head>
  <body>
    <header>{_navigation(artifact, page)}</header>
    <main>
    {sections}
    </main>
    <footer><p>&copy; {escape(artifact.project_name)}</p></footer>
  </body>
</html>
"""


def render_site(artifact: SiteArtifact) -> dict[str, str]:
    """Render every page and the stylesheet.

    Returns:
        Relative path to file content.
    """
    files = {"styles/styles.css": render_styles(artifact.style_system)}
    for page in artifact.layout.pages:
        files[page.path] = render_page(artifact, page)
    return files
