"""Jinja2 page templates for the static site"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, StrictUndefined


BASE_HTML = """\
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }} - {{ site_title }}</title>
  <style>
    body { font-family: system-ui, sans-serif; max-width: 960px; margin: 0 auto; padding: 0 20px 40px; color: #111; }
    nav.breadcrumb ol { list-style: none; padding: 0; display: flex; flex-wrap: wrap; gap: 6px; color: #666; }
    nav.breadcrumb li + li::before { content: "/"; margin-right: 6px; }
    pre { background: #f6f7f9; padding: 12px; overflow-x: auto; }
    table { border-collapse: collapse; } th, td { border: 1px solid #ddd; padding: 4px 8px; }
    blockquote { border-left: 4px solid #ccd; margin-left: 0; padding-left: 12px; color: #444; }
    .meta { color: #666; font-size: 0.9em; }
    aside { border-top: 1px solid #e7e7e7; margin-top: 24px; }
  </style>
</head>
<body>
{% block content %}{% endblock %}
</body>
</html>
"""

PAGE_HTML = """\
{% extends "base.html" %}
{% block content %}
<nav class="breadcrumb"><ol>
{%- for label, url in breadcrumbs %}
  <li>{% if url %}<a href="{{ url }}">{{ label }}</a>{% else %}{{ label }}{% endif %}</li>
{%- endfor %}
</ol></nav>
<article>
{%- if status or last_updated %}
<p class="meta">
{%- if status %}Status: {{ status }}{% endif %}
{%- if status and last_updated %} | {% endif %}
{%- if last_updated %}Last updated: {{ last_updated }}{% endif -%}
</p>
{%- endif %}
{%- if toc %}
<nav class="toc"><h2>Contents</h2>{{ toc|safe }}</nav>
{%- endif %}
{{ body|safe }}
</article>
{%- if see_also %}
<aside class="see-also"><h2>See also</h2><ul>
{%- for label, url in see_also %}
  <li><a href="{{ url }}">{{ label }}</a></li>
{%- endfor %}
</ul></aside>
{%- endif %}
{%- if referenced_by %}
<aside class="referenced-by"><h2>Referenced by</h2><ul>
{%- for label, url in referenced_by %}
  <li><a href="{{ url }}">{{ label }}</a></li>
{%- endfor %}
</ul></aside>
{%- endif %}
{% endblock %}
"""

INDEX_HTML = """\
{% extends "base.html" %}
{% block content %}
<h1>{{ site_title }}</h1>
{%- for group in groups %}
<section id="{{ group.anchor }}">
<h2>{{ group.label }}</h2>
<ul>
{%- for entry in group.entries %}
  <li><a href="{{ entry.url }}">{{ entry.title }}</a>{% if entry.status %} <span class="meta">({{ entry.status }})</span>{% endif %}</li>
{%- endfor %}
</ul>
</section>
{%- endfor %}
{% endblock %}
"""

DEFAULT_TEMPLATES = {
    "base.html": BASE_HTML,
    "page.html": PAGE_HTML,
    "index.html": INDEX_HTML,
}


@dataclass(frozen=True)
class Templates:
    env: Environment

    def render_page(self, context: dict[str, Any]) -> str:
        return str(self.env.get_template("page.html").render(**context))

    def render_index(self, context: dict[str, Any]) -> str:
        return str(self.env.get_template("index.html").render(**context))


def create_environment(templates_dir: Optional[Path] = None) -> Templates:
    """Built-in templates, optionally overridden file-by-file from templates_dir."""
    loaders = [DictLoader(DEFAULT_TEMPLATES)]
    if templates_dir is not None:
        loaders.insert(0, FileSystemLoader(str(templates_dir)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        undefined=StrictUndefined,
        autoescape=True,
        keep_trailing_newline=True,
    )
    return Templates(env=env)
