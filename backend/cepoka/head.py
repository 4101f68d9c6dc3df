# FILE: cepoka/head.py
from html import escape
from typing import Dict, List, Tuple

from .settings import SITE_DESCRIPTION, SITE_NAME, THEME_COLOR

# (tag, attributes): 순서대로 <head> 에 출력
HEAD_TAGS: Tuple[Tuple[str, Dict[str, str]], ...] = (
    ("meta", {"charset": "utf-8"}),
    ("meta", {"name": "viewport", "content": "width=device-width, initial-scale=1, minimum-scale=1, maximum-scale=5"}),
    ("meta", {"name": "description", "content": SITE_DESCRIPTION}),
    ("link", {"rel": "manifest", "href": "/manifest.json"}),
    ("link", {"rel": "icon", "href": "/icons/sitelogo.png"}),
    ("link", {"rel": "apple-touch-icon", "href": "/icons/sitelogo.png"}),
    ("meta", {"name": "apple-mobile-web-app-capable", "content": "yes"}),
    ("meta", {"name": "apple-mobile-web-app-status-bar-style", "content": "default"}),
    ("meta", {"name": "apple-mobile-web-app-title", "content": SITE_NAME}),
    ("meta", {"name": "mobile-web-app-capable", "content": "yes"}),
    ("meta", {"name": "theme-color", "content": THEME_COLOR}),
    ("meta", {"name": "application-name", "content": SITE_NAME}),
    ("meta", {"name": "msapplication-TileColor", "content": THEME_COLOR}),
    ("meta", {"name": "msapplication-tap-highlight", "content": "no"}),
    ("meta", {"name": "format-detection", "content": "telephone=no"}),
)


def _render_tag(tag: str, attrs: Dict[str, str]) -> str:
    rendered = " ".join(f'{k}="{escape(v)}"' for k, v in attrs.items())
    return f"<{tag} {rendered} />"


def render_head(title: str = SITE_NAME) -> str:
    lines: List[str] = [_render_tag(tag, attrs) for tag, attrs in HEAD_TAGS]
    lines.append(f"<title>{escape(title)}</title>")
    return "\n    ".join(lines)


OFFLINE_PAGE = """\
<!DOCTYPE html>
<html lang="en">
  <head>
    {head}
    <style>
      body {{ margin: 0; font-family: system-ui, sans-serif; background: #fff; }}
      main {{ min-height: 100vh; display: flex; flex-direction: column; align-items: center;
              justify-content: center; padding: 1rem; text-align: center; }}
      img {{ width: 6rem; height: 6rem; object-fit: contain; margin-bottom: 1.5rem; }}
      p {{ color: #4b5563; margin-bottom: 1.5rem; }}
      a {{ background: #000; color: #fff; padding: .75rem 1.5rem; border-radius: .5rem;
           text-decoration: none; font-weight: 500; }}
    </style>
  </head>
  <body>
    <main>
      <img src="/icons/sitelogo.png" alt="Cepoka Logo" />
      <h1>You're offline</h1>
      <p>Please check your internet connection and try again.</p>
      <a href="/">Retry</a>
    </main>
  </body>
</html>
"""


def render_offline_page() -> str:
    return OFFLINE_PAGE.format(head=render_head(f"Offline | {SITE_NAME}"))
