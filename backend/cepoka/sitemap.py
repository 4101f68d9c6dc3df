# FILE: cepoka/sitemap.py
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from .schemas import SitemapEntry
from .settings import SITE_URL

# (path, changeFrequency, priority)
STATIC_PAGES = (
    ("", "daily", 1.0),
    ("/shop", "daily", 0.9),
    ("/contact", "monthly", 0.8),
)


def sitemap_entries(base_url: str = SITE_URL, now: Optional[datetime] = None) -> List[SitemapEntry]:
    now = now or datetime.now(timezone.utc)
    base_url = base_url.rstrip("/")
    return [
        SitemapEntry(url=f"{base_url}{path}", last_modified=now, change_frequency=freq, priority=priority)
        for path, freq, priority in STATIC_PAGES
    ]


def render_sitemap_xml(entries: Sequence[SitemapEntry]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for e in entries:
        lines.append("<url>")
        lines.append(f"<loc>{escape(e.url)}</loc>")
        lines.append(f"<lastmod>{e.last_modified.isoformat()}</lastmod>")
        lines.append(f"<changefreq>{e.change_frequency}</changefreq>")
        lines.append(f"<priority>{e.priority:.1f}</priority>")
        lines.append("</url>")
    lines.append("</urlset>")
    return "\n".join(lines)


def render_robots_txt(base_url: str = SITE_URL) -> str:
    return f"User-agent: *\nAllow: /\nSitemap: {base_url.rstrip('/')}/sitemap.xml\n"
