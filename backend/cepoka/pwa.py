# FILE: cepoka/pwa.py
"""
Web app manifest and the browser service worker script.

The script is rendered from the same constants the Python edge uses, so the
browser worker and the edge agree on cache name, seed list and fallbacks.
"""
import json
from typing import Any, Dict, Sequence

from .constants.offline import (
    CACHE_NAME,
    IMAGE_FALLBACK_URL,
    NETWORK_ERROR_BODY,
    NETWORK_ERROR_STATUS,
    OFFLINE_URL,
    PRECACHE_URLS,
)
from .settings import SITE_DESCRIPTION, SITE_NAME, THEME_COLOR


def build_manifest() -> Dict[str, Any]:
    return {
        "name": SITE_NAME,
        "short_name": "Cepoka",
        "description": SITE_DESCRIPTION,
        "id": "/",
        "start_url": "/",
        "scope": "/",
        "display": "standalone",
        "background_color": THEME_COLOR,
        "theme_color": THEME_COLOR,
        "icons": [
            {"src": "/icons/sitelogo-favicon-192x192.png", "sizes": "192x192", "type": "image/png", "purpose": "any"},
            {"src": "/icons/sitelogo-favicon-512x512.png", "sizes": "512x512", "type": "image/png", "purpose": "any"},
            {"src": "/favicon-512.png", "sizes": "512x512", "type": "image/png", "purpose": "maskable"},
        ],
        "categories": ["shopping", "beauty"],
    }


SERVICE_WORKER_TEMPLATE = """\
const CACHE_NAME = {cache_name};
const urlsToCache = {urls};

self.addEventListener("install", (event) => {{
  event.waitUntil(
    caches.open(CACHE_NAME).then((cache) => {{
      console.log("Opened cache");
      return cache.addAll(urlsToCache);
    }})
  );
}});

self.addEventListener("fetch", (event) => {{
  event.respondWith(
    caches.match(event.request).then((response) => {{
      if (response) {{
        return response;
      }}

      return fetch(event.request)
        .then((response) => {{
          if (!response || response.status !== 200 || response.type !== "basic") {{
            return response;
          }}

          const responseToCache = response.clone();
          caches.open(CACHE_NAME).then((cache) => {{
            cache.put(event.request, responseToCache);
          }});

          return response;
        }})
        .catch(() => {{
          if (event.request.mode === "navigate") {{
            return caches.match({offline_url});
          }}
          if (event.request.destination === "image") {{
            return caches.match({image_fallback_url});
          }}
          return new Response({error_body}, {{
            status: {error_status},
            headers: {{ "Content-Type": "text/plain" }},
          }});
        }});
    }})
  );
}});

self.addEventListener("activate", (event) => {{
  const cacheWhitelist = [CACHE_NAME];
  event.waitUntil(
    caches.keys().then((cacheNames) =>
      Promise.all(
        cacheNames
          .filter((cacheName) => cacheWhitelist.indexOf(cacheName) === -1)
          .map((cacheName) => caches.delete(cacheName))
      )
    )
  );
}});
"""


def render_service_worker(
    cache_name: str = CACHE_NAME,
    precache_urls: Sequence[str] = PRECACHE_URLS,
    offline_url: str = OFFLINE_URL,
    image_fallback_url: str = IMAGE_FALLBACK_URL,
) -> str:
    return SERVICE_WORKER_TEMPLATE.format(
        cache_name=json.dumps(cache_name),
        urls=json.dumps(list(precache_urls), indent=2),
        offline_url=json.dumps(offline_url),
        image_fallback_url=json.dumps(image_fallback_url),
        error_body=json.dumps(NETWORK_ERROR_BODY),
        error_status=NETWORK_ERROR_STATUS,
    )
