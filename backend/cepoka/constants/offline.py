# FILE: cepoka/constants/offline.py
from typing import Tuple

# 버전을 올리면 activate 시 이전 캐시가 삭제됨
CACHE_NAME = "cepoka-cache-v1"

PRECACHE_URLS: Tuple[str, ...] = (
    "/",
    "/index.html",
    "/manifest.json",
    "/favicon.svg",
    "/logo.png",
    "/offline",
    "/icons/barber-chair.png",
    "/icons/hairdryer.png",
    "/icons/hot-stone.png",
    "/icons/nails.png",
    "/icons/slim.png",
    "/icons/spa-bed.png",
)

OFFLINE_URL = "/offline"
IMAGE_FALLBACK_URL = "/icons/sitelogo.png"

NETWORK_ERROR_STATUS = 408
NETWORK_ERROR_BODY = "Network error happened"
