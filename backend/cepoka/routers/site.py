# FILE: cepoka/routers/site.py
import logging
from typing import List

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from .. import icons, schemas
from ..constants.categories import CATEGORIES
from ..head import render_offline_page
from ..pwa import build_manifest, render_service_worker
from ..settings import SOURCE_LOGO
from ..sitemap import render_robots_txt, render_sitemap_xml, sitemap_entries

logger = logging.getLogger(__name__)

router = APIRouter(tags=["site"])


@router.get("/categories", response_model=List[schemas.CategoryOut])
def list_categories():
    return [schemas.CategoryOut(**c._asdict()) for c in CATEGORIES]


@router.get("/manifest.json")
def manifest():
    return JSONResponse(build_manifest(), media_type="application/manifest+json")


@router.get("/sw.js")
def service_worker_script():
    # 브라우저가 항상 최신 스크립트를 받도록
    return Response(
        render_service_worker(),
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache", "Service-Worker-Allowed": "/"},
    )


@router.get("/offline", response_class=HTMLResponse)
def offline_page():
    return HTMLResponse(render_offline_page())


@router.get("/sitemap.xml")
def sitemap_xml():
    return Response(render_sitemap_xml(sitemap_entries()), media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots_txt():
    return PlainTextResponse(render_robots_txt())


@router.get("/generate-apple-icon")
async def generate_apple_icon():
    """Apple touch icon (180px) as a download."""
    try:
        logo = await run_in_threadpool(icons.load_logo, SOURCE_LOGO)
    except (OSError, ValueError):
        logger.exception("Error loading logo %s", SOURCE_LOGO)
        raise HTTPException(status_code=500, detail="Logo could not be loaded")

    png = icons.generate_apple_icon(logo)
    return Response(
        png,
        media_type="image/png",
        headers={"Content-Disposition": 'attachment; filename="apple-icon.png"'},
    )
