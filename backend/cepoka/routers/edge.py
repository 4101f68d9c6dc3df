# FILE: cepoka/routers/edge.py
"""
Catch-all proxy in front of the storefront origin.

Must be included last: any path the app does not serve itself is handled by
the active offline worker (or goes straight to the origin when none is active).
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import Response

from ..deps import get_registration
from ..offline.fetch import FetchRequest, FetchResponse, NetworkError
from ..offline.service_worker import Registration

logger = logging.getLogger(__name__)

router = APIRouter(tags=["edge"])

# 오리진으로 그대로 넘길 요청 헤더 (cookie/authorization 이 있으면 응답은 캐시하지 않음)
FORWARD_HEADERS = ("accept", "accept-language", "user-agent", "cookie", "authorization", "range")


def to_fetch_request(request: Request) -> FetchRequest:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    headers = {k: request.headers[k] for k in FORWARD_HEADERS if k in request.headers}
    return FetchRequest(
        url=url,
        method=request.method,
        mode=request.headers.get("sec-fetch-mode", "no-cors"),
        destination=request.headers.get("sec-fetch-dest", ""),
        headers=headers,
    )


def to_response(fetched: FetchResponse) -> Response:
    return Response(content=fetched.body, status_code=fetched.status, headers=fetched.headers)


@router.get("/{path:path}", include_in_schema=False)
def edge_fetch(
    path: str,
    request: Request,
    background_tasks: BackgroundTasks,
    registration: Registration = Depends(get_registration),
):
    try:
        fetched = registration.handle_fetch(to_fetch_request(request), defer=background_tasks.add_task)
    except NetworkError as e:
        # 활성 워커가 없을 때만 여기로 옴
        logger.warning("Uncontrolled fetch failed: %s", e)
        raise HTTPException(status_code=502, detail="Origin unreachable")
    return to_response(fetched)
