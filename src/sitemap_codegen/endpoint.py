"""Request-time sitemap.xml endpoint for FastAPI applications."""

import logging
from typing import Iterable, Union

from fastapi import APIRouter, FastAPI, Response

from .renderer import EntryLike, render_sitemap

logger = logging.getLogger(__name__)

SITEMAP_PATH = "/sitemap.xml"
SITEMAP_MEDIA_TYPE = "text/xml"


def register_sitemap(
    app: Union[FastAPI, APIRouter],
    url: str,
    entries: Iterable[EntryLike],
    escape: bool = False,
) -> APIRouter:
    """
    Serve ``/sitemap.xml`` on ``app`` for the given entries.

    The document is rendered on every request from the captured entries;
    nothing is cached or shared between requests.

    Returns:
        The router holding the sitemap route
    """
    frozen = tuple(entries)
    router = APIRouter()

    @router.get(SITEMAP_PATH, response_class=Response, include_in_schema=False)
    def sitemap() -> Response:
        return Response(
            content=render_sitemap(url, frozen, escape=escape),
            media_type=SITEMAP_MEDIA_TYPE,
        )

    app.include_router(router)
    logger.info(f"Registered {SITEMAP_PATH} with {len(frozen)} entries under {url}")
    return router
