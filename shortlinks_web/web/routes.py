"""Redirect route."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse, Response

from shortlinks.common.headers import get_referrer
from shortlinks.exceptions import ShortLinkError
from shortlinks.resolver import RedirectOutcome

from ..errors import http_error

router = APIRouter()

# nginx's "client closed request"; the client is gone, so nobody reads it
CLIENT_CLOSED_REQUEST = 499


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def _resolve_unless_disconnected(
    request: Request,
    short_code: str,
    referrer: Optional[str],
    delay: float,
) -> Optional[RedirectOutcome]:
    """Resolve after ``delay`` seconds; None if the client left during the delay.

    Only the delay is abandoned on disconnect. Once it has run out the
    lookup and click always run to completion.
    """
    resolver = request.app.state.service.resolver

    if delay > 0:
        delay_task = asyncio.create_task(resolver.announce(short_code, delay))
        watch_task = asyncio.create_task(_wait_for_disconnect(request))
        try:
            done, _ = await asyncio.wait(
                {delay_task, watch_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            watch_task.cancel()

        if delay_task not in done:
            delay_task.cancel()
            try:
                await delay_task
            except asyncio.CancelledError:
                pass
            return None
    else:
        await resolver.announce(short_code)

    return await resolver.complete(short_code, referrer)


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL, counting the click."""
    config = request.app.state.config
    referrer = get_referrer(request.headers)

    try:
        outcome = await _resolve_unless_disconnected(
            request,
            short_code,
            referrer,
            config.redirect_delay_seconds,
        )
        if outcome is None:
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        outcome.raise_for_status()
    except ShortLinkError as e:
        raise http_error(e)

    # 302 so browsers come back through us and every click is counted
    return RedirectResponse(url=outcome.long_url, status_code=status.HTTP_302_FOUND)
