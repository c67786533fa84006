"""Probe configured integrations on startup and report status."""

import httpx

from movie_catalog.config import Settings

# A title every OMDb key can resolve.
OMDB_PROBE_ID = "tt0111161"


async def probe_all(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    """Check reachability of OMDb and IMDb. Returns status dict."""
    results = {}

    async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
        if settings.has_omdb:
            results["omdb"] = await _probe(
                client, settings.omdb_url,
                params={"apikey": settings.omdb_api_key, "i": OMDB_PROBE_ID},
            )
        else:
            results["omdb"] = {"status": "not_configured"}

        results["imdb"] = await _probe(
            client, f"{settings.imdb_url.rstrip('/')}/",
            headers={"User-Agent": settings.scrape_user_agent},
        )

        results["resetWebhook"] = (
            {"status": "configured"} if settings.has_reset_webhook else {"status": "not_configured"}
        )

    return results


async def _probe(
    client: httpx.AsyncClient, url: str, headers: dict | None = None, params: dict | None = None,
) -> dict:
    """Probe a single endpoint."""
    try:
        resp = await client.get(url, headers=headers, params=params)
        return {
            "status": "ok" if resp.status_code < 400 else "error",
            "code": resp.status_code,
        }
    except httpx.ConnectError:
        return {"status": "unreachable"}
    except httpx.HTTPError as e:
        return {"status": "error", "detail": str(e)[:200]}
