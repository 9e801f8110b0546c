from __future__ import annotations

from typing import Any

from . import logging_bridge
from .advert import listing_url
from .config import ConfigError
from .utils import now_rfc3339_millis

SEARCH_URL = "https://platsbanken-api.arbetsformedlingen.se/jobs/v1/search"

# Platsbanken municipality concept ids
REGIONS = {
    "Jonkoping": "KURg_KJF_Lwc",
    "Skovde": "fqAy_4ji_Lz2",
}

MAX_RECORDS = 25


def build_search_body(search: str, region: str, now: str | None = None) -> dict[str, Any]:
    """
    Search request for the newest-by-relevance adverts matching `search` in `region`.

    Raises:
        ConfigError for a region without a known municipality id.
    """
    municipality = REGIONS.get(region)
    if municipality is None:
        raise ConfigError(f"Unknown region {region!r}; expected one of {sorted(REGIONS)}.")

    return {
        "filters": [
            {"type": "freetext", "value": search},
            {"type": "municipality", "value": municipality},
        ],
        "fromDate": None,
        "order": "relevance",
        "maxRecords": MAX_RECORDS,
        "startIndex": 0,
        "toDate": now or now_rfc3339_millis(),
        "source": "pb",
    }


def advert_ids(reply: Any) -> list[str]:
    """
    Pull advert ids from a search reply, in result order.

    Uses `numberOfAds` as the upper bound but never reads past the `ads` list;
    entries without a string id are skipped.
    """
    if not isinstance(reply, dict):
        return []
    ads = reply.get("ads") or []
    if not isinstance(ads, list):
        return []
    count = reply.get("numberOfAds")
    if isinstance(count, int) and count >= 0:
        ads = ads[:count]

    ids: list[str] = []
    for ad in ads:
        ad_id = ad.get("id") if isinstance(ad, dict) else None
        if isinstance(ad_id, str) and ad_id:
            ids.append(ad_id)
    return ids


def search_advert_urls(http, search: str, region: str) -> list[str]:
    """POST the search and return listing URLs, one per hit."""
    body = build_search_body(search, region)
    reply = http.post_json(SEARCH_URL, body)
    urls = [listing_url(i) for i in advert_ids(reply)]

    logging_bridge.activity({
        "component": "job_applier.search",
        "op": "search",
        "search": search,
        "region": region,
        "hits": len(urls),
    })
    return urls
