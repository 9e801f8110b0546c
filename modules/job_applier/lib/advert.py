from __future__ import annotations

from dataclasses import dataclass

# Listing URLs look like https://arbetsformedlingen.se/platsbanken/annonser/<id>
LISTING_PREFIX = "https://arbetsformedlingen.se/platsbanken/annonser/"
DETAIL_API_BASE = "https://platsbanken-api.arbetsformedlingen.se/jobs/v1/job/"


class InvalidAdvert(ValueError):
    """Raised when a URL is not a Platsbanken listing URL."""


@dataclass(frozen=True)
class Advert:
    """
    One job posting.
      - id: everything after the listing prefix; stable for a given URL
      - url: the listing URL as received from search
      - detail_url: API URL for the full advert detail
    """

    id: str
    url: str
    detail_url: str

    @property
    def cache_name(self) -> str:
        return f"{self.id}.json"


def resolve(url: str) -> Advert:
    """
    Derive the advert identity from a listing URL.

    Raises:
        InvalidAdvert if the URL is not from the supported source.
    """
    url = (url or "").strip()
    if not url.startswith(LISTING_PREFIX):
        raise InvalidAdvert(f"Not a Platsbanken listing URL: {url!r}")

    advert_id = url[len(LISTING_PREFIX):]
    if not advert_id or "/" in advert_id:
        raise InvalidAdvert(f"Listing URL has no usable advert id: {url!r}")

    return Advert(id=advert_id, url=url, detail_url=DETAIL_API_BASE + advert_id)


def listing_url(advert_id: str) -> str:
    """Inverse of `resolve`: build the listing URL for a search hit id."""
    return LISTING_PREFIX + advert_id
