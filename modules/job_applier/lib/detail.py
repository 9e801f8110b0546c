from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Platsbanken ids are unsigned 32-bit
MAX_ADVERT_ID = 2**32 - 1


@dataclass(frozen=True)
class AdvertDetail:
    """
    Read-only view over the advert JSON document returned by the Platsbanken API.

    Only a handful of fields are ever read. Every accessor returns None when the
    field is absent or is not a string, so callers decide on their own fallback.
    """

    raw: Mapping[str, Any]

    def text(self, *path: str) -> str | None:
        node: Any = self.raw
        for key in path:
            if not isinstance(node, Mapping):
                return None
            node = node.get(key)
        return node if isinstance(node, str) else None

    @property
    def advert_id(self) -> int:
        """Numeric advert id, or 0 when missing, not an integer string, or out of range."""
        raw_id = self.text("id")
        if raw_id is None:
            return 0
        try:
            value = int(raw_id.strip())
        except ValueError:
            return 0
        return value if 0 <= value <= MAX_ADVERT_ID else 0

    @property
    def title(self) -> str | None:
        return self.text("title")

    @property
    def occupation(self) -> str | None:
        return self.text("occupation")

    @property
    def work_time_extent(self) -> str | None:
        return self.text("workTimeExtent")

    @property
    def company_name(self) -> str | None:
        return self.text("company", "name")

    @property
    def region(self) -> str | None:
        return self.text("workplace", "region")

    @property
    def application_email(self) -> str | None:
        return self.text("application", "email")

    @property
    def application_mail(self) -> str | None:
        return self.text("application", "mail")
