from __future__ import annotations

from typing import Any

from .lib.cache import DetailCache, FileDetailStore
from .lib.config import Settings, load_mail_config, load_personal_letter
from .lib.http_client import HttpClient
from .lib.logging_bridge import activity as log_activity
from .lib.pipeline import Pipeline
from .lib.search import search_advert_urls


def run(**kwargs: Any) -> dict:
    """
    Entry point for the 'job_applier' module.

    Accepts kwargs (all optional, see Settings.from_env_and_kwargs):
      config_root: str = "~/.config/JobApplier"
      region: str = "Jonkoping"
      search: str = "servering"
      http_timeout: float = 15.0

    Raises:
      ConfigError if settings, config.json or personal_letter.txt are unusable.

    Returns:
      {"region", "search", "total", "outcomes": {outcome: count}}
    """
    settings = Settings.from_env_and_kwargs(kwargs)
    mail_config = load_mail_config(settings.config_path)
    letter = load_personal_letter(settings.letter_path)

    log_activity({
        "component": "job_applier.main",
        "op": "start",
        "region": settings.region,
        "search": settings.search,
        "config_root": settings.config_root,
    })

    http = HttpClient(timeout=settings.http_timeout)
    try:
        urls = search_advert_urls(http, settings.search, settings.region)
        pipeline = Pipeline(
            cache=DetailCache(FileDetailStore(settings.jobs_dir), http),
            sqlite_path=settings.sqlite_path,
            mail_config=mail_config,
            letter=letter,
        )
        counts = pipeline.run_many(urls)
    finally:
        http.close()

    return {
        "region": settings.region,
        "search": settings.search,
        "total": len(urls),
        "outcomes": {o.value: n for o, n in counts.items()},
    }
