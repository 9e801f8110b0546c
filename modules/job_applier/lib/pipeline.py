"""
Per-advert processing: fetch-and-cache, recipient lookup, mail, outcome log.

Failure policy:
  - bad URL, fetch/cache failure, unreadable cached detail -> Outcome.ERROR,
    nothing is logged to the outcome table
  - mail or outcome-log failure -> warning only; the advert stays marked as
    handled so it is never mailed twice
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from service.emailer import EmailSendError, send_application

from . import db, logging_bridge
from .advert import Advert, InvalidAdvert, resolve
from .cache import CacheError, CorruptCache, DetailCache
from .config import MailConfig
from .detail import AdvertDetail
from .models import CacheResult, Email, Outcome
from .recipient import find_email

LOG = logging.getLogger(__name__)

SUBJECT_FALLBACK = "Ansökan"

SendMail = Callable[..., str]


def compose_email(detail: AdvertDetail, recipient: str, letter: str) -> Email:
    title = detail.title
    if title is None:
        title = SUBJECT_FALLBACK
    return Email(subject=f"Ansökan för '{title}'", body=letter, recipient=recipient)


class Pipeline:
    """
    Processes advert URLs one at a time.

    Collaborators are injected so tests can swap the store, HTTP client and mailer:
      - cache: DetailCache over a DetailStore + HTTP client
      - sqlite_path: outcome log database
      - mail_config / letter: SMTP bundle and static email body
      - send_mail: callable with the `service.emailer.send_application` signature
    """

    def __init__(
        self,
        cache: DetailCache,
        sqlite_path: str,
        mail_config: MailConfig,
        letter: str,
        send_mail: SendMail | None = None,
    ):
        self.cache = cache
        self.sqlite_path = sqlite_path
        self.mail_config = mail_config
        self.letter = letter
        self.send_mail = send_mail or send_application

    def process(self, url: str) -> Outcome:
        try:
            advert = resolve(url)
        except InvalidAdvert as e:
            self._fatal(url, "resolve", e)
            return Outcome.ERROR

        try:
            cached = self.cache.try_fetch_and_store(advert)
            detail = self.cache.load(advert)
        except (CacheError, CorruptCache) as e:
            self._fatal(url, "cache", e, advert_id=advert.id)
            return Outcome.ERROR

        if cached is CacheResult.ALREADY_PROCESSED:
            self._record(advert, detail)
            return self._done(advert, Outcome.ALREADY_SENT)

        recipient = find_email(detail)
        if recipient is None:
            self._record(advert, detail)
            return self._done(advert, Outcome.NO_EMAIL)

        self._send(advert, compose_email(detail, recipient, self.letter))
        self._record(advert, detail)
        return self._done(advert, Outcome.SENT)

    def run_many(self, urls: Iterable[str]) -> dict[Outcome, int]:
        """Process URLs in order, strictly one after another."""
        counts = {o: 0 for o in Outcome}
        for url in urls:
            LOG.info("Processing %s", url)
            counts[self.process(url)] += 1

        logging_bridge.activity({
            "component": "job_applier.pipeline",
            "op": "summary",
            "outcomes": {o.value: n for o, n in counts.items()},
        })
        return counts

    # ---- steps ---------------------------------------------------------------

    def _send(self, advert: Advert, email: Email) -> None:
        LOG.info("Sending application for %s to %s", advert.id, email.recipient)
        try:
            message_id = self.send_mail(
                subject=email.subject,
                body=email.body,
                to=email.recipient,
                attachment_path=self.mail_config.resume_path,
                smtp=self.mail_config.smtp_settings(),
            )
        except EmailSendError as e:
            LOG.warning("Could not send email for %s: %s", advert.id, e)
            logging_bridge.error({
                "component": "job_applier.pipeline",
                "op": "send_mail",
                "advert_id": advert.id,
                "recipient": email.recipient,
                "error": repr(e),
            })
            return

        logging_bridge.activity({
            "component": "job_applier.pipeline",
            "op": "sent",
            "advert_id": advert.id,
            "recipient": email.recipient,
            "subject": email.subject,
            "message_id": message_id,
        })

    def _record(self, advert: Advert, detail: AdvertDetail) -> None:
        try:
            db.record(self.sqlite_path, detail)
        except db.LoggingError as e:
            # db.record already wrote the structured error record.
            LOG.warning("Logging error for %s: %s", advert.id, e)

    def _done(self, advert: Advert, outcome: Outcome) -> Outcome:
        logging_bridge.activity({
            "component": "job_applier.pipeline",
            "op": "outcome",
            "advert_id": advert.id,
            "outcome": outcome.value,
        })
        return outcome

    def _fatal(self, url: str, op: str, exc: Exception, advert_id: str | None = None) -> None:
        LOG.error("Skipping %s (%s): %s", url, op, exc)
        logging_bridge.error({
            "component": "job_applier.pipeline",
            "op": op,
            "url": url,
            "advert_id": advert_id,
            "error": repr(exc),
        })
