from __future__ import annotations

from .detail import AdvertDetail


def find_email(detail: AdvertDetail) -> str | None:
    """
    Return the application email for an advert, or None.

    The API is inconsistent about the field name: some adverts carry
    `application.email`, others `application.mail`. No syntax check is done.
    """
    email = detail.application_email
    if email is not None:
        return email
    return detail.application_mail
