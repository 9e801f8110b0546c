# tests/test_job_applier_advert.py
import pytest

from modules.job_applier.lib.advert import InvalidAdvert, listing_url, resolve
from modules.job_applier.lib.detail import AdvertDetail
from modules.job_applier.lib.recipient import find_email


def test_resolve_platsbanken_url():
    advert = resolve("https://arbetsformedlingen.se/platsbanken/annonser/ABCDE12345")

    assert advert.id == "ABCDE12345"
    assert advert.detail_url == "https://platsbanken-api.arbetsformedlingen.se/jobs/v1/job/ABCDE12345"
    assert advert.cache_name == "ABCDE12345.json"


def test_resolve_is_stable():
    url = listing_url("28912345")
    assert resolve(url) == resolve(url)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://arbetsformedlingen.se/platsbanken/annonser/",
        "https://example.com/jobs/ABCDE12345",
        "http://arbetsformedlingen.se/platsbanken/annonser/ABCDE12345",
        "https://arbetsformedlingen.se/platsbanken/annonser/../../etc",
    ],
)
def test_resolve_rejects_foreign_urls(url):
    with pytest.raises(InvalidAdvert):
        resolve(url)


# ----------------------------------------------------------------------
# Detail view + recipient lookup
# ----------------------------------------------------------------------
def test_find_email_reads_mail_field():
    detail = AdvertDetail({"application": {"mail": "hr@acme.se"}, "title": "Server"})
    assert find_email(detail) == "hr@acme.se"


def test_find_email_prefers_email_over_mail():
    detail = AdvertDetail({"application": {"email": "a@acme.se", "mail": "b@acme.se"}})
    assert find_email(detail) == "a@acme.se"


@pytest.mark.parametrize(
    "doc",
    [
        {},
        {"application": None},
        {"application": {"email": None, "mail": 42}},
        {"application": "hr@acme.se"},
    ],
)
def test_find_email_none_when_no_string_field(doc):
    assert find_email(AdvertDetail(doc)) is None


def test_detail_accessors_and_fallbacks():
    detail = AdvertDetail({
        "id": "28912345",
        "title": "Kock",
        "company": {"name": "Acme"},
        "workplace": {"region": 7},
    })

    assert detail.advert_id == 28912345
    assert detail.title == "Kock"
    assert detail.company_name == "Acme"
    assert detail.region is None
    assert detail.occupation is None
    assert detail.work_time_extent is None


@pytest.mark.parametrize("raw_id", [None, "", "abc", "-5", 12, "4294967296", "99999999999999999999"])
def test_detail_advert_id_zero_when_unparsable(raw_id):
    assert AdvertDetail({"id": raw_id}).advert_id == 0


def test_detail_advert_id_keeps_largest_32bit_value():
    assert AdvertDetail({"id": "4294967295"}).advert_id == 4294967295
