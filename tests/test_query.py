from waitlist_service.core.options import WaitlistOptions
from waitlist_service.models.waitlist import WaitlistStatus
from waitlist_service.services.query import SortBy, Where, build_filters, build_query


def test_defaults():
    query = build_query({}, WaitlistOptions())
    assert query.where == []
    assert query.sort_by == SortBy("requested_at", "desc")
    assert (query.page, query.limit, query.offset) == (1, 10, 0)


def test_default_limit_comes_from_options():
    query = build_query({}, WaitlistOptions(default_page_size=25))
    assert query.limit == 25


def test_offset_from_page_and_limit():
    assert build_query({"page": 1, "limit": 10}, WaitlistOptions()).offset == 0
    assert build_query({"page": 2, "limit": 10}, WaitlistOptions()).offset == 10
    assert build_query({"page": 4, "limit": 5}, WaitlistOptions()).offset == 15


def test_sort_passed_through_unvalidated():
    query = build_query({"sort_by": "anything", "sort_direction": "asc"}, WaitlistOptions())
    assert query.sort_by == SortBy("anything", "asc")


def test_each_supplied_field_becomes_an_equality_filter():
    where = build_filters({
        "page": 2,
        "limit": 5,
        "status": WaitlistStatus.pending,
        "email": " Someone@Test.com ",
        "department": "Engineering",
    })
    assert where == [
        Where("status", WaitlistStatus.pending),
        Where("email", "someone@test.com"),
        Where("department", "Engineering"),
    ]


def test_none_values_are_skipped():
    assert build_filters({"status": None, "department": None}) == []
