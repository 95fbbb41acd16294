import pytest

from suitetalk.framework.composer import (
    RECORD_HEADERS,
    SUITEQL_HEADERS,
    build_record_descriptor,
    build_suiteql_descriptor,
    compose,
    content_headers_for,
    resolve_field,
)
from suitetalk.framework.errors import MalformedBodyError, MalformedParamsError, MissingUrlError
from suitetalk.framework.models import RequestDescriptor

BASE = "https://acct.suitetalk.api.netsuite.com/services/rest/record/v1"


def record(config=None, message=None):
    return compose(build_record_descriptor(config, message))


def test_resolve_field_prefers_config_over_message():
    assert resolve_field("url", {"url": "a"}, {"url": "b"}) == "a"
    assert resolve_field("url", {"url": ""}, {"url": "b"}) == "b"
    assert resolve_field("url", None, None) is None


def test_record_path_appends_object_and_id():
    composed = record({"url": BASE, "resource_object": "customer", "record_id": "123"})

    assert composed.method == "GET"
    assert composed.url == f"{BASE}/customer/123"
    assert composed.base_url == f"{BASE}/customer/123"
    assert composed.query_params == {}


def test_record_path_encodes_external_id():
    composed = record({"url": BASE, "resource_object": "customer", "external_id": "CUST/01 A"})

    assert composed.url == f"{BASE}/customer/eid:CUST%2F01%20A"


def test_record_path_without_segments_keeps_url():
    assert record({"url": BASE}).url == BASE


def test_record_path_tolerates_trailing_slash():
    assert record({"url": BASE + "/", "resource_object": "customer"}).url == f"{BASE}/customer"


def test_limit_and_offset_from_message():
    composed = record({"url": BASE, "resource_object": "customer"}, {"limit": 5, "offset": 10})

    assert composed.query_params == {"limit": "5", "offset": "10"}
    assert composed.url == f"{BASE}/customer?limit=5&offset=10"


def test_url_params_win_over_configured_limit():
    composed = record({"url": f"{BASE}/customer?limit=10", "limit": 20, "offset": 40})

    assert composed.query_params == {"limit": "10", "offset": "40"}
    assert composed.base_url == f"{BASE}/customer"
    assert composed.url == f"{BASE}/customer?limit=10&offset=40"


def test_extra_params_are_merged_without_overwriting():
    composed = record(
        {"url": f"{BASE}/customer/7?expandSubResources=true", "params": {"expandSubResources": "false", "fields": "id"}}
    )

    assert composed.query_params == {"expandSubResources": "true", "fields": "id"}


def test_continuation_url_is_reused_verbatim_and_idempotent():
    next_url = f"{BASE}/customer?limit=1000&offset=1000"
    config = {
        "url": next_url,
        "resource_object": "customer",
        "limit": 5,
        "offset": 0,
        "is_pagination_continuation": True,
    }

    first = record(config)
    second = record(config)

    assert first == second
    assert first.url == next_url
    assert first.base_url == f"{BASE}/customer"
    assert first.query_params == {"limit": "1000", "offset": "1000"}


def test_continuation_flag_accepts_strings():
    descriptor = build_record_descriptor({"url": BASE, "is_pagination_continuation": "true"}, None)

    assert descriptor.is_pagination_continuation is True


def test_method_is_uppercased_and_body_parsed():
    composed = record({"url": BASE, "resource_object": "customer", "method": "post"}, {"body": '{"companyName": "ACME"}'})

    assert composed.method == "POST"
    assert composed.body == {"companyName": "ACME"}


def test_structured_body_passes_through():
    composed = record({"url": BASE, "method": "PUT", "body": {"a": 1}})

    assert composed.body == {"a": 1}


def test_missing_url_fails():
    with pytest.raises(MissingUrlError):
        record({"resource_object": "customer"})


def test_malformed_body_fails():
    with pytest.raises(MalformedBodyError):
        record({"url": BASE, "method": "POST", "body": "{not json"})


def test_suiteql_is_fixed_post_without_merging():
    descriptor = build_suiteql_descriptor(
        {"url": "https://acct.suitetalk.api.netsuite.com/services/rest/query/v1/suiteql?limit=10"},
        {"body": '{"q": "SELECT id FROM customer"}', "limit": 99, "method": "GET"},
    )

    composed = compose(descriptor)

    assert composed.method == "POST"
    assert composed.base_url == "https://acct.suitetalk.api.netsuite.com/services/rest/query/v1/suiteql"
    assert composed.query_params == {"limit": "10"}
    assert composed.body == '{"q": "SELECT id FROM customer"}'


def test_suiteql_requires_a_valid_body():
    url = "https://acct.suitetalk.api.netsuite.com/services/rest/query/v1/suiteql"

    with pytest.raises(MalformedBodyError):
        compose(build_suiteql_descriptor({"url": url}, None))
    with pytest.raises(MalformedBodyError):
        compose(build_suiteql_descriptor({"url": url, "body": "SELECT 1"}, None))


def test_content_headers_per_variant():
    assert content_headers_for(build_record_descriptor({"url": BASE}, None)) == RECORD_HEADERS
    assert content_headers_for(build_suiteql_descriptor({"url": BASE}, None)) == SUITEQL_HEADERS
    assert SUITEQL_HEADERS["Prefer"] == "transient"


def test_descriptor_is_built_fresh_per_call():
    first = build_record_descriptor({"url": BASE, "limit": 1}, None)
    second = build_record_descriptor({"url": BASE}, None)

    assert isinstance(first, RequestDescriptor)
    assert second.query_params == {}


@pytest.mark.parametrize(
    "url",
    ["https://[bad/services/rest/record/v1", "customer/123", "ftp://a.b/x", "https://a.b:port/x"],
)
def test_unusable_url_fails(url):
    with pytest.raises(MissingUrlError, match="The URL is not valid"):
        record({"url": url})


@pytest.mark.parametrize(
    "message",
    [{"params": "q=1"}, {"params": ["q", "1"]}, {"limit": {"value": 5}}, {"offset": "-1"}, {"limit": True}],
)
def test_wrongly_shaped_query_inputs_fail(message):
    with pytest.raises(MalformedParamsError):
        build_record_descriptor({"url": BASE}, message)


def test_extra_params_are_text_and_skip_none():
    composed = record({"url": BASE, "params": {"expand": True, "fields": None, "page": 2}})

    assert composed.query_params == {"expand": "true", "page": "2"}
    assert composed.url == f"{BASE}?expand=true&page=2"


def test_limit_given_as_text_is_trimmed():
    assert record({"url": BASE, "limit": " 25 "}).query_params == {"limit": "25"}


def test_continuation_keeps_its_body():
    composed = record(
        {"url": f"{BASE}/customer?limit=2&offset=2", "is_pagination_continuation": True, "method": "POST"},
        {"body": '{"a": 1}'},
    )

    assert composed.url == f"{BASE}/customer?limit=2&offset=2"
    assert composed.body == {"a": 1}


def test_unserializable_body_fails():
    with pytest.raises(MalformedBodyError, match="not JSON serializable"):
        record({"url": BASE, "method": "POST", "body": {"when": object()}})


def test_non_mapping_sources_are_ignored():
    assert resolve_field("url", "not a mapping", {"url": "b"}) == "b"
