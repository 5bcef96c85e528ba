from urllib.parse import parse_qs, unquote, urlsplit

from storefront.checkout import (
    LIVE_CHECKOUT_ORIGIN,
    TEST_CHECKOUT_ORIGIN,
    build_checkout_url,
    resolve_return_url,
    with_email,
)


RETURN_URL = "https://shop.example.com/success"


def test_test_mode_url_carries_quantity_return_url_and_email():
    url = build_checkout_url("pdt_1", "a@x.com", "test_mode", RETURN_URL)

    assert url.startswith(TEST_CHECKOUT_ORIGIN + "/pdt_1?")
    assert "quantity=1" in url
    assert "email=a%40x.com" in url
    assert "redirect_url=https%3A%2F%2Fshop.example.com%2Fsuccess%3Femail%3Da%2540x.com" in url


def test_redirect_url_round_trips_with_email_on_return_url():
    url = build_checkout_url("pdt_1", "a@x.com", "test_mode", RETURN_URL)
    query = parse_qs(urlsplit(url).query)

    assert query["quantity"] == ["1"]
    assert query["email"] == ["a@x.com"]
    redirect = query["redirect_url"][0]
    assert redirect.startswith(RETURN_URL)
    assert parse_qs(urlsplit(redirect).query)["email"] == ["a@x.com"]


def test_live_mode_uses_live_origin():
    url = build_checkout_url("pdt_1", None, "live_mode", RETURN_URL)
    assert url.startswith(LIVE_CHECKOUT_ORIGIN + "/pdt_1?")


def test_unknown_environment_falls_back_to_test_origin():
    assert build_checkout_url("pdt_1", None, None, RETURN_URL).startswith(TEST_CHECKOUT_ORIGIN)
    assert build_checkout_url("pdt_1", None, "staging", RETURN_URL).startswith(TEST_CHECKOUT_ORIGIN)


def test_without_email_only_quantity_and_redirect():
    url = build_checkout_url("pdt_1", None, "test_mode", RETURN_URL)
    query = parse_qs(urlsplit(url).query)
    assert set(query) == {"quantity", "redirect_url"}
    assert query["redirect_url"] == [RETURN_URL]


def test_interpolated_values_are_encoded():
    url = build_checkout_url("pdt/../x?y", "a+b&c=d@x.com", "test_mode", RETURN_URL)
    parts = urlsplit(url)

    assert parts.path == "/buy/pdt%2F..%2Fx%3Fy"
    assert unquote(parts.path.rsplit("/", 1)[1]) == "pdt/../x?y"
    assert parse_qs(parts.query)["email"] == ["a+b&c=d@x.com"]


def test_with_email_keeps_existing_query():
    url = with_email("https://shop.example.com/success?ref=abc", "a@x.com")
    assert parse_qs(urlsplit(url).query) == {"ref": ["abc"], "email": ["a@x.com"]}



def test_with_email_leaves_existing_encoding_untouched():
    url = with_email("https://shop.example.com/success?next=%2Fa%20b", "a@x.com")
    assert url == "https://shop.example.com/success?next=%2Fa%20b&email=a%40x.com"

def test_with_email_is_noop_without_email():
    assert with_email(RETURN_URL, None) == RETURN_URL


def test_resolve_return_url_prefers_configured_value():
    assert resolve_return_url("https://configured.example/done", "http://testserver/") == "https://configured.example/done"


def test_resolve_return_url_defaults_to_request_origin():
    assert resolve_return_url(None, "http://testserver/") == "http://testserver/success"
    assert resolve_return_url("  ", "http://testserver") == "http://testserver/success"
