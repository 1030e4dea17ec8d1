import pytest

from keyserver.services.errors import NotImplementedSearchError
from keyserver.services.hkp.search import (
    EmailSearch,
    FingerprintSearch,
    KeyIdSearch,
    Operation,
    classify_search,
    parse_operation,
    parse_options,
)

FINGERPRINT = "4277257930867231CE393FB8DBC0B3D92B1B86E9"


def test_classify_key_id() -> None:
    term = classify_search("0xdbc0b3d92b1b86e9")

    assert term == KeyIdSearch(key_id="DBC0B3D92B1B86E9")
    assert term.selector() == {"key_id": "DBC0B3D92B1B86E9"}


def test_classify_fingerprint() -> None:
    term = classify_search(f"0x{FINGERPRINT.lower()}")

    assert term == FingerprintSearch(fingerprint=FINGERPRINT)
    assert term.selector() == {"key_id": "DBC0B3D92B1B86E9"}


def test_classify_email() -> None:
    term = classify_search("SafeWithMe.TestUser@Gmail.com")

    assert term == EmailSearch(email="safewithme.testuser@gmail.com")


@pytest.mark.parametrize(
    "search",
    [
        None,
        "",
        "0x2A1B86E9",
        "DBC0B3D92B1B86E9",
        "0xDBC0B3D92B1B86E",
        "0xZZC0B3D92B1B86E9",
        "a@bco",
        "not an email",
    ],
)
def test_classify_not_implemented(search: str) -> None:
    with pytest.raises(NotImplementedSearchError):
        classify_search(search)


@pytest.mark.parametrize("op", ["get", "index", "vindex", "GET"])
def test_parse_operation(op: str) -> None:
    assert parse_operation(op) is Operation(op.lower())


@pytest.mark.parametrize("op", [None, "", "x-email", "stats"])
def test_parse_operation_not_implemented(op: str) -> None:
    with pytest.raises(NotImplementedSearchError):
        parse_operation(op)


def test_parse_options() -> None:
    assert parse_options("mr,nm") == {"mr", "nm"}
    assert parse_options(None) == set()
