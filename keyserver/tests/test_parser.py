import pytest

from keyserver.conftest import PRIMARY_EMAIL, make_key
from keyserver.services.errors import InvalidKeyError
from keyserver.services.hkp.search import EmailSearch, classify_search
from keyserver.services.pgp import parse_key
from keyserver.web.api.key.params import SelectorParams, validate_selector


def test_parse_key(public_key_armored: str) -> None:
    parsed = parse_key(public_key_armored)

    assert len(parsed.fingerprint) == 40
    assert parsed.fingerprint == parsed.fingerprint.upper()
    assert parsed.key_id == parsed.fingerprint[-16:]
    assert parsed.algorithm == 1
    assert parsed.key_size == 2048
    assert parsed.created_at is not None
    assert parsed.armored.startswith("-----BEGIN PGP PUBLIC KEY BLOCK-----")


def test_parse_key_user_ids(public_key_armored: str) -> None:
    parsed = parse_key(public_key_armored)

    emails = [uid.email for uid in parsed.user_ids]
    assert emails == [PRIMARY_EMAIL, "safewithme.work@gmail.com"]
    assert parsed.primary_user_id.email == PRIMARY_EMAIL
    assert parsed.primary_user_id.name == "safewithme testuser"
    assert sum(uid.is_primary for uid in parsed.user_ids) == 1


@pytest.mark.parametrize("text", ["", "   ", "foo", "-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nfoo\n"])
def test_parse_invalid_text(text: str) -> None:
    with pytest.raises(InvalidKeyError):
        parse_key(text)


def test_parse_private_key() -> None:
    armored = make_key(("Private", "private.key@gmail.com"), private=True)

    with pytest.raises(InvalidKeyError):
        parse_key(armored)


def test_parse_key_without_email() -> None:
    armored = make_key(("No Email", ""))

    with pytest.raises(InvalidKeyError):
        parse_key(armored)


def test_parse_key_rejects_text_that_is_not_an_email() -> None:
    armored = make_key(("Not An Email", "just some text"))

    with pytest.raises(InvalidKeyError):
        parse_key(armored)


def test_parse_key_rejects_special_use_domain() -> None:
    armored = make_key(("Box", "dev@box.test"))

    with pytest.raises(InvalidKeyError):
        parse_key(armored)


def test_parse_key_drops_invalid_user_ids() -> None:
    armored = make_key(
        ("Box", "dev@box.test"),
        ("Garbage", "just some text"),
        ("Real User", "Real.User@GMail.com"),
    )

    parsed = parse_key(armored)

    assert [uid.email for uid in parsed.user_ids] == ["real.user@gmail.com"]
    assert parsed.primary_user_id.name == "Real User"


def test_parsed_email_matches_lookup_form() -> None:
    parsed = parse_key(make_key(("Real User", "Real.User@GMail.com")))

    selector = validate_selector(None, " Real.User@GMail.com ")

    assert isinstance(selector, SelectorParams)
    assert selector.email == parsed.primary_user_id.email
    assert classify_search("REAL.USER@gmail.com") == EmailSearch(email=parsed.primary_user_id.email)
