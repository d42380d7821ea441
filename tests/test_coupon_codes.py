import re

import pytest

from errors import InvalidConfiguration
from services.wheel import generate_unique_coupon_code
from utils.coupon_codes import (
    COUPON_ALPHABET,
    generate_coupon_code,
    is_valid_coupon_code,
    normalize_coupon_code,
)

CODE_RE = re.compile(r"^GF[A-HJ-NP-Z2-9]{6}$")


def test_alphabet_has_32_unambiguous_symbols():
    assert len(COUPON_ALPHABET) == 32
    assert len(set(COUPON_ALPHABET)) == 32
    for confusable in "0O1I":
        assert confusable not in COUPON_ALPHABET


def test_generated_codes_match_format():
    for _ in range(2_000):
        code = generate_coupon_code()
        assert len(code) == 8
        assert CODE_RE.match(code), code
        assert is_valid_coupon_code(code)


def test_validity_check_rejects_confusables():
    assert not is_valid_coupon_code("GF0OI1AB")
    assert not is_valid_coupon_code("XXABCDEF")
    assert not is_valid_coupon_code("GFABCDE")


def test_normalize_handles_hand_typed_input():
    assert normalize_coupon_code(" gf-abc 234 ") == "GFABC234"


async def test_unique_code_skips_existing(make_user, prizes, make_coupon, session):
    await make_user("owner")
    await make_coupon("owner", prizes[0].id, code="GFAAAAAA")

    candidates = iter(["GFAAAAAA", "GFBBBBBB"])
    code = await generate_unique_coupon_code(session, generator=lambda: next(candidates))

    assert code == "GFBBBBBB"


async def test_unique_code_gives_up_after_bounded_attempts(make_user, prizes, make_coupon, session):
    await make_user("owner")
    await make_coupon("owner", prizes[0].id, code="GFAAAAAA")

    calls = []

    def always_taken():
        calls.append(1)
        return "GFAAAAAA"

    with pytest.raises(InvalidConfiguration):
        await generate_unique_coupon_code(session, max_attempts=3, generator=always_taken)
    assert len(calls) == 3
