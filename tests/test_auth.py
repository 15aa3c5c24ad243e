"""Tests for the Panasonic auth digest."""

import pytest

from avbindings.exceptions import AuthComputationError
from avbindings.panasonic.auth import check_algorithm, compute_digest

# sha256("secret" + "abcd1234")
SECRET_DIGEST = "C2CDAE71819DA3A2CD32F1F87188DDFB32A5D2FB69BE2597BADC33056F83629C"


def test_known_digest():
    assert compute_digest("secret", "abcd1234") == SECRET_DIGEST


def test_digest_is_deterministic():
    assert compute_digest("key", "nonce") == compute_digest("key", "nonce")
    assert compute_digest("key", "nonce") != compute_digest("key", "nonce2")


def test_digest_is_uppercase_hex():
    digest = compute_digest("key", "nonce")
    assert digest == digest.upper()
    int(digest, 16)
    assert len(digest) >= 32


def test_empty_secret():
    assert compute_digest("", "abcd1234") == (
        "E9CEE71AB932FDE863338D08BE4DE9DFE39EA049BDAFB342CE659EC5450B69AE"
    )


def test_digest_of_empty_input():
    assert compute_digest("", "") == (
        "E3B0C44298FC1C149AFBF4C8996FB92427AE41E4649B934CA495991B7852B855"
    )


def test_leading_zero_nibble_is_dropped():
    # sha256("key5") = 07e7394e...
    digest = compute_digest("key", "5")
    assert digest == "7E7394E0702340D9FD1D777FBBAD2804A5188D1DD07FF580F473BD7645FF205"
    assert len(digest) == 63


def test_short_digest_is_padded_to_32_digits():
    # md5("key9") = 0cd6c8eb...
    digest = compute_digest("key", "9", algorithm="md5")
    assert digest == "0CD6C8EB4CFDC48041D33E121648A17E"


def test_unknown_algorithm():
    with pytest.raises(AuthComputationError):
        check_algorithm("nonesuch")
    with pytest.raises(AuthComputationError):
        compute_digest("key", "nonce", algorithm="nonesuch")


def test_default_algorithm_available():
    check_algorithm()
