import base64
import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from uclbrt.core.encoding import OrderedFields, canonical_encode
from uclbrt.core.signing import (
    batch_auth_header,
    batch_signature,
    canonical_query_signature,
    concatenation_signature,
    md5_hex,
    new_batch_id,
)


class TestBatchSignature:
    def test_known_vector(self):
        assert batch_signature("A", "T", "20240101120000") == "2C40E3DC55AD07D8D580329923C72163"

    def test_is_deterministic_and_uppercase(self):
        first = batch_signature("sid", "token", "20240101120000")
        assert first == batch_signature("sid", "token", "20240101120000")
        assert first == first.upper() and len(first) == 32

    @pytest.mark.parametrize(
        "args",
        [("sid2", "token", "20240101120000"), ("sid", "token2", "20240101120000"), ("sid", "token", "20240101120001")],
    )
    def test_any_input_change_changes_digest(self, args):
        assert batch_signature(*args) != batch_signature("sid", "token", "20240101120000")

    def test_auth_header(self):
        assert batch_auth_header("A", "20240101120000") == "QToyMDI0MDEwMTEyMDAwMA=="
        assert base64.b64decode(batch_auth_header("A", "20240101120000")) == b"A:20240101120000"


class TestBatchId:
    def test_formats_utc(self):
        assert new_batch_id(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)) == "20240101120000"

    def test_converts_aware_datetimes_to_utc(self):
        shanghai = timezone(timedelta(hours=8))
        assert new_batch_id(datetime(2024, 1, 1, 20, 0, 0, tzinfo=shanghai)) == "20240101120000"

    def test_default_is_14_digits(self):
        batch = new_batch_id()
        assert len(batch) == 14 and batch.isdigit()


class TestConcatenationSignature:
    def test_known_vector(self):
        assert concatenation_signature(OrderedFields([("a", "1"), ("b", "2")]), "T") == "ca9061d006be026ab4566599b3326d8f"

    def test_order_sensitive(self):
        forward = concatenation_signature(OrderedFields([("a", "1"), ("b", "2")]), "T")
        backward = concatenation_signature(OrderedFields([("b", "2"), ("a", "1")]), "T")
        assert backward == "7cefb884a360254b133562c436459ed2"
        assert forward != backward

    def test_excludes_sig_field(self):
        plain = OrderedFields([("a", "1"), ("b", "2")])
        with_sig = plain.then(("sig", "deadbeef"))
        assert concatenation_signature(with_sig, "T") == concatenation_signature(plain, "T")

    def test_rejects_plain_dict(self):
        with pytest.raises(TypeError, match="OrderedFields"):
            concatenation_signature({"a": "1"}, "T")


class TestCanonicalQuerySignature:
    def test_known_vector(self):
        assert canonical_query_signature({"b": 2, "a": 1}, "T") == "bf4ee6a01da8e13f118163994a40432ddde75a38"

    def test_auth_token_is_hashed_as_a_field(self):
        data = {"accountSid": "A", "timestamp": 1700000000}
        injected = canonical_query_signature(data, "T")
        appended = hashlib.sha1((canonical_encode(data) + "T").encode()).hexdigest()
        without = hashlib.sha1(canonical_encode(data).encode()).hexdigest()
        assert injected != appended
        assert injected != without

    def test_does_not_mutate_input(self):
        data = {"a": 1}
        canonical_query_signature(data, "T")
        assert data == {"a": 1}


def test_md5_hex():
    assert md5_hex("secret") == "5ebe2294ecd0e0f08eab7690d2a6ee69"
