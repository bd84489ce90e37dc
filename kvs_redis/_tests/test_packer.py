import json

import pytest

from kvs_redis.packer import DEFAULT_PACKER, JsonPacker, Packer


def test_default_packer_is_json():
    assert isinstance(DEFAULT_PACKER, JsonPacker)
    assert isinstance(DEFAULT_PACKER, Packer)


def test_pack_produces_json_text():
    assert JsonPacker().pack({"name": "widget"}) == '{"name": "widget"}'


def test_unpack_missing_value():
    assert JsonPacker().unpack(None) is None


def test_unpack_bytes():
    assert JsonPacker().unpack(b'{"a": [1, 2]}') == {"a": [1, 2]}


def test_unpack_invalid_json_raises():
    with pytest.raises(json.JSONDecodeError):
        JsonPacker().unpack("{oops")


def test_pack_unserializable_raises():
    with pytest.raises(TypeError):
        JsonPacker().pack(object())
