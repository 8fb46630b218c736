"""Tests for genesis.bundle: equality, immutability and both persisted forms."""

from __future__ import annotations

import json

import msgpack
import pytest
from pydantic import ValidationError

from chain_genesis.core.enums import EncodingMode
from chain_genesis.core.errors import DecodeError, EncodeError
from chain_genesis.core.models import CompiledModule, default_genesis_context
from chain_genesis.genesis.bundle import GenesisBundle


class TestConstruction:
    def test_lists_become_tuples(self, sample_bundle, mod_a, mod_b):
        assert isinstance(sample_bundle.module_groups, tuple)
        assert sample_bundle.module_groups[0] == (mod_a, mod_b)
        assert isinstance(sample_bundle.objects, tuple)

    def test_accessors(self, sample_bundle):
        assert sample_bundle.modules() is sample_bundle.module_groups
        assert sample_bundle.genesis_ctx() == default_genesis_context()

    def test_is_frozen(self, sample_bundle):
        with pytest.raises(ValidationError):
            sample_bundle.objects = ()

    def test_summary(self, sample_bundle):
        summary = sample_bundle.summary()
        assert summary["groups"] == [
            ["vector", "option"], ["coin"], ["marketplace", "auction"],
        ]
        assert summary["module_count"] == 5
        assert summary["object_count"] == 2


class TestEquality:
    def test_equal_when_fields_equal(self, sample_bundle):
        copy = GenesisBundle(
            module_groups=[list(g) for g in sample_bundle.module_groups],
            objects=list(sample_bundle.objects),
            genesis_context=sample_bundle.genesis_context,
        )
        assert copy == sample_bundle

    def test_group_order_matters(self, sample_bundle):
        groups = list(sample_bundle.module_groups)
        swapped = sample_bundle.model_copy(
            update={"module_groups": (groups[1], groups[0], groups[2])},
        )
        assert swapped != sample_bundle

    def test_module_order_within_group_matters(self, mod_a, mod_b):
        ctx = default_genesis_context()
        one = GenesisBundle(module_groups=[[mod_a, mod_b]], objects=[], genesis_context=ctx)
        two = GenesisBundle(module_groups=[[mod_b, mod_a]], objects=[], genesis_context=ctx)
        assert one != two

    def test_object_order_matters(self, sample_bundle):
        reversed_objects = sample_bundle.model_copy(
            update={"objects": tuple(reversed(sample_bundle.objects))},
        )
        assert reversed_objects != sample_bundle

    def test_context_matters(self, sample_bundle, custom_context):
        other = sample_bundle.model_copy(update={"genesis_context": custom_context})
        assert other != sample_bundle


class TestHumanReadable:
    def test_roundtrip(self, sample_bundle):
        assert GenesisBundle.from_json(sample_bundle.to_json()) == sample_bundle

    def test_roundtrip_indented(self, sample_bundle):
        assert GenesisBundle.from_json(sample_bundle.to_json(indent=2)) == sample_bundle

    def test_document_shape(self, sample_bundle, mod_a):
        doc = json.loads(sample_bundle.to_json())
        assert list(doc) == ["module_groups", "objects", "genesis_context"]
        assert [len(g) for g in doc["module_groups"]] == [2, 1, 2]
        assert all(isinstance(m, str) for g in doc["module_groups"] for m in g)
        assert doc["genesis_context"]["ids_created"] == 0

    def test_pydantic_json_dump_uses_same_codec(self, sample_bundle):
        text = sample_bundle.model_dump_json()
        assert GenesisBundle.model_validate_json(text) == sample_bundle
        assert json.loads(text)["module_groups"] == json.loads(sample_bundle.to_json())["module_groups"]

    def test_corrupted_module_is_rejected_with_position(self, sample_bundle):
        doc = json.loads(sample_bundle.to_json())
        text = doc["module_groups"][2][0]
        i = len(text) // 2
        doc["module_groups"][2][0] = text[:i] + ("A" if text[i] != "A" else "B") + text[i + 1:]

        with pytest.raises(DecodeError) as info:
            GenesisBundle.from_json(json.dumps(doc))
        assert (info.value.group_index, info.value.module_index) == (2, 0)

    def test_malformed_base64_rejected(self, sample_bundle):
        doc = json.loads(sample_bundle.to_json())
        doc["module_groups"][0][1] = "!!not base64!!"
        with pytest.raises(DecodeError, match="malformed base64"):
            GenesisBundle.from_json(json.dumps(doc))

    def test_invalid_json_rejected(self):
        with pytest.raises(DecodeError):
            GenesisBundle.from_json("{not json")

    def test_missing_field_rejected(self, sample_bundle):
        doc = json.loads(sample_bundle.to_json())
        del doc["genesis_context"]
        with pytest.raises(DecodeError, match="genesis_context"):
            GenesisBundle.from_json(json.dumps(doc))

    def test_non_text_input_rejected(self):
        with pytest.raises(DecodeError):
            GenesisBundle.from_json(42)


class TestBinary:
    def test_roundtrip(self, sample_bundle):
        assert GenesisBundle.from_bytes(sample_bundle.to_bytes()) == sample_bundle

    def test_leaves_are_raw_native_bytes(self, sample_bundle, mod_c):
        doc = msgpack.unpackb(sample_bundle.to_bytes(), raw=False)
        assert doc["module_groups"][1] == [mod_c.serialize()]
        assert doc["objects"][0]["contents"] == b"\x00\x01\x02\xff" * 4

    def test_binary_is_smaller_than_text(self, sample_bundle):
        assert len(sample_bundle.to_bytes()) < len(sample_bundle.to_json())

    def test_garbage_rejected(self):
        with pytest.raises(DecodeError):
            GenesisBundle.from_bytes(b"\xc1\xc1\xc1")

    def test_non_map_document_rejected(self):
        with pytest.raises(DecodeError, match="must be a map"):
            GenesisBundle.from_bytes(msgpack.packb([1, 2, 3]))

    def test_string_input_rejected(self, sample_bundle):
        with pytest.raises(DecodeError, match="must be bytes"):
            GenesisBundle.from_bytes(sample_bundle.to_json())


class TestCrossMode:
    def test_text_document_through_binary_decoder(self, sample_bundle):
        with pytest.raises(DecodeError):
            GenesisBundle.from_bytes(sample_bundle.to_json().encode())

    def test_binary_document_through_text_decoder(self, sample_bundle):
        with pytest.raises(DecodeError):
            GenesisBundle.from_json(sample_bundle.to_bytes())

    def test_text_leaves_in_binary_container(self, sample_bundle):
        doc = json.loads(sample_bundle.to_json())
        with pytest.raises(DecodeError, match="expected raw bytes"):
            GenesisBundle.from_bytes(msgpack.packb(doc, use_bin_type=True))

    @pytest.mark.parametrize("mode", list(EncodingMode))
    def test_dump_load_dispatch(self, sample_bundle, mode):
        assert GenesisBundle.load(sample_bundle.dump(mode), mode) == sample_bundle

    def test_dump_modes_differ(self, sample_bundle):
        assert isinstance(sample_bundle.dump(EncodingMode.HUMAN_READABLE), str)
        assert isinstance(sample_bundle.dump(EncodingMode.BINARY), bytes)


class TestEncodeFailure:
    def test_unencodable_module_raises_encode_error(self, sample_objects):
        bundle = GenesisBundle(
            module_groups=[[CompiledModule(name="x", version=42, code=b"")]],
            objects=sample_objects,
            genesis_context=default_genesis_context(),
        )
        with pytest.raises(EncodeError) as info:
            bundle.to_bytes()
        assert (info.value.group_index, info.value.module_index) == (0, 0)
