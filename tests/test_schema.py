"""
Schema tests: flat attribute maps to typed payloads and back.
"""
import pytest

from tfreclaim.errors import EncodingError, ValidationError
from tfreclaim.models.resource import Resource
from tfreclaim.models.schema import ResourceSchema

INSTANCE = ResourceSchema(
    version=1,
    attributes={
        "id": "string",
        "ebs_optimized": "bool",
        "cpu_core_count": "number",
        "vpc_security_group_ids": "set",
        "tags": "map",
    },
    computed=["id"],
)

FLAT = {
    "id": "i-1",
    "ebs_optimized": "false",
    "cpu_core_count": "2",
    "vpc_security_group_ids.#": "2",
    "vpc_security_group_ids.0": "sg-1",
    "vpc_security_group_ids.1": "sg-2",
    "tags.%": "1",
    "tags.Name": "front",
}


class TestEncode:
    def test_typed_payload(self):
        assert INSTANCE.encode(FLAT) == {
            "id": "i-1",
            "ebs_optimized": False,
            "cpu_core_count": 2,
            "vpc_security_group_ids": ["sg-1", "sg-2"],
            "tags": {"Name": "front"},
        }

    def test_decode_restores_flat_map(self):
        assert INSTANCE.decode(INSTANCE.encode(FLAT), 1) == FLAT

    def test_config_drops_computed(self):
        assert "id" not in INSTANCE.config(FLAT)

    def test_undeclared_attributes(self):
        schema = ResourceSchema()
        assert schema.encode({"name": "x", "labels.a": "b", "zones.#": "1", "zones.0": "z1"}) == {
            "name": "x",
            "labels": {"a": "b"},
            "zones": ["z1"],
        }

    def test_float(self):
        assert ResourceSchema(attributes={"ratio": "number"}).encode({"ratio": "0.5"}) == {"ratio": 0.5}

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
    def test_non_finite_numbers(self, raw):
        with pytest.raises(EncodingError):
            ResourceSchema(attributes={"size": "number"}).encode({"size": raw})

    def test_undeclared_list_without_length(self):
        schema = ResourceSchema()
        flat = {"ports.0": "80", "ports.1": "443"}
        assert schema.type_of("ports", flat) == "list"
        assert schema.encode(flat) == {"ports": ["80", "443"]}
        assert schema.decode(schema.encode(flat)) == {"ports.#": "2", "ports.0": "80", "ports.1": "443"}

    @pytest.mark.parametrize("flat", [
        {"ebs_optimized": "maybe"},
        {"cpu_core_count": "two"},
        {"vpc_security_group_ids.#": "2", "vpc_security_group_ids.0": "sg-1"},
        {"tags.%": "3", "tags.Name": "front"},
    ])
    def test_invalid_values(self, flat):
        with pytest.raises(EncodingError):
            INSTANCE.encode(flat)


class TestDecode:
    def test_wrong_version(self):
        with pytest.raises(EncodingError):
            INSTANCE.decode({"id": "i-1"}, 0)

    def test_wrong_type(self):
        with pytest.raises(EncodingError):
            INSTANCE.decode({"ebs_optimized": "false"}, 1)

    def test_none_skipped(self):
        assert INSTANCE.decode({"id": None}) == {}


class TestFromDict:
    def test_from_dict(self):
        schema = ResourceSchema.from_dict({"version": 2, "attributes": {"id": "string"}, "computed": ["id"]})
        assert schema == ResourceSchema(version=2, attributes={"id": "string"}, computed=["id"])

    def test_defaults(self):
        assert ResourceSchema.from_dict(None) == ResourceSchema()

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            ResourceSchema.from_dict({"attributes": {"id": "uuid"}})


class TestReferenceAttributes:
    def test_only_strings_and_list_items(self):
        r = Resource(provider="aws", resource_type="aws_instance", resource_id="i-1",
                     attributes=dict(FLAT, ami="", subnet_id="subnet-1"), schema=INSTANCE)
        assert r.reference_attributes() == {
            "id": "i-1",
            "subnet_id": "subnet-1",
            "vpc_security_group_ids.0": "sg-1",
            "vpc_security_group_ids.1": "sg-2",
        }
        assert r.reference_attributes(items=False) == {"id": "i-1", "subnet_id": "subnet-1"}

    def test_exported(self):
        r = Resource(provider="aws", resource_type="aws_instance", resource_id="i-1",
                     attributes=dict(FLAT, name="front", subnet_id="subnet-1"), schema=INSTANCE)
        assert r.exported_attributes() == {"id": "i-1", "name": "front"}
