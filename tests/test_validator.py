"""Tests for pre-flight attribute validation."""
from junos_provider.engine.validator import (
    ResourceValidator,
    resolve_path,
    validate_name,
)
from junos_provider.resources import get_resource_type


class TestValidateName:
    """Tests for Junos object name checks."""

    def test_valid(self):
        assert validate_name("as-path_1", "name") == []

    def test_empty(self):
        assert validate_name("", "name") == ["name: name cannot be empty"]

    def test_too_long(self):
        errors = validate_name("a" * 65, "name")
        assert errors == [f"name: '{'a' * 65}' is too long (maximum 64 characters)"]

    def test_bad_character(self):
        assert validate_name("a.b", "name") == ["name: 'a.b' invalid name (bad character)"]


class TestResolvePath:
    """Tests for dotted attribute paths."""

    def test_index_into_mapping_block(self):
        data = {"then": {"discard": True}}
        assert resolve_path(data, "then.0.discard") == [("then.0.discard", True)]

    def test_wildcard(self):
        data = {"as_path": [{"name": "a"}, {"name": "b"}]}
        assert resolve_path(data, "as_path.*.name") == [
            ("as_path.0.name", "a"),
            ("as_path.1.name", "b"),
        ]

    def test_missing_parent_resolves_to_nothing(self):
        assert resolve_path({}, "if_exceeding.0.burst_size_limit") == []


class TestResourceValidator:
    """Tests for the validator on real resource types."""

    def test_valid(self):
        result = ResourceValidator().validate(
            get_resource_type("junos_policyoptions_as_path"),
            {"name": "test", "path": "65000 65001"},
        )
        assert result.valid
        assert result.errors == []

    def test_missing_required(self):
        result = ResourceValidator().validate(get_resource_type("junos_system_ntp_server"), {"key": 1})
        assert not result.valid
        assert result.errors == ["address: required attribute is missing"]

    def test_required_in_every_block(self):
        result = ResourceValidator().validate(
            get_resource_type("junos_policyoptions_as_path_group"),
            {"name": "grp", "as_path": [{"name": "a", "path": "65000"}, {"name": "b"}]},
        )
        assert result.errors == ["as_path.1.path: required attribute is missing"]

    def test_unknown_attribute_warns(self):
        """Unknown attributes are reported but do not fail validation."""
        result = ResourceValidator().validate(
            get_resource_type("junos_policyoptions_as_path"),
            {"name": "test", "colour": "blue", "id": "test"},
        )
        assert result.valid
        assert result.warnings == ["unknown attribute 'colour' for junos_policyoptions_as_path is ignored"]

    def test_false_does_not_conflict(self):
        """Zero values count as unset for conflicts."""
        result = ResourceValidator().validate(
            get_resource_type("junos_snmp_community"),
            {"name": "public", "authorization_read_only": True, "authorization_read_write": False},
        )
        assert result.valid

    def test_not_a_mapping(self):
        result = ResourceValidator().validate(get_resource_type("junos_policyoptions_as_path"), ["test"])
        assert not result.valid
