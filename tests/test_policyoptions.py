"""Tests for policy-options resources."""
import pytest

from junos_provider.engine.errors import RenderError
from junos_provider.engine.orchestrator import ResourceOrchestrator
from junos_provider.resources.policyoptions import (
    AsPath,
    AsPathEntry,
    AsPathGroup,
    AsPathGroupOptions,
    AsPathOptions,
    Community,
    CommunityOptions,
    PrefixList,
    PrefixListOptions,
)


class TestAsPath:
    """Tests for junos_policyoptions_as_path."""

    def test_render_path(self):
        """Path is rendered quoted after the object path."""
        lines = AsPath().render(AsPathOptions(name="test", path="65000 65001"))
        assert lines == ['set policy-options as-path test "65000 65001"']

    def test_render_dynamic_db_first(self):
        lines = AsPath().render(AsPathOptions(name="test", dynamic_db=True, path="65000"))
        assert lines == [
            "set policy-options as-path test dynamic-db",
            'set policy-options as-path test "65000"',
        ]

    def test_round_trip(self, relative_output):
        """Read back gives the declared values."""
        resource = AsPath()
        lines = resource.render(AsPathOptions(name="test", path="65000 65001"))
        options = resource.parse(relative_output(resource, lines, "test"), "test")
        assert options == AsPathOptions(name="test", path="65000 65001", dynamic_db=False)

    def test_parse_empty_is_absent(self):
        """Empty output leaves the identity empty."""
        resource = AsPath()
        options = resource.parse("", "test")
        assert options.name == ""
        assert resource.is_absent(options)

    def test_decode_and_state(self):
        resource = AsPath()
        options = resource.decode({"name": "test", "path": "65000 65001"})
        assert resource.to_state(options) == {
            "id": "test",
            "name": "test",
            "dynamic_db": False,
            "path": "65000 65001",
        }

    def test_commands(self):
        resource = AsPath()
        assert resource.exists_command("test") == "show configuration policy-options as-path test | display set"
        assert resource.read_command("test") == (
            "show configuration policy-options as-path test | display set relative"
        )
        assert resource.render_delete("test") == ["delete policy-options as-path test"]

    def test_invalid_name(self):
        errors = AsPath().validate(AsPathOptions(name="bad name!"))
        assert any("invalid name" in e for e in errors)

    def test_path_or_dynamic_db_required(self):
        errors = AsPath().validate(AsPathOptions(name="test"))
        assert errors == ["name: at least one of path or dynamic_db must be specified"]

    @pytest.mark.asyncio
    async def test_create_without_path_fails_before_lock(self, device, client):
        """Nothing is sent to the device for an as-path without content."""
        result = await ResourceOrchestrator(client).create(AsPath(), {"name": "test"})
        assert not result.success
        assert [d.summary for d in result.diagnostics.errors] == [
            "name: at least one of path or dynamic_db must be specified"
        ]
        assert device.calls == []


class TestAsPathGroup:
    """Tests for junos_policyoptions_as_path_group."""

    def test_render(self):
        options = AsPathGroupOptions(
            name="grp",
            dynamic_db=True,
            as_path=[AsPathEntry("p1", "65000 .*"), AsPathEntry("p2", "65001")],
        )
        assert AsPathGroup().render(options) == [
            'set policy-options as-path-group grp as-path p1 "65000 .*"',
            'set policy-options as-path-group grp as-path p2 "65001"',
            "set policy-options as-path-group grp dynamic-db",
        ]

    def test_duplicate_name_rejected(self):
        """Two entries with the same name cannot be rendered."""
        options = AsPathGroupOptions(
            name="grp",
            as_path=[AsPathEntry("p1", "65000"), AsPathEntry("p1", "65001")],
        )
        with pytest.raises(RenderError) as exc_info:
            AsPathGroup().render(options)
        assert "multiple blocks as_path with the same name p1" in str(exc_info.value)

    def test_round_trip(self, relative_output):
        resource = AsPathGroup()
        declared = AsPathGroupOptions(
            name="grp",
            as_path=[AsPathEntry("p1", "65000 65001"), AsPathEntry("p2", "65002")],
        )
        lines = resource.render(declared)
        assert resource.parse(relative_output(resource, lines, "grp"), "grp") == declared

    def test_decode_single_block_mapping(self):
        """A single as_path mapping is accepted as a one-element list."""
        options = AsPathGroup().decode({"name": "grp", "as_path": {"name": "p1", "path": "65000"}})
        assert options.as_path == [AsPathEntry("p1", "65000")]

    def test_dynamic_db_only(self):
        assert AsPathGroup().validate(AsPathGroupOptions(name="grp", dynamic_db=True)) == []

    @pytest.mark.asyncio
    async def test_create_without_entries_fails_before_lock(self, device, client):
        result = await ResourceOrchestrator(client).create(AsPathGroup(), {"name": "grp"})
        assert [d.summary for d in result.diagnostics.errors] == [
            "name: at least one of as_path or dynamic_db must be specified"
        ]
        assert device.calls == []


class TestCommunity:
    """Tests for junos_policyoptions_community."""

    def test_render(self):
        """Members are quoted."""
        options = CommunityOptions(name="cust", invert_match=True, members=["65000:100", "65000:200"])
        assert Community().render(options) == [
            'set policy-options community cust members "65000:100"',
            'set policy-options community cust members "65000:200"',
            "set policy-options community cust invert-match",
        ]

    def test_render_dynamic_db(self):
        options = CommunityOptions(name="cust", dynamic_db=True)
        assert Community().render(options) == ["set policy-options community cust dynamic-db"]

    def test_round_trip(self, relative_output):
        resource = Community()
        declared = CommunityOptions(name="cust", members=["65000:100", "target:65000:1", "^65000:.*$"])
        lines = resource.render(declared)
        assert resource.parse(relative_output(resource, lines, "cust"), "cust") == declared

    def test_round_trip_dynamic_db(self, relative_output):
        resource = Community()
        declared = CommunityOptions(name="cust", dynamic_db=True, invert_match=True)
        lines = resource.render(declared)
        options = resource.parse(relative_output(resource, lines, "cust"), "cust")
        assert options == declared
        assert resource.to_state(options)["dynamic_db"] is True

    def test_members_or_dynamic_db_required(self):
        errors = Community().validate(CommunityOptions(name="cust"))
        assert errors == ["name: one of members or dynamic_db must be specified"]

    def test_members_and_dynamic_db_exclusive(self):
        errors = Community().validate(CommunityOptions(name="cust", dynamic_db=True, members=["65000:1"]))
        assert errors == ["name: only one of members or dynamic_db must be specified"]


class TestPrefixList:
    """Tests for junos_policyoptions_prefix_list."""

    def test_render_order(self):
        """Bare object first, then apply-path, dynamic-db and sorted prefixes."""
        resource = PrefixList()
        options = resource.decode({
            "name": "pl",
            "apply_path": "system ntp server <*>",
            "dynamic_db": True,
            "prefix": ["10.0.1.0/24", "10.0.0.0/24"],
        })
        assert resource.render(options) == [
            "set policy-options prefix-list pl",
            'set policy-options prefix-list pl apply-path "system ntp server <*>"',
            "set policy-options prefix-list pl dynamic-db",
            "set policy-options prefix-list pl 10.0.0.0/24",
            "set policy-options prefix-list pl 10.0.1.0/24",
        ]

    def test_empty_list_still_exists(self, relative_output):
        """A prefix-list without entries reads back as present."""
        resource = PrefixList()
        lines = resource.render(PrefixListOptions(name="pl"))
        options = resource.parse(relative_output(resource, lines, "pl"), "pl")
        assert options == PrefixListOptions(name="pl")
        assert not resource.is_absent(options)

    def test_round_trip(self, relative_output):
        resource = PrefixList()
        declared = PrefixListOptions(
            name="pl",
            apply_path="interfaces <*> unit <*> family inet address <*>",
            prefix=["192.0.2.0/24", "2001:db8::/32"],
        )
        lines = resource.render(declared)
        assert resource.parse(relative_output(resource, lines, "pl"), "pl") == declared

    def test_parse_unescapes_apply_path(self):
        output = 'set apply-path "system ntp server &lt;*&gt;"\n'
        options = PrefixList().parse(output, "pl")
        assert options.apply_path == "system ntp server <*>"

    def test_invalid_prefix(self):
        errors = PrefixList().validate(PrefixListOptions(name="pl", prefix=["10.0.0.1/24"]))
        assert errors == ["prefix: '10.0.0.1/24' is not a valid CIDR network"]

    def test_prefix_without_length(self):
        errors = PrefixList().validate(PrefixListOptions(name="pl", prefix=["10.0.0.0"]))
        assert errors == ["prefix: '10.0.0.0' is missing a prefix length"]
