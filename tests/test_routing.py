"""Unit tests for the channel mapping and resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitlab_irc.errors import RoutingConfigError
from gitlab_irc.schemas import ProjectIdentity
from gitlab_irc.services.routing import (
    RoutingTable,
    all_destinations,
    load_routing_table,
    resolve,
)


class TestResolve:
    def test_explicit_mapping_wins_over_group(self, routing_table: RoutingTable) -> None:
        """acme has a group entry, but acme/secrets has an explicit one."""
        result = resolve(ProjectIdentity("acme", "secrets"), routing_table)
        assert result == ("#acme-private",)

    def test_group_mapping_for_other_projects(self, routing_table: RoutingTable) -> None:
        result = resolve(ProjectIdentity("acme", "widgets"), routing_table)
        assert result == ("#acme", "#acme-ci")

    def test_default_when_nothing_matches(self, routing_table: RoutingTable) -> None:
        assert resolve(ProjectIdentity("other", "thing"), routing_table) == ("#gitlab",)

    def test_matching_is_case_sensitive(self, routing_table: RoutingTable) -> None:
        assert resolve(ProjectIdentity("ACME", "widgets"), routing_table) == ("#gitlab",)

    def test_no_partial_matches(self, routing_table: RoutingTable) -> None:
        assert resolve(ProjectIdentity("acm", "secrets"), routing_table) == ("#gitlab",)
        assert resolve(ProjectIdentity("acme/sub", "x"), routing_table) == ("#gitlab",)

    def test_empty_namespace_falls_back_to_default(
        self, routing_table: RoutingTable
    ) -> None:
        assert resolve(ProjectIdentity("", "widgets"), routing_table) == ("#gitlab",)

    def test_resolution_is_repeatable(self, routing_table: RoutingTable) -> None:
        identity = ProjectIdentity("acme", "widgets")
        assert resolve(identity, routing_table) == resolve(identity, routing_table)


class TestRoutingTable:
    def test_from_mapping(self) -> None:
        table = RoutingTable.from_mapping(
            {"default": "#main", "groups": {"g": ["#a"]}, "explicit": {"g/p": "#b"}}
        )
        assert table.default == "#main"
        assert table.groups["g"] == ("#a",)
        assert table.explicit["g/p"] == ("#b",)

    def test_sections_are_optional(self) -> None:
        table = RoutingTable.from_mapping({"default": "#main", "groups": None})
        assert dict(table.groups) == {}
        assert dict(table.explicit) == {}

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"default": ""},
            {"default": 5},
            {"default": "#main", "groups": ["#a"]},
            {"default": "#main", "groups": {"g": []}},
            {"default": "#main", "explicit": {"g/p": {"x": 1}}},
            ["#main"],
            None,
        ],
    )
    def test_invalid_documents_are_rejected(self, data: object) -> None:
        with pytest.raises(RoutingConfigError):
            RoutingTable.from_mapping(data)

    def test_table_is_read_only(self, routing_table: RoutingTable) -> None:
        with pytest.raises(TypeError):
            routing_table.groups["new"] = ("#x",)  # type: ignore[index]
        with pytest.raises(AttributeError):
            routing_table.default = "#other"  # type: ignore[misc]


class TestLoadRoutingTable:
    def test_loads_yaml(self, mapping_file: Path) -> None:
        table = load_routing_table(mapping_file)
        assert table.default == "#gitlab"
        assert table.groups["acme"] == ("#acme", "#acme-ci")
        assert table.groups["infra"] == ("#infra",)
        assert table.explicit["acme/secrets"] == ("#acme-private",)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RoutingConfigError, match="cannot read"):
            load_routing_table(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("default: [unclosed\n", encoding="utf-8")
        with pytest.raises(RoutingConfigError, match="invalid YAML"):
            load_routing_table(path)


class TestAllDestinations:
    def test_collects_every_channel_once(self, routing_table: RoutingTable) -> None:
        assert all_destinations(routing_table) == [
            "#gitlab",
            "#acme",
            "#acme-ci",
            "#infra",
            "#acme-private",
        ]

    def test_duplicates_are_removed(self) -> None:
        table = RoutingTable(
            default="#a", groups={"g": ["#a", "#b"]}, explicit={"g/p": ["#b"]}
        )
        assert all_destinations(table) == ["#a", "#b"]
