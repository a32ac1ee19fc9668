"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitlab_irc.services.routing import RoutingTable
from tests.helpers import RecordingSink

MAPPING_YAML = """\
default: "#gitlab"
groups:
  acme:
    - "#acme"
    - "#acme-ci"
  infra: "#infra"
explicit:
  acme/secrets:
    - "#acme-private"
"""


@pytest.fixture
def routing_table() -> RoutingTable:
    return RoutingTable(
        default="#gitlab",
        groups={"acme": ["#acme", "#acme-ci"], "infra": ["#infra"]},
        explicit={"acme/secrets": ["#acme-private"]},
    )


@pytest.fixture
def mapping_file(tmp_path: Path) -> Path:
    path = tmp_path / "channelmapping.yml"
    path.write_text(MAPPING_YAML, encoding="utf-8")
    return path


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
