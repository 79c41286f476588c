from __future__ import annotations

import pytest

from relplan.core.result import Err, Ok
from relplan.services.release.constraint import (
    BoundedRange,
    Constraint,
    SelfVersion,
    parse_constraint,
)
from relplan.services.release.version import Version, parse_tags, try_parse_version


def v(text: str) -> Version:
    version = try_parse_version(text)
    assert version is not None, text
    return version


REFERENCE = v("4.1.0")


def c(text: str, reference: Version = REFERENCE) -> Constraint:
    result = parse_constraint(text, reference)
    assert isinstance(result, Ok), text
    return result.value


def test_self_version_binds_reference() -> None:
    constraint = c("self.version", v("5.0.0-rc1"))
    assert isinstance(constraint, SelfVersion)
    assert constraint.is_self_version
    assert constraint.value == "self.version"
    assert constraint.min_version == v("5.0.0-rc1")
    assert constraint.matches(v("5.0.0-rc1"))
    assert not constraint.matches(v("5.0.0"))


@pytest.mark.parametrize(
    ("text", "inside", "outside"),
    [
        ("^4.1", ["4.1.0", "4.9.9", "4.2.0-rc1"], ["4.0.9", "5.0.0", "5.0.0-dev"]),
        ("^4.1.2", ["4.1.2", "4.7.0"], ["4.1.1", "5.0.0"]),
        ("^0.3", ["0.3.0", "0.3.9"], ["0.4.0", "0.2.9"]),
        ("^0.3.1", ["0.3.1", "0.3.4"], ["0.4.0", "0.3.0"]),
        ("^0.0.3", ["0.0.3"], ["0.0.4", "0.0.2"]),
        ("~4.1.2", ["4.1.2", "4.1.9"], ["4.2.0", "4.1.1"]),
        ("~4.1", ["4.1.0", "4.9.0"], ["5.0.0", "4.0.0"]),
        ("4.*", ["4.0.0", "4.9.9"], ["5.0.0", "3.9.9"]),
        ("4.1.*", ["4.1.0", "4.1.7"], ["4.2.0", "4.0.9"]),
        ("4.1.x-dev", ["4.1.3"], ["4.2.0"]),
        ("4.x-dev", ["4.8.0"], ["5.0.0"]),
        ("^4.1@dev", ["4.1.0-dev"], ["5.0.0"]),
    ],
)
def test_range_matches(text: str, inside: list[str], outside: list[str]) -> None:
    constraint = c(text)
    assert isinstance(constraint, BoundedRange)
    assert constraint.value == text
    for item in inside:
        assert constraint.matches(v(item)), item
    for item in outside:
        assert not constraint.matches(v(item)), item


def test_range_minimum() -> None:
    assert c("^4.1").min_version == v("4.1.0")
    assert c("4.1.*").min_version == v("4.1.0")
    assert c("4.*").min_version == v("4.0.0")


def test_stable_floor_admits_its_prereleases() -> None:
    constraint = c("^4.1")
    assert constraint.matches(v("4.1.0-rc1"))
    assert constraint.matches(v("4.1.0-dev"))


def test_prerelease_floor_is_exact_lower_bound() -> None:
    constraint = c("^4.1.0-rc2")
    assert constraint.min_version == v("4.1.0-rc2")
    assert not constraint.matches(v("4.1.0-rc1"))
    assert constraint.matches(v("4.1.0-rc2"))
    assert constraint.matches(v("4.3.0"))
    assert not constraint.matches(v("5.0.0"))


def test_exact_pin() -> None:
    constraint = c("4.1.2")
    assert isinstance(constraint, BoundedRange)
    assert constraint.ceiling is None
    assert constraint.matches(v("4.1.2"))
    assert not constraint.matches(v("4.1.2-rc1"))
    assert not constraint.matches(v("4.1.3"))


def test_filter_versions_returns_new_mapping() -> None:
    tags = parse_tags(["4.0.0", "4.1.0", "4.1.1-rc1", "5.0.0"])
    filtered = c("^4.1").filter_versions(tags)
    assert sorted(filtered) == ["4.1.0", "4.1.1-rc1"]
    assert len(tags) == 4


@pytest.mark.parametrize("text", ["^4.1 || ^5.0", ">=4.1", "4.1, <5", "*", "dev-main", "", "^"])
def test_unsupported_constraints(text: str) -> None:
    result = parse_constraint(text, REFERENCE)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_constraint"
