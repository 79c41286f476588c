from __future__ import annotations

import json
from pathlib import Path

from relplan.core.config import PathsConfig, ProjectConfig
from relplan.core.result import Err, Ok, Result
from relplan.services.release.constraint import BoundedRange
from relplan.services.release.errors import ReleaseError
from relplan.services.release.library import load_project
from relplan.services.release.version import try_parse_version
from relplan.test._projects import FakeTags, Lib, library_of, make_project


def test_load_project_requires_root_manifest(tmp_path: Path) -> None:
    result = load_project(tmp_path, list_tags=FakeTags())

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_manifest"


def test_children_in_manifest_order_skipping_unknown(tmp_path: Path) -> None:
    project, _ = make_project(
        tmp_path,
        "acme/app",
        {
            "acme/app": Lib(
                require={
                    "php": ">=8.1",
                    "acme/ui": "^1.0",
                    "acme/app": "self.version",
                    "acme/core": "^2.0",
                }
            ),
            "acme/core": Lib(),
            "acme/ui": Lib(),
        },
    )

    children = project.children(project.root)

    assert isinstance(children, Ok)
    assert [c.name for c in children.value] == ["acme/ui", "acme/core"]


def test_discovery_ignores_non_git_checkouts(tmp_path: Path) -> None:
    make_project(tmp_path, "acme/app", {"acme/app": Lib(require={"acme/core": "^1.0"})})
    loose = tmp_path / "vendor" / "acme" / "core"
    loose.mkdir(parents=True)
    (loose / "composer.json").write_text(json.dumps({"name": "acme/core"}), encoding="utf-8")

    reloaded = load_project(tmp_path, list_tags=FakeTags())

    assert isinstance(reloaded, Ok)
    assert not reloaded.value.knows("acme/core")


def test_libraries_load_once(tmp_path: Path) -> None:
    project, tags = make_project(
        tmp_path,
        "acme/app",
        {"acme/app": Lib(require={"acme/core": "^1.0"}), "acme/core": Lib(tags=("1.0.0",))},
    )

    first = project.library("acme/core")
    second = project.library("acme/core")

    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert first.value is second.value
    assert len(tags.calls) == 2  # root + core


def test_unknown_library(tmp_path: Path) -> None:
    project, _ = make_project(tmp_path, "acme/app", {"acme/app": Lib()})

    result = project.library("acme/missing")

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_manifest"


def test_custom_vendor_dir(tmp_path: Path) -> None:
    make_project(tmp_path, "acme/app", {"acme/app": Lib(), "acme/core": Lib()})
    (tmp_path / "vendor").rename(tmp_path / "libs")
    config = ProjectConfig(paths=PathsConfig(vendor="libs"))

    result = load_project(tmp_path, config=config, list_tags=FakeTags())

    assert isinstance(result, Ok)
    assert result.value.knows("acme/core")


def test_malformed_project_config_is_an_error(tmp_path: Path) -> None:
    make_project(tmp_path, "acme/app", {"acme/app": Lib()})
    path = tmp_path / "relplan.toml"
    path.write_text('[paths]\nplan = "custom/plan.json"\nvendor = \n', encoding="utf-8")

    result = load_project(tmp_path, list_tags=FakeTags())

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_config"
    assert result.error.hint == str(path)


def test_project_config_read_from_file(tmp_path: Path) -> None:
    project, _ = make_project(tmp_path, "acme/app", {"acme/app": Lib()})
    assert project.config == ProjectConfig()
    (tmp_path / "relplan.toml").write_text('[paths]\nplan = "custom/plan.json"\n', encoding="utf-8")

    result = load_project(tmp_path, list_tags=FakeTags())

    assert isinstance(result, Ok)
    assert result.value.plan_path == tmp_path / "custom" / "plan.json"


def test_child_constraint_and_flags(tmp_path: Path) -> None:
    project, _ = make_project(
        tmp_path,
        "acme/app",
        {
            "acme/app": Lib(
                require={"acme/core": "^4.1", "acme/ui": "4.1.*", "acme/assets": "^1.0"},
                overrides=(
                    "[children]\n"
                    'upgrade-only = ["acme/ui"]\n'
                    'stability-inherit = ["acme/core"]\n'
                ),
            ),
            "acme/core": Lib(),
            "acme/ui": Lib(),
            "acme/assets": Lib(overrides="upgrade-only = true\n"),
        },
    )
    root = project.root
    core = library_of(project, "acme/core")
    ui = library_of(project, "acme/ui")
    assets = library_of(project, "acme/assets")
    reference = try_parse_version("4.1.0")
    assert reference is not None

    constraint = root.get_child_constraint("acme/core", reference)
    assert isinstance(constraint, Ok)
    assert isinstance(constraint.value, BoundedRange)

    assert not root.is_child_upgrade_only(core)
    assert root.is_child_upgrade_only(ui)
    assert root.is_child_upgrade_only(assets)
    assert root.is_stability_inherited(core)
    assert not root.is_stability_inherited(ui)


def test_child_constraint_errors_name_the_library(tmp_path: Path) -> None:
    project, _ = make_project(
        tmp_path, "acme/app", {"acme/app": Lib(require={"acme/core": ">=4.1"}), "acme/core": Lib()}
    )
    reference = try_parse_version("4.1.0")
    assert reference is not None

    unsupported = project.root.get_child_constraint("acme/core", reference)
    assert isinstance(unsupported, Err)
    assert unsupported.error.kind == "invalid_constraint"
    assert unsupported.error.message.startswith("acme/app requires acme/core:")

    missing = project.root.get_child_constraint("acme/ui", reference)
    assert isinstance(missing, Err)
    assert missing.error.kind == "invalid_constraint"


def test_from_version(tmp_path: Path) -> None:
    project, _ = make_project(
        tmp_path,
        "acme/app",
        {"acme/app": Lib(tags=("4.0.0", "4.0.3", "4.1.0-rc1", "not-a-version"))},
    )
    release = try_parse_version("4.1.0")
    assert release is not None

    assert sorted(project.root.tags) == ["4.0.0", "4.0.3", "4.1.0-rc1"]
    prior = project.root.from_version(release)
    assert prior is not None and prior.value == "4.0.3"


def test_tag_listing_failure_propagates(tmp_path: Path) -> None:
    make_project(tmp_path, "acme/app", {"acme/app": Lib()})

    def failing(directory: Path) -> Result[tuple[str, ...], ReleaseError]:
        return Err(ReleaseError(kind="tags_failed", message="git missing"))

    result = load_project(tmp_path, list_tags=failing)

    assert isinstance(result, Err)
    assert result.error.kind == "tags_failed"
