from pathlib import Path

import pytest

from rsmodwalk.manifest import (
    CheckEntity,
    EntityKind,
    ManifestError,
    extract_description,
    extract_products,
    extract_readme,
    handle_manifest,
    load_manifest,
    to_manifest_dir,
)

ROOT_MANIFEST = """\
[package]
name = "demo"
version = "0.1.0"
edition = "2018"
readme = "README.md"
description = "A silly demo with plenty of spelling mistakes"

[workspace]
members = ["member/*"]

[lib]
name = "demo"

[[bin]]
name = "demo"
path = "src/main.rs"
"""

DEMO_FILES = {
    "Cargo.toml": ROOT_MANIFEST,
    "README.md": "# Demo\n",
    "src/main.rs": "mod lib;\nfn main() {}\n",
    "src/lib.rs": "/// Lib.\npub fn f() {}\n",
    "member/true/Cargo.toml": (
        '[package]\nname = "true"\nversion = "0.1.0"\n\n[lib]\npath = "lib.rs"\n'
    ),
    "member/true/lib.rs": "/// True.\npub fn t() {}\n",
    "member/true/README.md": "# True\n",
    "member/procmacro/Cargo.toml": (
        '[package]\nname = "procmacro"\nversion = "0.1.0"\n\n[lib]\nproc-macro = true\n'
    ),
    "member/procmacro/src/lib.rs": "/// Macro.\npub fn m() {}\n",
    "member/stray.rs": "/// Stray.\nfn s() {}\n",
}


def _write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


@pytest.fixture
def demo(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    _write_tree(root, DEMO_FILES)
    return root.resolve()


def _source(path: Path) -> CheckEntity:
    return CheckEntity(EntityKind.SOURCE, path, recurse=True)


def test_manifest_entries(demo: Path) -> None:
    manifest, content = load_manifest(demo)
    assert extract_products(manifest, demo) == {
        _source(demo / "src/main.rs"),
        _source(demo / "src/lib.rs"),
    }
    assert extract_readme(manifest, demo) == CheckEntity(
        EntityKind.MARKDOWN, demo / "README.md"
    )
    description = extract_description(manifest, demo, content)
    assert description is not None
    assert description.kind is EntityKind.MANIFEST_DESCRIPTION
    assert description.as_path() == demo / "Cargo.toml"
    assert description.content == ROOT_MANIFEST


def test_load_manifest_returns_raw_text(demo: Path) -> None:
    manifest, content = load_manifest(demo)
    assert content == ROOT_MANIFEST
    assert manifest.name == "demo"
    assert manifest.workspace_members == ["member/*"]


def test_lib_without_path_gets_default(demo: Path) -> None:
    manifest, _ = load_manifest(demo / "member/procmacro")
    assert manifest.lib is not None
    assert manifest.lib.path == "src/lib.rs"


def test_autodetect_targets(tmp_path: Path) -> None:
    _write_tree(
        tmp_path,
        {
            "Cargo.toml": '[package]\nname = "auto"\nversion = "0.1.0"\n',
            "src/main.rs": "fn main() {}\n",
            "src/lib.rs": "pub fn f() {}\n",
            "src/bin/tool.rs": "fn main() {}\n",
        },
    )
    manifest, _ = load_manifest(tmp_path)
    assert extract_products(manifest, tmp_path) == {
        _source(tmp_path / "src/main.rs"),
        _source(tmp_path / "src/lib.rs"),
        _source(tmp_path / "src/bin/tool.rs"),
    }


def test_missing_product_file_is_dropped(tmp_path: Path) -> None:
    _write_tree(
        tmp_path,
        {"Cargo.toml": '[package]\nname = "x"\n\n[lib]\npath = "gone.rs"\n'},
    )
    manifest, _ = load_manifest(tmp_path)
    assert extract_products(manifest, tmp_path) == set()


def test_readme_missing_gives_none(tmp_path: Path) -> None:
    _write_tree(tmp_path, {"Cargo.toml": '[package]\nname = "x"\nreadme = "NOPE.md"\n'})
    manifest, content = load_manifest(tmp_path)
    assert extract_readme(manifest, tmp_path) is None
    assert extract_description(manifest, tmp_path, content) is None


def test_to_manifest_dir(demo: Path) -> None:
    assert to_manifest_dir(demo / "Cargo.toml") == demo
    assert to_manifest_dir(demo) == demo


def test_to_manifest_dir_missing(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        to_manifest_dir(tmp_path / "nothing" / "Cargo.toml")


def test_load_manifest_invalid_toml(tmp_path: Path) -> None:
    _write_tree(tmp_path, {"Cargo.toml": "[package\nname = \n"})
    with pytest.raises(ManifestError):
        load_manifest(tmp_path)


def test_load_manifest_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path)


def test_handle_manifest_with_workspace(demo: Path) -> None:
    assert handle_manifest(demo / "Cargo.toml", False) == {
        _source(demo / "src/main.rs"),
        _source(demo / "src/lib.rs"),
        CheckEntity(EntityKind.MARKDOWN, demo / "README.md"),
        _source(demo / "member/true/lib.rs"),
        _source(demo / "member/procmacro/src/lib.rs"),
    }


def test_handle_manifest_skip_readme(demo: Path) -> None:
    entities = handle_manifest(demo, True)
    assert {entity.kind for entity in entities} == {EntityKind.SOURCE}
    assert len(entities) == 4


def test_handle_manifest_virtual_workspace(tmp_path: Path) -> None:
    _write_tree(
        tmp_path,
        {
            "Cargo.toml": '[workspace]\nmembers = ["a"]\n',
            "a/Cargo.toml": '[package]\nname = "a"\n',
            "a/src/lib.rs": "pub fn a() {}\n",
        },
    )
    root = tmp_path.resolve()
    assert handle_manifest(root, False) == {_source(root / "a/src/lib.rs")}


def test_handle_manifest_missing(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        handle_manifest(tmp_path, False)