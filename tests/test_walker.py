from pathlib import Path

import pytest

from rsmodwalk.walker import (
    SourceFile,
    TraverseModulesIter,
    traverse,
    traverse_with_depth_limit,
)

DEMO_FILES = {
    "src/main.rs": "mod lib;\nmod nested;\n\n/// Entry point.\nfn main() {}\n",
    "src/lib.rs": "//! A library.\n\n/// Does a thing.\npub fn thing() {}\n",
    "src/nested/mod.rs": "mod justone;\nmod justtwo;\nmod again;\nmod fragments;\n",
    "src/nested/justone.rs": "/// One.\npub struct One;\n",
    "src/nested/justtwo.rs": "/// Two.\npub struct Two;\n",
    "src/nested/again/mod.rs": "mod code;\n/// Again.\npub fn again() {}\n",
    "src/nested/again/code.rs": "/// Code.\npub fn code() {}\n",
    "src/nested/fragments.rs": "mod simple;\nmod enumerate;\n",
    "src/nested/fragments/enumerate.rs": "/// Enumerate.\npub enum E { A, B }\n",
    "src/nested/fragments/simple.rs": "/// Simple.\npub fn simple() {}\n",
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


def test_traverse_main_rs(demo: Path) -> None:
    expected = {demo / rel for rel in DEMO_FILES}
    found = list(TraverseModulesIter.new(demo / "src/main.rs"))
    assert [p for p in found if p not in expected] == []
    assert [p for p in expected if p not in found] == []
    assert len(found) == len(expected)


def test_first_yield_is_start_file(demo: Path) -> None:
    found = list(TraverseModulesIter.new(demo / "src/main.rs"))
    assert found[0] == demo / "src/main.rs"


def test_depth_zero_yields_only_start(demo: Path) -> None:
    found = list(TraverseModulesIter.with_depth_limit(demo / "src/main.rs", 0))
    assert found == [demo / "src/main.rs"]


def test_depth_one(demo: Path) -> None:
    found = list(TraverseModulesIter.with_depth_limit(demo / "src/main.rs", 1))
    assert set(found) == {
        demo / "src/main.rs",
        demo / "src/lib.rs",
        demo / "src/nested/mod.rs",
    }
    assert len(found) == 3


def test_directory_seeds_rs_children(demo: Path) -> None:
    found = list(TraverseModulesIter.with_depth_limit(demo / "src", 0))
    assert set(found) == {demo / "src/main.rs", demo / "src/lib.rs"}
    assert len(found) == 2


def test_directory_skips_hidden_and_other_files(tmp_path: Path) -> None:
    _write_tree(
        tmp_path,
        {"visible.rs": "fn a() {}\n", ".hidden.rs": "fn b() {}\n", "notes.txt": "x"},
    )
    found = list(TraverseModulesIter.with_depth_limit(tmp_path, 0))
    assert found == [(tmp_path / "visible.rs").resolve()]


def test_with_multi_order(demo: Path) -> None:
    found = list(
        TraverseModulesIter.with_multi(
            [demo / "src/lib.rs", demo / "src/nested/justone.rs"]
        )
    )
    assert found == [demo / "src/nested/justone.rs", demo / "src/lib.rs"]


def test_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        TraverseModulesIter.new(tmp_path / "absent.rs")


def test_syntax_error_stops_descent(tmp_path: Path) -> None:
    _write_tree(tmp_path, {"broken.rs": "mod a;\nfn x( {\n", "a.rs": "fn a() {}\n"})
    found = list(TraverseModulesIter.new(tmp_path / "broken.rs"))
    assert found == [(tmp_path / "broken.rs").resolve()]


def test_collect_modules_on_directory_adds_nothing(demo: Path) -> None:
    walker = TraverseModulesIter.with_depth_limit(demo / "src/lib.rs", 0)
    walker.collect_modules(demo / "src", 1)
    assert list(walker) == [demo / "src/lib.rs"]


def test_traverse_skips_empty_files(demo: Path) -> None:
    (demo / "src/nested/again/code.rs").write_text("  \n", encoding="utf-8")
    sources = list(traverse(demo / "src/main.rs"))
    paths = {source.path for source in sources}
    assert paths == {demo / rel for rel in DEMO_FILES} - {
        demo / "src/nested/again/code.rs"
    }


def test_traverse_reads_content(demo: Path) -> None:
    sources = list(traverse_with_depth_limit(demo / "src/lib.rs", 0))
    assert sources == [SourceFile(demo / "src/lib.rs", DEMO_FILES["src/lib.rs"])]


def test_traverse_missing_raises_eagerly(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        traverse(tmp_path / "nowhere")