"""Read Cargo manifests and list the files they make worth checking."""

from __future__ import annotations

import glob
import logging
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike
from pathlib import Path

log = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"


class ManifestError(Exception):
    """Raised when a manifest cannot be located, read or parsed."""


class EntityKind(Enum):
    """What kind of content a ``CheckEntity`` refers to."""

    MARKDOWN = "markdown"
    SOURCE = "source"
    MANIFEST_DESCRIPTION = "manifest_description"


@dataclass(frozen=True)
class CheckEntity:
    """A file to check: markdown, a source entry point, or a manifest description."""

    kind: EntityKind
    path: Path
    recurse: bool = False
    content: str | None = None

    def as_path(self) -> Path:
        return self.path


@dataclass
class Product:
    """A build target of a manifest, with its path relative to the manifest."""

    name: str | None = None
    path: str | None = None


@dataclass
class Manifest:
    """The parts of a Cargo manifest relevant for finding files."""

    has_package: bool = False
    name: str | None = None
    readme: str | None = None
    description: str | None = None
    autobins: bool = True
    autolib: bool = True
    lib: Product | None = None
    bins: list[Product] = field(default_factory=list)
    workspace_members: list[str] | None = None


def _string_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _parse_manifest(text: str, source: Path) -> Manifest:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as err:
        raise ManifestError(f"Failed to parse manifest file {source}") from err

    manifest = Manifest()
    package = data.get("package")
    if isinstance(package, dict):
        manifest.has_package = True
        manifest.name = _string_or_none(package.get("name"))
        manifest.readme = _string_or_none(package.get("readme"))
        manifest.description = _string_or_none(package.get("description"))
        manifest.autobins = package.get("autobins", True) is not False
        manifest.autolib = package.get("autolib", True) is not False

    lib = data.get("lib")
    if isinstance(lib, dict):
        manifest.lib = Product(
            _string_or_none(lib.get("name")), _string_or_none(lib.get("path"))
        )

    for entry in data.get("bin", []):
        if isinstance(entry, dict):
            manifest.bins.append(
                Product(
                    _string_or_none(entry.get("name")),
                    _string_or_none(entry.get("path")),
                )
            )

    workspace = data.get("workspace")
    if isinstance(workspace, dict):
        members = workspace.get("members", [])
        manifest.workspace_members = [m for m in members if isinstance(m, str)]
    return manifest


def _infer_bin_path(manifest: Manifest, product: Product, manifest_dir: Path) -> str | None:
    candidates = []
    if product.name is not None and product.name == manifest.name:
        candidates.append("src/main.rs")
    if product.name is not None:
        candidates.append(f"src/bin/{product.name}.rs")
        candidates.append(f"src/bin/{product.name}/main.rs")
    return next((c for c in candidates if (manifest_dir / c).is_file()), None)


def _complete_from_path(manifest: Manifest, manifest_dir: Path) -> None:
    """Fill in targets that exist on disk but are not declared."""
    if not manifest.has_package:
        return
    src = manifest_dir / "src"
    if manifest.lib is None and manifest.autolib and (src / "lib.rs").is_file():
        manifest.lib = Product(manifest.name, "src/lib.rs")

    for product in manifest.bins:
        if product.path is None:
            product.path = _infer_bin_path(manifest, product, manifest_dir)

    if not manifest.autobins:
        return
    known_paths = {product.path for product in manifest.bins}
    known_names = {product.name for product in manifest.bins}
    if (
        (src / "main.rs").is_file()
        and "src/main.rs" not in known_paths
        and manifest.name not in known_names
    ):
        manifest.bins.append(Product(manifest.name, "src/main.rs"))
    bin_dir = src / "bin"
    if bin_dir.is_dir():
        for entry in sorted(bin_dir.glob("*.rs")):
            rel = f"src/bin/{entry.name}"
            if rel not in known_paths and entry.stem not in known_names:
                manifest.bins.append(Product(entry.stem, rel))


def to_manifest_dir(path: str | PathLike[str]) -> Path:
    """Return the canonical directory of a manifest path or manifest directory."""
    path = Path(path)
    directory = path.parent if path.name == MANIFEST_NAME else path
    try:
        return directory.resolve(strict=True)
    except OSError as err:
        raise ManifestError(f"Failed to canonicalize path {directory}") from err


def load_manifest(manifest_dir: str | PathLike[str]) -> tuple[Manifest, str]:
    """Load the manifest in ``manifest_dir``, returning it and its raw text.

    Every declared library ends up with a path afterwards.
    """
    manifest_dir = Path(manifest_dir)
    manifest_file = manifest_dir / MANIFEST_NAME
    content = manifest_file.read_text(encoding="utf-8")
    manifest = _parse_manifest(content, manifest_file)
    _complete_from_path(manifest, manifest_dir)
    if manifest.lib is not None and manifest.lib.path is None:
        manifest.lib.path = "src/lib.rs"
    return manifest, content


def extract_products(manifest: Manifest, manifest_dir: str | PathLike[str]) -> set[CheckEntity]:
    """Return the existing binary and library entry points of a manifest."""
    manifest_dir = Path(manifest_dir)
    products = list(manifest.bins)
    if manifest.lib is not None:
        products.append(manifest.lib)
    items: set[CheckEntity] = set()
    for product in products:
        if product.path is None:
            log.warning("Missing path for product %r", product.name)
            continue
        full = manifest_dir / product.path
        if not full.is_file():
            log.debug("File listed by manifest does not exist: %s", full)
            continue
        items.add(CheckEntity(EntityKind.SOURCE, full, recurse=True))
    log.debug("explicit manifest products %s", items)
    return items


def extract_readme(manifest: Manifest, manifest_dir: str | PathLike[str]) -> CheckEntity | None:
    """Return the manifest's read-me file, if one is declared and exists."""
    if manifest.readme is None:
        return None
    readme = Path(manifest_dir) / manifest.readme
    if not readme.is_file():
        log.warning("read-me file declared in manifest %s is not a file", readme)
        return None
    return CheckEntity(EntityKind.MARKDOWN, readme)


def extract_description(
    manifest: Manifest, manifest_dir: str | PathLike[str], manifest_content: str
) -> CheckEntity | None:
    """Return the manifest description entity, if a description is declared."""
    if manifest.description is None:
        return None
    return CheckEntity(
        EntityKind.MANIFEST_DESCRIPTION,
        Path(manifest_dir) / MANIFEST_NAME,
        content=manifest_content,
    )


def handle_manifest(manifest_dir: str | PathLike[str], skip_readme: bool) -> set[CheckEntity]:
    """Collect the entities of a manifest and of its workspace members."""
    directory = to_manifest_dir(manifest_dir)
    try:
        manifest, _content = load_manifest(directory)
    except (OSError, ManifestError) as err:
        raise ManifestError(f"Failed to load manifest from dir {directory}") from err

    acc = extract_products(manifest, directory)
    if not skip_readme:
        readme = extract_readme(manifest, directory)
        if readme is not None:
            acc.add(readme)

    for member in manifest.workspace_members or []:
        log.debug("Handling manifest member: %s", member)
        for match in sorted(glob.glob(str(directory / member))):
            member_dir = Path(match)
            try:
                member_manifest, _ = load_manifest(member_dir)
            except (OSError, ManifestError):
                log.warning("Opening manifest from member failed %s", member_dir)
                continue
            acc |= extract_products(member_manifest, member_dir)
    return acc