"""Find the files of a Rust crate through its manifests and mod declarations."""

__version__ = "0.1.0"
__all__ = ["tokens", "modules", "walker", "manifest", "extract"]