# rsmodwalk

rsmodwalk finds the source files and read-me files that belong to a Rust crate or workspace. You give it paths, and it works in three steps:

- It reads `Cargo.toml` manifests. From each one it takes the binary and library targets, the declared read-me, and the targets of workspace members. Member entries may be glob patterns.
- It tokenizes Rust source files and finds each `mod name;` declaration, including ones nested inside blocks.
- For each declaration it looks for the module's file, which is `name/mod.rs`, `name.rs` or `<parent stem>/name.rs` next to the declaring file, and follows that file in turn.

The result is the set of files and their contents, ready for checks such as spell checking or documentation linting.

## Installation

```
pip install rsmodwalk
```

The package uses only the standard library and needs Python 3.11 or newer.

## Command line

```
rsmodwalk [-r] [--skip-readme] [PATHS ...]
```

- `-r`, `--recursive` follows `mod` declarations from source files given directly and walks plain directories all the way down. Without it, a plain directory contributes only the files directly inside it. Entry points taken from a manifest are always followed.
- `--skip-readme` leaves out the read-me files declared in manifests.

If you give no paths, the current directory is used and recursion is switched on. A path can be any of these:

- a `Cargo.toml` file,
- a directory that contains one,
- a `.rs` file,
- a `.md` file,
- a plain directory.

Files of other types are skipped. Paths that do not exist are dropped.

Each file found is printed on its own line as the kind (`rust_source` or `commonmark`), a tab, and the path. On an error the command prints `error: ...` to standard error and exits with status 1.

## Library use

To list every module file reachable from an entry point:

```python
from rsmodwalk.walker import TraverseModulesIter

for path in TraverseModulesIter.new("demo/src/main.rs"):
    print(path)
```

`TraverseModulesIter.with_depth_limit(path, max_depth)` limits how deep declarations are followed. A limit of 0 yields only the starting files. `TraverseModulesIter.with_multi(paths)` starts from several paths. When a starting path is a directory, the `.rs` files directly inside it are used, leaving out hidden files and symbolic links.

To read the non-empty files along the way:

```python
from rsmodwalk.walker import traverse_with_depth_limit

for source in traverse_with_depth_limit("demo/src/lib.rs", 1):
    print(source.path, len(source.content))
```

To collect the entities that a whole manifest describes:

```python
from rsmodwalk.manifest import handle_manifest

for entity in handle_manifest("demo", skip_readme=False):
    print(entity.kind, entity.as_path())
```

`load_manifest`, `extract_products`, `extract_readme` and `extract_description` give access to the individual steps.

To run the full pipeline from a list of input paths:

```python
from rsmodwalk.extract import extract

docs = extract(["demo"], recurse=True, skip_readme=False)
for origin, content in docs.items():
    print(origin.kind, origin.path)
```

`extract` returns a dictionary that maps each `Origin` to the file's text, in the order the files were found.

To find the module declarations in a piece of source text:

```python
from rsmodwalk.tokens import tokenize
from rsmodwalk.modules import find_module_declarations

names = list(find_module_declarations(tokenize("mod a; pub mod b; mod c { }")))
# ['a', 'b']
```

## Errors

Problems are raised as exceptions:

- `TokenizeError` (in `rsmodwalk.tokens`) is raised for malformed source, such as an unterminated string or comment, or unbalanced delimiters.
- `ModuleResolutionError` (in `rsmodwalk.modules`) is raised when more than one candidate file exists for a module, or when a file is not UTF-8 or cannot be tokenized. While walking, `TraverseModulesIter` logs these errors and moves on.
- `ManifestError` (in `rsmodwalk.manifest`) is raised for a manifest that cannot be located, read or parsed. A workspace member whose manifest fails to load is logged and skipped.
- `ExtractError` (in `rsmodwalk.extract`) is raised by `extract` when a manifest cannot be handled, a source file cannot be read or traversed, or a markdown file is missing or empty.

## What it does not do

- It only finds files. It does not check spelling or read doc comments.
- It does not evaluate `#[path = ...]` attributes or `cfg` conditions on modules.
- It does not honour `.gitignore` files when scanning directories.
- `extract` does not include manifest descriptions, although `extract_description` can build such an entity.