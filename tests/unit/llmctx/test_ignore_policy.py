from __future__ import annotations

from pathlib import Path

import pytest

from llmctx.config import CandidateEntry, EntryKind
from llmctx.ignore_policy import IgnorePolicy, matches_fixed_rules, normalize_patterns


@pytest.mark.unit
@pytest.mark.parametrize(
    "path",
    [
        ".env",
        "src/.secret",
        ".git",
        "Cargo.lock",
        "poetry.lock",
        "package-lock.json",
        "LICENSE",
        "web/node_modules/react/index.js",
    ],
)
def test_fixed_rules_always_skip(path: str) -> None:
    assert IgnorePolicy().should_skip(Path(path))
    assert IgnorePolicy(["unrelated"]).should_skip(Path(path))


@pytest.mark.unit
@pytest.mark.parametrize("path", ["src/main.rs", "README.md", "locker.py", "Cargo.toml"])
def test_regular_files_are_kept(path: str) -> None:
    assert not IgnorePolicy().should_skip(Path(path))


@pytest.mark.unit
def test_substring_exclude_matches_base_name() -> None:
    policy = IgnorePolicy(["test"])

    assert policy.should_skip(Path("pkg/foo_test.go"))
    assert not policy.should_skip(Path("pkg/foo.go"))
    # only the base name is considered for plain patterns
    assert not policy.should_skip(Path("test/foo.go"))


@pytest.mark.unit
def test_substring_exclude_is_case_sensitive() -> None:
    assert not IgnorePolicy(["Test"]).should_skip(Path("foo_test.go"))


@pytest.mark.unit
def test_glob_exclude_matches_base_name() -> None:
    policy = IgnorePolicy(["*.md"])

    assert policy.should_skip(Path("docs/guide.md"))
    assert not policy.should_skip(Path("docs/guide.rst"))


@pytest.mark.unit
def test_scoped_exclude_matches_full_path() -> None:
    policy = IgnorePolicy(["third_party/"])

    assert policy.should_skip(Path("src/third_party/zlib.c"))
    assert not policy.should_skip(Path("src/party.c"))


@pytest.mark.unit
def test_scoped_glob_exclude() -> None:
    policy = IgnorePolicy(["gen/*.rs"])

    assert policy.should_skip(Path("crate/gen/bindings.rs"))
    assert not policy.should_skip(Path("crate/src/lib.rs"))


@pytest.mark.unit
def test_blank_patterns_are_dropped() -> None:
    assert normalize_patterns(["", "  ", " a "]) == ("a",)
    assert not IgnorePolicy(["", "  "]).should_skip(Path("main.rs"))


@pytest.mark.unit
def test_undecodable_name_is_skipped() -> None:
    assert IgnorePolicy().should_skip(Path("src/bad\udcff.py"))


@pytest.mark.unit
def test_empty_name_is_not_skipped() -> None:
    assert not IgnorePolicy().should_skip(Path())


@pytest.mark.unit
def test_accepts_candidate_entries() -> None:
    entry = CandidateEntry(path=Path("vendor/node_modules"), kind=EntryKind.DIRECTORY)

    assert IgnorePolicy().should_skip(entry)
    assert matches_fixed_rules(entry.path)


@pytest.mark.unit
def test_relative_path_scopes_directory_rules() -> None:
    policy = IgnorePolicy(["docs/"])
    path = Path("/work/node_modules/mylib/docs/site/index.md")

    assert not policy.should_skip(path, Path("index.md"))
    assert policy.should_skip(path, Path("docs/site/index.md"))
    assert not IgnorePolicy().should_skip(path, Path("index.md"))
    assert IgnorePolicy().should_skip(path, Path("node_modules/x/index.md"))


@pytest.mark.unit
def test_candidate_entry_relative_path_is_used() -> None:
    entry = CandidateEntry(
        path=Path("/work/node_modules/mylib/index.js"),
        kind=EntryKind.FILE,
        rel_path=Path("index.js"),
    )

    assert not IgnorePolicy().should_skip(entry)
    assert IgnorePolicy().should_skip(entry.model_copy(update={"rel_path": None}))
