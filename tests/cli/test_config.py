from __future__ import annotations

import logging
from pathlib import Path

import pytest

from workdedup.cli.config import (
    ALGORITHM_ENV,
    LOG_LEVEL_ENV,
    MAX_WORKERS_ENV,
    PROGRESS_INTERVAL_ENV,
    build_settings,
    resolve_log_level,
)
from workdedup.scanner.errors import ConfigurationError


def test_build_settings_resolves_paths(make_tree):
    root = make_tree({"w/a.txt": b"a"})

    settings = build_settings(root, Path("w"))

    assert settings.root == root.resolve()
    assert settings.work_dir == root.resolve() / "w"
    assert settings.out_dir == root.resolve() / "w.out"
    assert settings.algorithm == "md5"
    assert settings.rename is False
    assert settings.progress_interval == 100


def test_build_settings_default_out_dir_replaces_suffix(make_tree):
    root = make_tree({"w.v1/a.txt": b"a"})

    settings = build_settings(root, Path("w.v1"))

    assert settings.out_dir == root.resolve() / "w.out"


def test_build_settings_accepts_root_as_work_dir(make_tree):
    root = make_tree({"a.txt": b"a"})

    settings = build_settings(root, Path("."))

    assert settings.work_dir == root.resolve()
    assert settings.out_dir == root.resolve().with_suffix(".out")


def test_missing_root(tmp_path: Path):
    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(tmp_path / "missing", Path("w"))

    assert exc_info.value.code == "ROOT_MISSING"


def test_missing_work_dir(make_tree):
    root = make_tree({})

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, Path("nope"))

    assert exc_info.value.code == "WORK_DIR_MISSING"


def test_work_dir_outside_root(make_tree, tmp_path: Path):
    root = make_tree({})
    outside = tmp_path / "elsewhere"
    outside.mkdir()

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, Path("..") / "elsewhere")

    assert exc_info.value.code == "WORK_DIR_OUTSIDE_ROOT"

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, outside)

    assert exc_info.value.code == "WORK_DIR_OUTSIDE_ROOT"


@pytest.mark.parametrize(
    "work_dir, out_dir",
    [
        ("a/w", "."),
        ("a/w", "a/w"),
        ("a/w", "a"),
        (".", "."),
    ],
)
def test_out_dir_may_not_overlap_scan_roots(make_tree, work_dir: str, out_dir: str):
    root = make_tree({"a/w/u.txt": b"u"})

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, Path(work_dir), root / out_dir)

    assert exc_info.value.code == "OUT_DIR_CONFLICT"


def test_out_dir_may_sit_inside_work_dir(make_tree):
    root = make_tree({"w/a.txt": b"a"})

    settings = build_settings(root, Path("w"), root / "w" / "collected")

    assert settings.out_dir == root.resolve() / "w" / "collected"


def test_out_dir_may_not_be_a_file(make_tree, tmp_path: Path):
    root = make_tree({})
    blocker = tmp_path / "out.txt"
    blocker.write_text("x")

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, Path("w"), blocker)

    assert exc_info.value.code == "OUT_DIR_CONFLICT"


def test_environment_defaults(make_tree):
    root = make_tree({})
    env = {MAX_WORKERS_ENV: "3", PROGRESS_INTERVAL_ENV: "25", ALGORITHM_ENV: "SHA256"}

    settings = build_settings(root, Path("w"), env=env)

    assert settings.max_workers == 3
    assert settings.progress_interval == 25
    assert settings.algorithm == "sha256"


def test_explicit_values_override_environment(make_tree):
    root = make_tree({})
    env = {MAX_WORKERS_ENV: "3", ALGORITHM_ENV: "sha256"}

    settings = build_settings(root, Path("w"), max_workers=5, algorithm="sha1", env=env)

    assert settings.max_workers == 5
    assert settings.algorithm == "sha1"


@pytest.mark.parametrize(
    "env, code",
    [
        ({MAX_WORKERS_ENV: "many"}, "INVALID_SETTING"),
        ({MAX_WORKERS_ENV: "0"}, "INVALID_SETTING"),
        ({PROGRESS_INTERVAL_ENV: "-1"}, "INVALID_SETTING"),
        ({ALGORITHM_ENV: "crc32"}, "UNSUPPORTED_ALGORITHM"),
    ],
)
def test_invalid_environment_values(make_tree, env, code):
    root = make_tree({})

    with pytest.raises(ConfigurationError) as exc_info:
        build_settings(root, Path("w"), env=env)

    assert exc_info.value.code == code


def test_resolve_log_level():
    assert resolve_log_level(quiet=True) == logging.WARNING
    assert resolve_log_level(verbose=True) == logging.DEBUG
    assert resolve_log_level() == logging.INFO
    assert resolve_log_level(env={LOG_LEVEL_ENV: "debug"}) == logging.DEBUG
    assert resolve_log_level(env={LOG_LEVEL_ENV: "bogus"}) == logging.INFO
