import os
from pathlib import Path

import pytest

from core.outputs import allocate_output_path, build_output_path


# =============================================================================
# allocate_output_path
# =============================================================================

@pytest.mark.parametrize("existing", [0, 1, 2, 5])
def test_first_free_suffix_is_chosen(tmp_path, existing):
    names = ["base.ext"] + [f"base-{i}.ext" for i in range(1, existing)]
    for name in names[:existing]:
        (tmp_path / name).touch()

    expected = "base.ext" if existing == 0 else f"base-{existing}.ext"
    assert allocate_output_path(tmp_path / "base.ext", overwrite=False) == tmp_path / expected


def test_overwrite_returns_input_unchanged(tmp_path):
    target = tmp_path / "clip.mp4"
    target.touch()
    (tmp_path / "clip-1.mp4").touch()

    assert allocate_output_path(target, overwrite=True) == target


def test_overwrite_with_nothing_there(tmp_path):
    assert allocate_output_path(tmp_path / "clip.mp4", overwrite=True) == tmp_path / "clip.mp4"


def test_gap_in_suffixes_is_reused(tmp_path):
    (tmp_path / "clip.mp4").touch()
    (tmp_path / "clip-2.mp4").touch()

    assert allocate_output_path(tmp_path / "clip.mp4", overwrite=False) == tmp_path / "clip-1.mp4"


def test_suffix_goes_before_last_extension(tmp_path):
    (tmp_path / "show.s01e01.mkv").touch()

    result = allocate_output_path(tmp_path / "show.s01e01.mkv", overwrite=False)
    assert result == tmp_path / "show.s01e01-1.mkv"


def test_name_without_extension(tmp_path):
    (tmp_path / "clip").touch()

    assert allocate_output_path(tmp_path / "clip", overwrite=False) == tmp_path / "clip-1"


def test_directory_counts_as_taken(tmp_path):
    (tmp_path / "clip.mp4").mkdir()

    assert allocate_output_path(tmp_path / "clip.mp4", overwrite=False) == tmp_path / "clip-1.mp4"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_dangling_symlink_counts_as_taken(tmp_path):
    (tmp_path / "clip.mp4").symlink_to(tmp_path / "gone.mp4")

    assert allocate_output_path(tmp_path / "clip.mp4", overwrite=False) == tmp_path / "clip-1.mp4"


def test_allocation_keeps_no_state(tmp_path):
    target = tmp_path / "clip.mp4"
    target.touch()

    first = allocate_output_path(target, overwrite=False)
    second = allocate_output_path(target, overwrite=False)
    assert first == second == tmp_path / "clip-1.mp4"


# =============================================================================
# build_output_path
# =============================================================================

def test_default_template_next_to_source():
    assert build_output_path(Path("/rushes/clip.mov"), "", "{name}.{ext}", "mp4") == Path("/rushes/clip.mp4")


def test_template_and_output_dir():
    result = build_output_path(Path("/rushes/clip.mov"), "/proxies", "{name}_proxy.{ext}", "m4a")
    assert result == Path("/proxies/clip_proxy.m4a")


def test_empty_template_falls_back_to_default():
    assert build_output_path(Path("/a/b.wav"), None, "", "mp4") == Path("/a/b.mp4")
