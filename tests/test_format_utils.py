from pathlib import Path

import pytest

from h265_transcoder.utils.format_utils import contains_any_extensions, formatted_size, size_percent


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.50 KB"),
        (2097152, "2 MB"),
    ],
)
def test_formatted_size(size, expected) -> None:
    assert formatted_size(size) == expected


def test_size_percent() -> None:
    assert size_percent(400, 1000) == 40
    assert size_percent(2, 3) == 66
    assert size_percent(10, 0) == 0


def test_contains_any_extensions() -> None:
    assert contains_any_extensions(Path("a.MKV"), [".mkv"])
    assert not contains_any_extensions(Path("a.mkv.txt"), [".mkv"])
