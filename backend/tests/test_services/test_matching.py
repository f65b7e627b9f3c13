from __future__ import annotations

import pytest

from qcstudio.services.matching import (
    ChapterIdentifier,
    extract_file_identifier,
    extract_identifier,
    match_prompt,
    normalize_file_name,
    split_label,
)
from tests.factories import records


class TestExtractIdentifier:
    @pytest.mark.parametrize(
        "file_name",
        [
            "scene_chap_1_2.png",
            "SCENE_CHAP_1_2.PNG",
            "chap1_2.jpg",
            "Chap 1_2.jpeg",
            "scene_chap_1_2_compressed.webp",
            "scene_Chap__1 2_COMPRESSED.png",
        ],
    )
    def test_filename_variants(self, file_name):
        assert extract_file_identifier(file_name) == ChapterIdentifier(1, 2)

    def test_no_pattern(self):
        assert extract_file_identifier("unrelated.png") is None
        assert extract_identifier("chapter one") is None
        assert extract_identifier("") is None
        assert extract_identifier(None) is None

    def test_first_match_wins(self):
        assert extract_identifier("chap_3_4 then chap_5_6") == ChapterIdentifier(3, 4)

    def test_multi_digit(self):
        assert extract_file_identifier("ep_chap_12_103.png") == ChapterIdentifier(12, 103)

    def test_leading_zeros_compare_as_integers(self):
        assert extract_identifier("chap_01_02") == extract_identifier("Chap 1_2")


class TestNormalize:
    def test_strips_compressed_and_extension(self):
        assert normalize_file_name("a_chap_1_2_Compressed.PNG") == "a_chap_1_2"

    def test_keeps_unknown_extension(self):
        assert normalize_file_name("a_chap_1_2.tiff") == "a_chap_1_2.tiff"


class TestSplitLabel:
    def test_split(self):
        assert split_label("  A hides  ||  Chap 1_2 ") == ("A hides", "Chap 1_2")

    def test_missing_delimiter(self):
        assert split_label("A hides | Chap 1_2") is None


class TestMatchPrompt:
    def test_matches_by_identifier(self):
        data = records("A hides || Chap 1_2", "B arrives || Chap_1_3")
        assert match_prompt("scene_chap_1_3.png", data) == "B arrives"

    def test_first_record_wins_on_collision(self):
        data = records("first || Chap 2_1", "second || chap_2_1")
        assert match_prompt("x_chap_2_1.png", data) == "first"

    def test_deterministic(self):
        data = records("first || Chap 2_1", "second || chap_2_1")
        results = {match_prompt("x_chap_2_1.png", data) for _ in range(5)}
        assert results == {"first"}

    def test_skips_records_without_delimiter_or_tag(self):
        data = records("no delimiter chap_1_2", "no tag || intro", "", "found || Chap 1_2")
        assert match_prompt("scene_chap_1_2.png", data) == "found"

    def test_no_identifier_in_file_name(self):
        assert match_prompt("unrelated.png", records("A || Chap 1_2")) is None

    def test_no_matching_record(self):
        assert match_prompt("scene_chap_9_9.png", records("A || Chap 1_2")) is None

    def test_empty_records(self):
        assert match_prompt("scene_chap_1_2.png", []) is None

    def test_minor_index_must_match_exactly(self):
        assert match_prompt("scene_chap_1_2.png", records("A || Chap 1_20")) is None
