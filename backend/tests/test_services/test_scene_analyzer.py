from __future__ import annotations

import pytest

from qcstudio.services.scene_analyzer import (
    CharacterRef,
    analyze_scene,
    detect_characters,
    detect_outfit,
    detect_setting,
)


class TestDetectSetting:
    def test_vip_precedes_hospital(self):
        assert detect_setting("VIP room in the hospital") == "hospital_vip"

    @pytest.mark.parametrize(
        "prompt,expected",
        [
            ("A hospital corridor", "hospital_regular"),
            ("Lorong rumah sakit", "hospital_regular"),
            ("Cozy living room", "apartment_living_room"),
            ("Di ruang tamu", "apartment_living_room"),
            ("Dark BEDROOM at night", "apartment_bedroom"),
            ("Kamar tidur Alina", "apartment_bedroom"),
            ("A rooftop at dusk", "generic"),
            ("", "generic"),
            (None, "generic"),
        ],
    )
    def test_settings(self, prompt, expected):
        assert detect_setting(prompt) == expected

    def test_hospital_precedes_living(self):
        assert detect_setting("hospital living area") == "hospital_regular"


class TestDetectOutfit:
    @pytest.mark.parametrize(
        "prompt,expected",
        [
            ("wearing baju pasien", "patient"),
            ("patient gown, formal visitor", "patient"),
            ("formal and casual", "formal"),
            ("casual santai", "casual"),
            ("pakaian santai", "santai"),
            ("nothing special", "default"),
        ],
    )
    def test_priority(self, prompt, expected):
        assert detect_outfit(prompt) == expected


class TestDetectCharacters:
    def test_fixed_order_with_shared_outfit(self):
        assert detect_characters("MC and Raka in formal") == [
            CharacterRef("MC", "formal"),
            CharacterRef("Raka", "formal"),
        ]

    def test_order_independent_of_text_order(self):
        names = [c.name for c in detect_characters("Alina hugs Raka while MC watches")]
        assert names == ["MC", "Raka", "Alina"]

    def test_aruna_always_default(self):
        assert detect_characters("Aruna and Alina in casual") == [
            CharacterRef("Alina", "casual"),
            CharacterRef("Aruna", "default"),
        ]

    def test_no_duplicates(self):
        assert detect_characters("Raka, raka, RAKA") == [CharacterRef("Raka", "default")]

    def test_empty(self):
        assert detect_characters("A quiet street") == []
        assert detect_characters("") == []

    def test_substring_match_is_not_word_bound(self):
        # "mc" 作为子串出现即视为 MC
        assert detect_characters("McDonald's sign")[0].name == "MC"


def test_analyze_scene_bundles_both():
    analysis = analyze_scene("MC in baju pasien at VIP hospital")
    assert analysis.setting == "hospital_vip"
    assert analysis.characters == [CharacterRef("MC", "patient")]
