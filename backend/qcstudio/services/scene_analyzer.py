"""从 prompt 文本推断场景与角色

关键词之间并不互斥（同一段 prompt 可能同时出现 "vip" 和 "hospital"），
下面各列表的先后顺序就是消歧规则，调整顺序会改变输出。
"""
from __future__ import annotations

from dataclasses import dataclass, field

from qcstudio.schemas.review import CharacterName, Outfit, SceneSetting

GENERIC_SETTING: SceneSetting = "generic"
DEFAULT_OUTFIT: Outfit = "default"

# (关键词, 场景)，按优先级排列
SETTING_RULES: list[tuple[tuple[str, ...], SceneSetting]] = [
    (("vip",), "hospital_vip"),
    (("hospital", "rumah sakit"), "hospital_regular"),
    (("living", "ruang tamu"), "apartment_living_room"),
    (("bedroom", "kamar tidur"), "apartment_bedroom"),
]

OUTFIT_RULES: list[tuple[tuple[str, ...], Outfit]] = [
    (("baju pasien", "patient"), "patient"),
    (("formal",), "formal"),
    (("casual",), "casual"),
    (("santai",), "santai"),
]

# (小写关键词, 角色名, 是否检测服装)；输出顺序固定为此顺序
CHARACTER_RULES: list[tuple[str, CharacterName, bool]] = [
    ("mc", "MC", True),
    ("raka", "Raka", True),
    ("alina", "Alina", True),
    ("aruna", "Aruna", False),
]


@dataclass(frozen=True)
class CharacterRef:
    name: CharacterName
    outfit: Outfit = DEFAULT_OUTFIT


@dataclass
class SceneAnalysis:
    setting: SceneSetting = GENERIC_SETTING
    characters: list[CharacterRef] = field(default_factory=list)


def _first_rule(text: str, rules, fallback):
    for keywords, value in rules:
        if any(k in text for k in keywords):
            return value
    return fallback


def detect_setting(prompt: str | None) -> SceneSetting:
    if not prompt:
        return GENERIC_SETTING
    return _first_rule(prompt.lower(), SETTING_RULES, GENERIC_SETTING)


def detect_outfit(prompt: str | None) -> Outfit:
    if not prompt:
        return DEFAULT_OUTFIT
    return _first_rule(prompt.lower(), OUTFIT_RULES, DEFAULT_OUTFIT)


def detect_characters(prompt: str | None) -> list[CharacterRef]:
    """按固定顺序返回出现的角色，每个角色最多一次"""
    if not prompt:
        return []
    text = prompt.lower()
    outfit = detect_outfit(text)

    characters: list[CharacterRef] = []
    for keyword, name, uses_outfit in CHARACTER_RULES:
        if keyword in text:
            characters.append(CharacterRef(name=name, outfit=outfit if uses_outfit else DEFAULT_OUTFIT))
    return characters


def analyze_scene(prompt: str | None) -> SceneAnalysis:
    return SceneAnalysis(setting=detect_setting(prompt), characters=detect_characters(prompt))
