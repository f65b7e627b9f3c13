from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ReviewStatus = Literal["pending", "approved", "rejected"]
ReviewView = Literal["dashboard", "qc", "extraction", "retry"]
CharacterName = Literal["MC", "Raka", "Alina", "Aruna"]
Outfit = Literal["default", "patient", "casual", "formal", "santai"]
SceneSetting = Literal[
    "hospital_vip",
    "hospital_regular",
    "apartment_living_room",
    "apartment_bedroom",
    "generic",
]


class PromptRecord(BaseModel):
    """prompt 数据集中的一条记录，格式 ``"<prompt> || <chapter tag>"``"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    output_ai: str = Field(default="", alias="outputAi")

    @field_validator("output_ai", mode="before")
    @classmethod
    def _none_as_empty(cls, v: object) -> object:
        return "" if v is None else v


class ReviewItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    source_url: str
    previous_url: str | None
    prompt: str
    original_prompt: str
    status: ReviewStatus
    setting: str | None


class ReviewItemUpdate(BaseModel):
    prompt: str


class ReviewStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    approved: int
    rejected: int
    pending: int


class ReviewStateRead(BaseModel):
    view: ReviewView
    active_index: int
    current: ReviewItemRead | None
    stats: ReviewStatsRead
    compare_mode: bool
    prompt_count: int


class SelectRequest(BaseModel):
    index: int = Field(ge=0)


class CharacterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: CharacterName
    outfit: Outfit


class SceneAnalysisRead(BaseModel):
    item_id: int
    setting: SceneSetting
    detected: list[CharacterRead]
    # 叠加了服装覆盖后的最终角色列表（即重新生成时提交的内容）
    resolved: list[CharacterRead]


class PromptDatasetRead(BaseModel):
    count: int
    records: list[PromptRecord]


class PromptLoadResponse(BaseModel):
    loaded: int
    rematched: int


class OutfitOverrideUpdate(BaseModel):
    outfit: Outfit


class OutfitOverridesRead(BaseModel):
    overrides: dict[CharacterName, Outfit]


class ComparisonRead(BaseModel):
    enabled: bool
    item_id: int | None
    before_url: str | None
    after_url: str | None
    split: float
    dragging: bool
    before_fraction: float
    after_fraction: float


class PointerEvent(BaseModel):
    event: Literal["down", "move", "up"]
    x: float = 0.0
    surface_left: float = 0.0
    surface_width: float = 0.0
