"""Main state of a learning target.

The main state is a tagged union keyed by ``(managementMode, stage)``. Every
pair has its own model class declaring exactly the fields legal for it, and
extra fields are rejected, so a state can never carry data that belongs to
another stage or mode.

    TARGET/SPROUTING     sproutingPromotionCount, lastCountIncrementedAt
    TARGET/BUDDING       consecutiveDaysData, achievedHighQualityUnitIds
    TARGET/BLOOMING      sm2Data
    TARGET/MASTERED      sm2Data
    TARGET/HALL_OF_FAME  sm2Data, masteredSlotExpiresAt
    SPLIT/SPROUTING      units, sproutingPromotionCount, lastCountIncrementedAt
    SPLIT/BUDDING        units, consecutiveDaysData, achievedHighQualityUnitIds
    SPLIT/BLOOMING       units (with SM-2), representativeUnitId
    SPLIT/MASTERED       units (with SM-2), representativeUnitId
    SPLIT/HALL_OF_FAME   units (with SM-2), representativeUnitId, masteredSlotExpiresAt
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

from bloomtrack.models.sm2 import SM2TargetData
from bloomtrack.models.streak import ConsecutiveDaysData
from bloomtrack.models.unit import Unit, UnitWithSM2


class _MainStateBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# --- Field groups shared between variants ---


class _SproutingFields(_MainStateBase):
    sproutingPromotionCount: int = Field(0, ge=0, description="Rate-limited commitment counter")
    lastCountIncrementedAt: int | None = Field(None, description="When the counter last moved")


class _BuddingFields(_MainStateBase):
    consecutiveDaysData: ConsecutiveDaysData
    achievedHighQualityUnitIds: tuple[str, ...] = Field(
        default=(), description="Units that reached quality >= 3 at least once"
    )


class _HallOfFameFields(_MainStateBase):
    masteredSlotExpiresAt: int


class _SplitUnitsFields(_MainStateBase):
    units: dict[str, Unit]

    @model_validator(mode="after")
    def _units_not_scheduled(self):
        _check_unit_keys(self.units)
        for unit in self.units.values():
            if isinstance(unit, UnitWithSM2):
                raise ValueError(f"Unit {unit.id!r} carries SM-2 data before BLOOMING")
        return self


class _SplitSM2Fields(_MainStateBase):
    units: dict[str, UnitWithSM2]
    representativeUnitId: str

    @model_validator(mode="after")
    def _representative_is_a_unit(self):
        _check_unit_keys(self.units)
        if self.representativeUnitId not in self.units:
            raise ValueError(
                f"representativeUnitId {self.representativeUnitId!r} is not one of the units"
            )
        return self


def _check_unit_keys(units: dict[str, Unit]) -> None:
    if not units:
        raise ValueError("SPLIT mode requires at least one unit")
    for key, unit in units.items():
        if key != unit.id:
            raise ValueError(f"Unit keyed {key!r} has id {unit.id!r}")


# --- TARGET mode ---


class TargetSprouting(_SproutingFields):
    managementMode: Literal["TARGET"] = "TARGET"
    stage: Literal["SPROUTING"] = "SPROUTING"


class TargetBudding(_BuddingFields):
    managementMode: Literal["TARGET"] = "TARGET"
    stage: Literal["BUDDING"] = "BUDDING"


class TargetBlooming(_MainStateBase):
    managementMode: Literal["TARGET"] = "TARGET"
    stage: Literal["BLOOMING"] = "BLOOMING"
    sm2Data: SM2TargetData


class TargetMastered(_MainStateBase):
    managementMode: Literal["TARGET"] = "TARGET"
    stage: Literal["MASTERED"] = "MASTERED"
    sm2Data: SM2TargetData


class TargetHallOfFame(_HallOfFameFields):
    managementMode: Literal["TARGET"] = "TARGET"
    stage: Literal["HALL_OF_FAME"] = "HALL_OF_FAME"
    sm2Data: SM2TargetData


# --- SPLIT mode ---


class SplitSprouting(_SplitUnitsFields, _SproutingFields):
    managementMode: Literal["SPLIT"] = "SPLIT"
    stage: Literal["SPROUTING"] = "SPROUTING"


class SplitBudding(_SplitUnitsFields, _BuddingFields):
    managementMode: Literal["SPLIT"] = "SPLIT"
    stage: Literal["BUDDING"] = "BUDDING"


class SplitBlooming(_SplitSM2Fields):
    managementMode: Literal["SPLIT"] = "SPLIT"
    stage: Literal["BLOOMING"] = "BLOOMING"


class SplitMastered(_SplitSM2Fields):
    managementMode: Literal["SPLIT"] = "SPLIT"
    stage: Literal["MASTERED"] = "MASTERED"


class SplitHallOfFame(_SplitSM2Fields, _HallOfFameFields):
    managementMode: Literal["SPLIT"] = "SPLIT"
    stage: Literal["HALL_OF_FAME"] = "HALL_OF_FAME"


def _main_state_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        mode, stage = value.get("managementMode"), value.get("stage")
    else:
        mode, stage = getattr(value, "managementMode", None), getattr(value, "stage", None)
    if mode is None or stage is None:
        return None
    return f"{mode}:{stage}"


MainState = Annotated[
    Union[
        Annotated[TargetSprouting, Tag("TARGET:SPROUTING")],
        Annotated[TargetBudding, Tag("TARGET:BUDDING")],
        Annotated[TargetBlooming, Tag("TARGET:BLOOMING")],
        Annotated[TargetMastered, Tag("TARGET:MASTERED")],
        Annotated[TargetHallOfFame, Tag("TARGET:HALL_OF_FAME")],
        Annotated[SplitSprouting, Tag("SPLIT:SPROUTING")],
        Annotated[SplitBudding, Tag("SPLIT:BUDDING")],
        Annotated[SplitBlooming, Tag("SPLIT:BLOOMING")],
        Annotated[SplitMastered, Tag("SPLIT:MASTERED")],
        Annotated[SplitHallOfFame, Tag("SPLIT:HALL_OF_FAME")],
    ],
    Discriminator(_main_state_tag),
]

# Groupings used when deciding which fields a state can hand over
SPROUTING_STATES = (TargetSprouting, SplitSprouting)
BUDDING_STATES = (TargetBudding, SplitBudding)
TARGET_SM2_STATES = (TargetBlooming, TargetMastered, TargetHallOfFame)
SPLIT_SM2_STATES = (SplitBlooming, SplitMastered, SplitHallOfFame)
HALL_OF_FAME_STATES = (TargetHallOfFame, SplitHallOfFame)
SPLIT_STATES = (SplitSprouting, SplitBudding) + SPLIT_SM2_STATES
