"""Declarative exchange schemas and the generic structural validator.

Each source tag maps to one pydantic model in :data:`SCHEMAS`. The
models are the rule sets (field name, type, required/default); the
single :func:`validate` function interprets any of them, so a new source
type only needs a model and a :func:`register_schema` call.

Wire field names are camelCase (``categoryIds``, ``initiativeType``);
Python attributes are snake_case via ``alias_generator``. Unknown keys
are rejected and scalars are never coerced, so format drift fails loudly.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, ClassVar, Literal, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ctdata.domain.errors import FieldIssue, ValidationError
from ctdata.domain.types import ExportSource, InitiativeType

RecordId = Annotated[str, StringConstraints(strict=True, pattern=r"^[A-Za-z0-9_-]+$")]
NonEmptyName = Annotated[str, StringConstraints(strict=True, min_length=1)]
NonNegativeInt = Annotated[StrictInt, Field(ge=0)]

ENCOUNTER_RECORD_ID = "current"


class ExchangeModel(BaseModel):
    """Base for every record and state model carried in an envelope."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump using wire (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


class ExchangeState(ExchangeModel):
    """A complete domain payload that maps onto store collections."""

    COLLECTIONS: ClassVar[tuple[str, ...]] = ()

    def to_collections(self) -> dict[str, list[dict[str, Any]]]:
        """Split the state into ``{collection: records}`` for the store."""
        raise NotImplementedError

    @classmethod
    def from_collections(cls, records: Mapping[str, Sequence[Mapping[str, Any]]]) -> Self:
        """Rebuild a state from store collections (inverse of ``to_collections``)."""
        raise NotImplementedError


def _require_unique_ids(records: list[Any]) -> list[Any]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for record in records:
        record_id = record.id
        if record_id in seen and record_id not in duplicates:
            duplicates.append(record_id)
        seen.add(record_id)
    if duplicates:
        msg = f"duplicate ids: {', '.join(duplicates)}"
        raise ValueError(msg)
    return records


# --- Library ---


class Category(ExchangeModel):
    """A library grouping for creatures."""

    id: RecordId
    name: NonEmptyName


class Creature(ExchangeModel):
    """A reusable creature template.

    ``initiative`` is the final score for ``fixed``/``flat`` creatures and
    a modifier for ``roll`` creatures, so it may be negative.
    ``category_ids`` are weak references and may dangle.
    """

    id: RecordId
    name: NonEmptyName
    initiative_type: InitiativeType
    initiative: StrictInt
    hp: NonNegativeInt = 0
    category_ids: list[StrictStr] = Field(default_factory=list)


class LibraryState(ExchangeState):
    """Creature library: categories plus creatures."""

    COLLECTIONS: ClassVar[tuple[str, ...]] = ("categories", "creatures")

    categories: list[Category] = Field(default_factory=list)
    creatures: list[Creature] = Field(default_factory=list)

    @field_validator("categories", "creatures")
    @classmethod
    def _unique_ids(cls, records: list[Any]) -> list[Any]:
        return _require_unique_ids(records)

    def to_collections(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "categories": [c.to_wire() for c in self.categories],
            "creatures": [c.to_wire() for c in self.creatures],
        }

    @classmethod
    def from_collections(cls, records: Mapping[str, Sequence[Mapping[str, Any]]]) -> Self:
        return cls.model_validate(
            {
                "categories": list(records.get("categories", [])),
                "creatures": list(records.get("creatures", [])),
            }
        )

    def dangling_category_ids(self, known: set[str]) -> list[str]:
        """Category ids referenced by creatures but absent from this state and *known*."""
        available = known | {c.id for c in self.categories}
        dangling: list[str] = []
        for creature in self.creatures:
            for category_id in creature.category_ids:
                if category_id not in available and category_id not in dangling:
                    dangling.append(category_id)
        return dangling


# --- Combat ---


class FixedCombatant(ExchangeModel):
    """Combatant whose initiative is a resolved, non-negative score."""

    id: RecordId
    name: StrictStr
    initiative_type: Literal["fixed"]
    initiative: NonNegativeInt = 0
    hp: NonNegativeInt = 0
    max_hp: NonNegativeInt = 0


class RolledCombatant(ExchangeModel):
    """Combatant whose initiative is still a modifier awaiting a d20 roll."""

    id: RecordId
    name: StrictStr
    initiative_type: Literal["roll"]
    initiative: StrictInt = 0
    hp: NonNegativeInt = 0
    max_hp: NonNegativeInt = 0


Combatant = Annotated[FixedCombatant | RolledCombatant, Field(discriminator="initiative_type")]


class CombatState(ExchangeState):
    """A live encounter: counters plus the ordered combatant list."""

    COLLECTIONS: ClassVar[tuple[str, ...]] = ("combatants", "encounter")

    in_combat: StrictBool
    round: NonNegativeInt = 0
    step: NonNegativeInt = 0
    combatants: list[Combatant] = Field(default_factory=list)

    @field_validator("combatants")
    @classmethod
    def _unique_ids(cls, records: list[Any]) -> list[Any]:
        return _require_unique_ids(records)

    def to_collections(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "combatants": [c.to_wire() for c in self.combatants],
            "encounter": [
                {
                    "id": ENCOUNTER_RECORD_ID,
                    "inCombat": self.in_combat,
                    "round": self.round,
                    "step": self.step,
                }
            ],
        }

    @classmethod
    def from_collections(cls, records: Mapping[str, Sequence[Mapping[str, Any]]]) -> Self:
        counters: dict[str, Any] = {"inCombat": False}
        for row in records.get("encounter", []):
            if row.get("id") == ENCOUNTER_RECORD_ID:
                counters.update({k: v for k, v in row.items() if k != "id"})
        return cls.model_validate({**counters, "combatants": list(records.get("combatants", []))})


# --- Registry + generic validator ---

SCHEMAS: dict[str, type[ExchangeState]] = {
    ExportSource.LIBRARY: LibraryState,
    ExportSource.COMBAT: CombatState,
}


def register_schema(source: str, model: type[ExchangeState]) -> None:
    """Register (or replace) the state model for *source*."""
    SCHEMAS[str(source)] = model


def schema_for(source: str) -> type[ExchangeState]:
    """Return the state model for *source*.

    Raises:
        KeyError: If no schema is registered for *source*.
    """
    try:
        return SCHEMAS[str(source)]
    except KeyError:
        msg = f"No exchange schema registered for source {source!r}"
        raise KeyError(msg) from None


def known_sources() -> list[str]:
    """Source tags with a registered schema, in registration order."""
    return list(SCHEMAS)


def validate(value: Any, source: str) -> ExchangeState:
    """Validate a decoded payload against the schema for *source*.

    Every violation is collected in one pass and reported together.

    Raises:
        ValidationError: With one :class:`FieldIssue` per violation.
    """
    model = schema_for(source)
    try:
        return model.model_validate(value)
    except PydanticValidationError as exc:
        raise ValidationError(_issues_from(exc)) from exc


def _issues_from(exc: PydanticValidationError) -> list[FieldIssue]:
    return [
        FieldIssue(path=_format_loc(err["loc"]), message=err["msg"])
        for err in exc.errors(include_url=False)
    ]


def _format_loc(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic location tuple as ``creatures.0.name``."""
    return ".".join(str(part) for part in loc) or "(root)"


def source_of(state: ExchangeState) -> str:
    """Source tag whose schema produced *state*.

    Raises:
        KeyError: If the state's type is not registered.
    """
    for source, model in SCHEMAS.items():
        if type(state) is model:
            return str(source)
    msg = f"No exchange source registered for {type(state).__name__}"
    raise KeyError(msg)


def load_state(source: str, records: Mapping[str, Sequence[Mapping[str, Any]]]) -> ExchangeState:
    """Rebuild the state for *source* from store collections.

    Stored records go through the same rules as imported ones, so a
    corrupted store is reported rather than exported.

    Raises:
        ValidationError: If the stored records violate the schema.
    """
    model = schema_for(source)
    try:
        return model.from_collections(records)
    except PydanticValidationError as exc:
        raise ValidationError(_issues_from(exc)) from exc
