"""Source tags, initiative kinds, and import stages.

The source tag travels inside every envelope so an importer can refuse
an artifact that belongs to a different domain before validating it.
"""

from __future__ import annotations

from enum import StrEnum


class ExportSource(StrEnum):
    """Domain an exchange artifact belongs to."""

    LIBRARY = "library"
    COMBAT = "combat"


class InitiativeType(StrEnum):
    """How a creature's ``initiative`` value is interpreted.

    ``flat`` is a legacy spelling of ``fixed`` and is kept verbatim.
    """

    FIXED = "fixed"
    FLAT = "flat"
    ROLL = "roll"


class ImportStage(StrEnum):
    """Stages of a single import attempt, in pipeline order."""

    IDLE = "idle"
    DECODING = "decoding"
    VERIFYING = "verifying"
    SOURCE_CHECKING = "source_checking"
    VALIDATING = "validating"
    MERGING = "merging"
    COMMITTED = "committed"
    REJECTED = "rejected"


class RejectionKind(StrEnum):
    """Terminal rejection reasons, one per error class."""

    DECODE = "decode"
    INTEGRITY = "integrity"
    SOURCE_MISMATCH = "source_mismatch"
    SCHEMA = "schema"
    STORAGE = "storage"
