"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • adapters produce and consume them
  • services orchestrate them
  • the JSON cache is simply a serialised list of TrainingOutcome objects

A finished job is a tagged union discriminated on ``status``:
ReadyClassifier or FailedClassifier.  Callers branch on the type, never on
whether an error object happens to look like a result.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


# ── Enums ──────────────────────────────────────────────────────────────────────

class ClassifierStatus(str, Enum):
    """Training status reported by the service."""
    TRAINING    = "training"
    READY       = "ready"
    FAILED      = "failed"
    UNAVAILABLE = "unavailable"   # stand-in for a transient 404 after creation

    @property
    def is_terminal(self) -> bool:
        return self in (ClassifierStatus.READY, ClassifierStatus.FAILED)


class FailurePolicy(str, Enum):
    """What the orchestrator does when a job ends in the failed state."""
    RECORD = "record"   # keep going, store a FailedClassifier
    ABORT  = "abort"    # raise JobFailedError and stop the run


# ── Input ──────────────────────────────────────────────────────────────────────

class SampleCategory(BaseModel):
    """A category directory and the labels of the archives inside it."""

    model_config = ConfigDict(frozen=True)

    name:   str
    labels: tuple[str, ...] = ()


class Combination(BaseModel):
    """One subset of a category's labels, trained as one classifier."""

    model_config = ConfigDict(frozen=True)

    category: str
    labels:   tuple[str, ...]

    @property
    def name(self) -> str:
        """Classifier name: category and labels joined with underscores."""
        return "_".join((self.category, *self.labels))


class ArchiveRef(BaseModel):
    """A sample archive and the multipart field it is uploaded under."""

    model_config = ConfigDict(frozen=True)

    category:   str
    label:      str
    field_name: str


class TrainingRequest(BaseModel):
    """Everything needed to create one classifier."""

    name:              str
    positive_examples: list[ArchiveRef] = Field(default_factory=list)
    negative_examples: Optional[ArchiveRef] = None

    @property
    def archives(self) -> list[ArchiveRef]:
        """All archives to upload, positives first."""
        if self.negative_examples is None:
            return list(self.positive_examples)
        return [*self.positive_examples, self.negative_examples]


# ── Service output ─────────────────────────────────────────────────────────────

class ClassifierDetails(BaseModel):
    """Classifier state as last reported by the training service."""

    model_config = ConfigDict(extra="ignore")

    classifier_id: str
    name:          str = ""
    status:        ClassifierStatus = ClassifierStatus.TRAINING
    created:       Optional[str] = None
    explanation:   Optional[str] = None
    classes:       list[str] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v):
        if isinstance(v, ClassifierStatus):
            return v
        v = str(v or "").strip().lower()
        # Anything the service invents beyond ready/failed is still in flight.
        if v in {s.value for s in ClassifierStatus}:
            return v
        return ClassifierStatus.TRAINING.value


# ── Run output ─────────────────────────────────────────────────────────────────

class _OutcomeBase(BaseModel):
    """Fields shared by every cached classifier entry.

    Only ``name``, ``classifier_id`` and ``status`` are required.  ``classes``
    holds plain labels for entries this package writes, or the service's
    ``{"class": label}`` objects for older cache files.  Unknown keys are
    kept so a loaded cache file saves back unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name:          str
    classifier_id: str
    category:      Optional[str] = None
    classes:       tuple[Union[str, dict[str, Any]], ...] = ()
    created:       Optional[str] = None

    @property
    def class_names(self) -> tuple[str, ...]:
        """Labels of ``classes`` whichever form they were stored in."""
        return tuple(
            c if isinstance(c, str) else str(c.get("class", ""))
            for c in self.classes
        )


class ReadyClassifier(_OutcomeBase):
    """A classifier that finished training successfully."""

    status: Literal["ready"] = "ready"


class FailedClassifier(_OutcomeBase):
    """A classifier the service reported as failed."""

    status:      Literal["failed"] = "failed"
    explanation: Optional[str] = None


TrainingOutcome = Annotated[
    Union[ReadyClassifier, FailedClassifier],
    Field(discriminator="status"),
]

# (De)serialiser for a whole result set: list[TrainingOutcome]
ResultSetAdapter: TypeAdapter[list[TrainingOutcome]] = TypeAdapter(list[TrainingOutcome])


def outcome_from_details(
    combination: Combination,
    details: ClassifierDetails,
) -> ReadyClassifier | FailedClassifier:
    """Build the terminal outcome for a combination.

    Raises:
        ValueError: If ``details`` is not in a terminal status.
    """
    common = dict(
        name=details.name or combination.name,
        classifier_id=details.classifier_id,
        category=combination.category,
        classes=combination.labels,
        created=details.created,
    )
    if details.status == ClassifierStatus.READY:
        return ReadyClassifier(**common)
    if details.status == ClassifierStatus.FAILED:
        return FailedClassifier(**common, explanation=details.explanation)
    raise ValueError(
        f"Classifier {details.classifier_id} is not terminal: {details.status.value}"
    )
