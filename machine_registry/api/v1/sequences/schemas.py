"""API schemas for sequence endpoints."""

from datetime import datetime

from pydantic import BaseModel, field_serializer

from machine_registry.api.v1.types import UlidStr
from machine_registry.models.sequence_config import SequenceConfig
from machine_registry.services.sequences.reformat_service import ReformatItem, ReformatReport
from machine_registry.utils.datetime_utils import to_api_timezone

# =============================================================================
# Request Schemas
# =============================================================================


class SequenceConfigCreateRequest(BaseModel):
    """Create a sequence config for a category or subcategory."""

    category_id: UlidStr
    subcategory_id: UlidStr | None = None
    prefix: str
    template: str
    starting_number: int = 1
    created_by: str | None = None


class SequenceConfigUpdateRequest(BaseModel):
    """Partial config update.

    ``reformat_existing`` rewrites identifiers of existing machines when the
    template changes; with ``background`` this is queued instead of run inline.
    """

    prefix: str | None = None
    template: str | None = None
    starting_number: int | None = None
    is_active: bool | None = None
    updated_by: str | None = None
    reformat_existing: bool = False
    background: bool = False


class SequenceResetRequest(BaseModel):
    starting_number: int
    updated_by: str | None = None


class GenerateSequenceRequest(BaseModel):
    category_id: UlidStr
    subcategory_id: UlidStr | None = None


class ReformatPreviewRequest(BaseModel):
    """Preview reformatting from ``old_template`` to ``new_template`` (default: current template)."""

    old_template: str
    new_template: str | None = None


# =============================================================================
# Response Schemas
# =============================================================================


class SequenceConfigResponse(BaseModel):
    """Sequence config response schema."""

    id: str
    category_id: str
    subcategory_id: str | None
    prefix: str
    template: str
    starting_number: int
    current_sequence: int
    is_active: bool
    created_by: str | None
    updated_by: str | None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        return to_api_timezone(dt).isoformat()

    @classmethod
    def from_model(cls, config: SequenceConfig) -> "SequenceConfigResponse":
        """Create response from SequenceConfig model."""
        return cls(
            id=config.id,
            category_id=config.category_id,
            subcategory_id=config.subcategory_id,
            prefix=config.prefix,
            template=config.template,
            starting_number=config.starting_number,
            current_sequence=config.current_sequence,
            is_active=config.is_active,
            created_by=config.created_by,
            updated_by=config.updated_by,
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class SequenceConfigListResponse(BaseModel):
    configs: list[SequenceConfigResponse]
    total: int


class ReformatItemResponse(BaseModel):
    machine_id: str
    old_identifier: str
    new_identifier: str | None
    outcome: str
    strategy: str | None
    reason: str | None

    @classmethod
    def from_item(cls, item: ReformatItem) -> "ReformatItemResponse":
        return cls(
            machine_id=item.machine_id,
            old_identifier=item.old_identifier,
            new_identifier=item.new_identifier,
            outcome=item.outcome.value,
            strategy=item.strategy.value if item.strategy else None,
            reason=item.reason,
        )


class ReformatReportResponse(BaseModel):
    """Outcome counts and per-machine details of a reformat run."""

    old_template: str
    new_template: str
    dry_run: bool
    updated: int
    unchanged: int
    undecodable: int
    failed: int
    total: int
    items: list[ReformatItemResponse]

    @classmethod
    def from_report(cls, report: ReformatReport) -> "ReformatReportResponse":
        return cls(
            old_template=report.old_template,
            new_template=report.new_template,
            dry_run=report.dry_run,
            updated=report.updated,
            unchanged=report.unchanged,
            undecodable=report.undecodable,
            failed=report.failed,
            total=report.total,
            items=[ReformatItemResponse.from_item(item) for item in report.items],
        )


class SequenceConfigUpdateResponse(BaseModel):
    """Updated config plus what happened to existing identifiers."""

    config: SequenceConfigResponse
    template_changed: bool
    reformat_queued: bool = False
    reformat: ReformatReportResponse | None = None


class GenerateSequenceResponse(BaseModel):
    sequence: str
