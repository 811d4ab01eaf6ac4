"""Sequence config API endpoints."""

import structlog
from fastapi import APIRouter, Response, status

from machine_registry.api.v1.dependencies import ConfigServiceDep, ReformatServiceDep
from machine_registry.api.v1.sequences.schemas import (
    ReformatPreviewRequest,
    ReformatReportResponse,
    SequenceConfigCreateRequest,
    SequenceConfigListResponse,
    SequenceConfigResponse,
    SequenceConfigUpdateRequest,
    SequenceConfigUpdateResponse,
    SequenceResetRequest,
)
from machine_registry.api.v1.types import UlidStr
from machine_registry.services.sequences.config_service import SequenceConfigChanges
from machine_registry.services.sequences.scope import SequenceScope
from machine_registry.tasks.sequences.reformat_identifiers import reformat_identifiers

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["sequence-configs"])


@router.get("/sequence-configs", response_model=SequenceConfigListResponse, operation_id="listSequenceConfigs")
async def list_sequence_configs(service: ConfigServiceDep) -> SequenceConfigListResponse:
    """List all sequence configs, newest first."""
    configs = await service.list_configs()
    return SequenceConfigListResponse(
        configs=[SequenceConfigResponse.from_model(config) for config in configs],
        total=len(configs),
    )


@router.post(
    "/sequence-configs",
    response_model=SequenceConfigResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createSequenceConfig",
)
async def create_sequence_config(
    body: SequenceConfigCreateRequest,
    service: ConfigServiceDep,
) -> SequenceConfigResponse:
    config = await service.create(
        SequenceScope(body.category_id, body.subcategory_id),
        prefix=body.prefix,
        template=body.template,
        starting_number=body.starting_number,
        created_by=body.created_by,
    )
    return SequenceConfigResponse.from_model(config)


@router.get("/sequence-configs/lookup", response_model=SequenceConfigResponse, operation_id="lookupSequenceConfig")
async def lookup_sequence_config(
    service: ConfigServiceDep,
    category_id: UlidStr,
    subcategory_id: UlidStr | None = None,
) -> SequenceConfigResponse:
    """Get the config bound to exactly this category/subcategory (no fallback)."""
    config = await service.get_for_scope(SequenceScope(category_id, subcategory_id))
    return SequenceConfigResponse.from_model(config)


@router.get("/sequence-configs/{config_id}", response_model=SequenceConfigResponse, operation_id="getSequenceConfig")
async def get_sequence_config(config_id: UlidStr, service: ConfigServiceDep) -> SequenceConfigResponse:
    config = await service.get(config_id)
    return SequenceConfigResponse.from_model(config)


@router.patch(
    "/sequence-configs/{config_id}",
    response_model=SequenceConfigUpdateResponse,
    operation_id="updateSequenceConfig",
)
async def update_sequence_config(
    config_id: UlidStr,
    body: SequenceConfigUpdateRequest,
    service: ConfigServiceDep,
    reformat_service: ReformatServiceDep,
) -> SequenceConfigUpdateResponse:
    """Update a config.

    Existing identifiers are only rewritten when ``reformat_existing`` is set
    and the template actually changed.
    """
    result = await service.update(
        config_id,
        SequenceConfigChanges(
            prefix=body.prefix,
            template=body.template,
            starting_number=body.starting_number,
            is_active=body.is_active,
            updated_by=body.updated_by,
        ),
    )
    response = SequenceConfigUpdateResponse(
        config=SequenceConfigResponse.from_model(result.config),
        template_changed=result.template_changed,
    )
    if not (body.reformat_existing and result.template_changed):
        return response

    if body.background:
        # Dispatch after the config update is committed
        reformat_identifiers.send(result.config.id, result.previous_template)
        logger.info("Queued identifier reformat", config_id=result.config.id)
        response.reformat_queued = True
    else:
        report = await reformat_service.reformat(result.config, result.previous_template)
        response.reformat = ReformatReportResponse.from_report(report)
    return response


@router.post(
    "/sequence-configs/{config_id}/reset",
    response_model=SequenceConfigResponse,
    operation_id="resetSequence",
)
async def reset_sequence(
    config_id: UlidStr,
    body: SequenceResetRequest,
    service: ConfigServiceDep,
) -> SequenceConfigResponse:
    """Restart numbering at ``starting_number``."""
    config = await service.reset(config_id, body.starting_number, updated_by=body.updated_by)
    return SequenceConfigResponse.from_model(config)


@router.delete(
    "/sequence-configs/{config_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteSequenceConfig",
)
async def delete_sequence_config(config_id: UlidStr, service: ConfigServiceDep) -> Response:
    await service.delete(config_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/sequence-configs/{config_id}/reformat-preview",
    response_model=ReformatReportResponse,
    operation_id="previewReformat",
)
async def preview_reformat(
    config_id: UlidStr,
    body: ReformatPreviewRequest,
    service: ConfigServiceDep,
    reformat_service: ReformatServiceDep,
) -> ReformatReportResponse:
    """Show what reformatting existing identifiers would do, without writing."""
    config = await service.get(config_id)
    report = await reformat_service.reformat(config, body.old_template, body.new_template, dry_run=True)
    return ReformatReportResponse.from_report(report)
