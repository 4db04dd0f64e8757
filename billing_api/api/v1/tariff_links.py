from fastapi import APIRouter, Depends

from billing_api.api import deps
from billing_api.core.auth.permissions import Feature
from billing_api.core.tariffs.service import TariffAssignmentService, UpdateIntent
from billing_api.db.models.operator import Operator
from billing_api.schemas.common import ErrorEnvelope
from billing_api.schemas.tariff_link import TariffLink, TariffLinkConflictEnvelope, TariffLinkUpdateRequest

router = APIRouter()

_read_responses = {404: {"model": ErrorEnvelope}}


@router.get("/tariff-links/{id}", response_model=TariffLink, responses=_read_responses)
async def get_tariff_link(
    id: int,
    _: Operator = Depends(deps.require_permission(Feature.TARIFFS_READ)),
    service: TariffAssignmentService = Depends(deps.get_tariff_assignment_service),
):
    return await service.get(id)


@router.patch(
    "/tariff-links/{id}",
    response_model=TariffLink,
    responses={
        400: {"model": ErrorEnvelope},
        404: {"model": ErrorEnvelope},
        409: {"model": TariffLinkConflictEnvelope},
    },
)
async def change_tariff_link(
    id: int,
    data: TariffLinkUpdateRequest,
    current_operator: Operator = Depends(deps.require_permission(Feature.TARIFFS_UPDATE)),
    service: TariffAssignmentService = Depends(deps.get_tariff_assignment_service),
):
    intent = UpdateIntent(
        link_id=id,
        requested_tariff_id=data.tariff_id,
        expected_version=data.version,
        acting_operator_id=current_operator.id,
        acting_operator_login=current_operator.login,
    )
    return await service.change_tariff(intent)


@router.get("/accounts/{account_id}/tariff-link", response_model=TariffLink, responses=_read_responses)
async def get_account_tariff_link(
    account_id: int,
    _: Operator = Depends(deps.require_permission(Feature.TARIFFS_READ)),
    service: TariffAssignmentService = Depends(deps.get_tariff_assignment_service),
):
    return await service.get_by_account(account_id)
