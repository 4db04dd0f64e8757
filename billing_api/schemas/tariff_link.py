from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, StrictInt
from pydantic.config import ConfigDict

from billing_api.schemas.common import ErrorDetail

class UpdatedByUser(BaseModel):
    id: int
    login: str

class TariffLink(BaseModel):
    id: int
    account_id: int
    tariff_id: int
    version: int
    updated_at: datetime
    updated_by: Optional[int] = None
    updated_by_user: Optional[UpdatedByUser] = None

    model_config = ConfigDict(from_attributes=True)

class TariffLinkUpdateRequest(BaseModel):
    # Strict: JSON booleans and numeric strings are rejected, not coerced.
    # Range checks are enforced by TariffAssignmentService so that every
    # offending field is reported together with a 400.
    tariff_id: StrictInt
    version: StrictInt = Field(..., description="Version the caller last observed")


# --- 409 conflict payload ---

class ConflictServerData(BaseModel):
    id: int
    account_id: int
    tariff_id: int

class ConflictServerMeta(BaseModel):
    version: int
    updated_at: datetime
    updated_by: Optional[UpdatedByUser] = None

class ConflictServerState(BaseModel):
    data: ConflictServerData
    meta: ConflictServerMeta

class ConflictClientData(BaseModel):
    tariff_id: int

class ConflictClientMeta(BaseModel):
    expected_version: int

class ConflictClientState(BaseModel):
    data: ConflictClientData
    meta: ConflictClientMeta

class TariffLinkConflict(BaseModel):
    server: ConflictServerState
    client: ConflictClientState

class TariffLinkConflictEnvelope(TariffLinkConflict):
    """OpenAPI shape of the 409 response body."""

    error: ErrorDetail
