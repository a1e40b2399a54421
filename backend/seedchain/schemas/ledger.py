"""Ledger Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Every integer is unsigned and bounded by MAX_UINT
    - Project name / description bounded by MAX_PROJECT_NAME_LENGTH / MAX_PROJECT_DESCRIPTION_LENGTH
    - InvestRequest.amount allows 0 so the ledger itself reports INVALID_AMOUNT
    - ProjectCreate.name is stripped and must be non-empty; description may be empty

Design Decisions:
    - Bounds live here, not in the core: the ledger's failure taxonomy is fixed,
      malformed requests are a 400 VALIDATION_ERROR from the API layer
    - Non-empty project name is an API-boundary rule only: the ledger core accepts
      any name within the length bound, but a project listed to investors over HTTP
      needs a displayable name (ADR: the core stays permissive, the surface is strict)
"""

from pydantic import BaseModel, Field, field_validator

from seedchain.core.domain_types import (
    MAX_PROJECT_DESCRIPTION_LENGTH, MAX_PROJECT_NAME_LENGTH, MAX_UINT,
)


class InitializeRequest(BaseModel):
    new_administrator: str = Field(min_length=1, max_length=128)
    target: int = Field(ge=0, le=MAX_UINT)
    deadline: int = Field(ge=0, le=MAX_UINT)


class ProjectCreate(BaseModel):
    project_id: int = Field(ge=0, le=MAX_UINT)
    name: str = Field(min_length=1, max_length=MAX_PROJECT_NAME_LENGTH)
    description: str = Field(max_length=MAX_PROJECT_DESCRIPTION_LENGTH)
    target_amount: int = Field(ge=0, le=MAX_UINT)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class InvestRequest(BaseModel):
    amount: int = Field(ge=0, le=MAX_UINT)


class ProjectResponse(BaseModel):
    project_id: int
    name: str
    description: str
    target_amount: int
    current_amount: int
    status: str


class InvestmentResponse(BaseModel):
    investor: str
    project_id: int
    amount: int
    investment_date: int


class CampaignResponse(BaseModel):
    administrator: str
    target: int
    deadline: int
    raised: int
    active: bool
    status: str
    project_count: int
    investment_count: int
