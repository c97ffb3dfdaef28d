from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class SignupRequest(BaseModel):
    """Schema for starting a signup."""
    first_name: str = Field(..., description="First name of the account holder")
    last_name: str = Field(..., description="Last name of the account holder")
    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Login password, kept in memory until compliance passes")
    company_name: str = Field(..., description="Company being onboarded")
    account_type: Literal["vendors", "clients", "admin"] = Field(..., description="Account type")


class SignupResponse(BaseModel):
    session_id: str = Field(..., description="Pending signup session identifier")
    state: str = Field(..., description="Account gate state")


class SignInRequest(BaseModel):
    email: str
    password: str


class SubmissionResponse(BaseModel):
    """Schema for returning the outcome of a document submission."""
    session_id: str
    state: str
    passed: bool
    score: float
    result: Dict[str, Any] = Field(..., description="Compliance result")
    report: Dict[str, Any] = Field(..., description="Persisted audit report")
    user: Optional[Dict[str, Any]] = Field(default=None, description="User record when the account was created")


class SweepResponse(BaseModel):
    expired: List[str] = Field(default_factory=list)
    job_id: Optional[str] = Field(default=None, description="Queued storage sweep, when ASYNC_JOBS=1")
