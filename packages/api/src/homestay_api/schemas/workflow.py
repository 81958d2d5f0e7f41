# This project was developed with assistance from AI tools.
"""Request bodies and queue responses for officer workflow actions."""

from pydantic import BaseModel, Field

from . import Pagination
from .application import ApplicationResponse


class RemarksRequest(BaseModel):
    """Officer decision with remarks.

    ``expected_version`` is the application version the officer was looking
    at; a mismatch fails with 409 instead of overwriting someone's work.
    """

    remarks: str | None = Field(default=None, max_length=4000)
    expected_version: int | None = None


class SendBackRequest(BaseModel):
    reason: str = Field(max_length=4000)
    expected_version: int | None = None


class QueueResponse(BaseModel):
    """One page of an officer queue tab plus every tab's count."""

    tab: str
    data: list[ApplicationResponse]
    pagination: Pagination
    counts: dict[str, int]


class DashboardResponse(BaseModel):
    counts: dict[str, int]
