#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from datetime import date as calendar_date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from core.jobs.models import JobPriority, JobStatus

_CLOCK = r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$'


class LocationRequest(BaseModel):
    address: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class TimeSlotRequest(BaseModel):
    date: calendar_date
    start_time: str = Field(default="09:00", pattern=_CLOCK)
    end_time: str = Field(default="17:00", pattern=_CLOCK)


class CreateJobRequest(BaseModel):
    """Request to create a maintenance job."""
    customer_id: str
    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: str = ""
    location: LocationRequest = Field(default_factory=LocationRequest)
    requested_time_slot: Optional[TimeSlotRequest] = None
    priority: JobPriority = JobPriority.MEDIUM
    total_amount: float = Field(default=0.0, ge=0)
    estimated_budget: Optional[float] = Field(None, ge=0)


class SupportRequest(BaseModel):
    customer_id: str
    description: str = Field(..., min_length=1)


class AssignRequest(BaseModel):
    """Manually offer a job to a vendor (vendor's user id)."""
    vendor_id: str
    actor: Optional[str] = None


class VendorResponseRequest(BaseModel):
    vendor_id: str
    response: Literal["ACCEPTED", "REJECTED"]
    reason: Optional[str] = None


class QuoteRequest(BaseModel):
    vendor_id: str
    amount: float = Field(..., ge=0)
    description: Optional[str] = None
    valid_until: Optional[datetime] = None


class QuoteResponseRequest(BaseModel):
    response: Literal["QUOTE_ACCEPTED", "QUOTE_REJECTED"]
    actor: Optional[str] = None


class CancelRequest(BaseModel):
    actor: Optional[str] = None
    reason: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: JobStatus
    actor: Optional[str] = None
    notes: Optional[str] = None


class ProgressUpdateRequest(BaseModel):
    """Progress outside 0-100 is clamped, not rejected."""
    percentage: int
    notes: Optional[str] = None
