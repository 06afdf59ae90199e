#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssignmentAttemptResponse(BaseModel):
    vendor_id: str
    assigned_at: Optional[str]
    response: str
    responded_at: Optional[str] = None
    rejection_reason: Optional[str] = None


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: Optional[str]
    updated_by: Optional[str] = None
    notes: Optional[str] = None


class QuoteResponse(BaseModel):
    amount: float
    description: Optional[str] = None
    valid_until: Optional[str]
    quoted_at: Optional[str]
    quoted_by: str


class JobResponse(BaseModel):
    """A job with its assignment and status history."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "job_number": "JOB-20260301-0007",
                "customer_id": "550e8400-e29b-41d4-a716-446655440000",
                "title": "Fix leaking kitchen tap",
                "category": "plumbing",
                "status": "ASSIGNED",
                "vendor_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "city": "Austin",
                "state": "TX",
                "requested_date": "2026-03-02",
                "requested_start_time": "10:00",
                "requested_end_time": "11:00",
                "progress_percentage": 0,
                "version": 2
            }
        }
    )

    id: str
    job_number: str
    customer_id: str
    title: str
    category: str
    description: str
    priority: str
    is_emergency: bool
    is_support: bool
    status: str
    vendor_id: Optional[str]
    address: str
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    requested_date: Optional[str]
    requested_start_time: Optional[str]
    requested_end_time: Optional[str]
    total_amount: float
    estimated_budget: Optional[float]
    vendor_quote: Optional[QuoteResponse]
    progress_percentage: int = Field(ge=0, le=100)
    work_notes: Optional[str]
    actual_start_time: Optional[str]
    actual_end_time: Optional[str]
    actual_duration_hours: Optional[float]
    cancellation_reason: Optional[str]
    cancelled_by: Optional[str]
    cancelled_at: Optional[str]
    assignment_attempts: List[AssignmentAttemptResponse]
    status_history: List[StatusHistoryResponse]
    created_at: Optional[str]
    updated_at: Optional[str]
    version: int


class JobEnvelope(BaseModel):
    success: bool
    job: JobResponse


class SubScoreResponse(BaseModel):
    score: float = Field(ge=0, le=100)
    weight: float
    weighted: float


class VendorStatisticsResponse(BaseModel):
    total_jobs: int
    completed_jobs: int
    cancelled_jobs: int
    completion_rate: float
    avg_job_value: float
    total_revenue: float
    recent_jobs: int
    average_rating: float
    total_ratings: int
    recent_ratings: int
    experience_level: str
    reliability: int
    recent_activity: int


class VendorRecommendation(BaseModel):
    """One ranked vendor for a job."""
    vendor_id: str
    profile_id: str
    name: Optional[str]
    company_name: Optional[str]
    service_area: Optional[str]
    service_categories: List[str]
    membership_tier: str
    total_score: float = Field(ge=0, le=100)
    rationale: str
    kind: str
    score_breakdown: Dict[str, SubScoreResponse] = Field(default_factory=dict)
    statistics: Optional[VendorStatisticsResponse] = None


class RecommendationsResponse(BaseModel):
    success: bool
    job_id: str
    count: int
    vendors: List[VendorRecommendation]


class AutoAssignResponse(BaseModel):
    success: bool
    auto_assigned: bool
    job: JobResponse
    assigned_vendor: VendorRecommendation


class VendorPerformanceResponse(BaseModel):
    vendor_id: str
    vendor_name: Optional[str]
    vendor_email: Optional[str]
    total_assigned: int
    completed: int
    cancelled: int
    in_progress: int
    avg_job_value: float
    total_revenue: float
    completion_rate: float
    success_rate: float


class CategoryPerformanceResponse(BaseModel):
    category: str
    total_jobs: int
    assigned: int
    completed: int
    assignment_rate: float


class PerformanceSummaryResponse(BaseModel):
    total_vendors: int
    avg_completion_rate: float
    total_revenue: float


class VendorPerformanceReportResponse(BaseModel):
    """Assignment outcomes per vendor and per category over a recent window."""
    success: bool
    timeframe_days: int
    vendor_performance: List[VendorPerformanceResponse]
    category_performance: List[CategoryPerformanceResponse]
    summary: PerformanceSummaryResponse
