#!/usr/bin/env python3
"""
Matching Module - vendor recommendation and auto-assignment.

- models.py: Vendor, VendorStatistics, ScoreRecord
- categories.py: job category -> acceptable vendor categories
- statistics.py: per-vendor statistics with per-source failure isolation
- availability.py: schedule overlap and workload discount
- scoring.py: the eight sub-scores, weighted total and rationale
- ranking.py: availability filter, ranking, fallback record
- service.py: VendorMatchingService.find_best_vendors
- orchestrator.py: AssignmentOrchestrator.auto_assign_job

Only the data structures are re-exported here; the services import
``core.interfaces``, which imports these models.
"""

from core.matching.models import ScoreRecord, Vendor, VendorStatistics

__all__ = ['ScoreRecord', 'Vendor', 'VendorStatistics']
