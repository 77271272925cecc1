# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Delivery of scan reports to external collectors."""

from sandworm.reporting.upload import ReportUploader, build_payload, compute_signature

__all__ = ["ReportUploader", "build_payload", "compute_signature"]
