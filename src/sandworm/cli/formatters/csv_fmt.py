# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""CSV output formatter."""

from __future__ import annotations

import csv
import io

from sandworm.models.scan import ScanResult

CSV_COLUMNS = ("type", "severity", "package", "version", "path", "root")


def format_csv(result: ScanResult) -> str:
    """Return one CSV row per finding, in report order."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for f in result.findings:
        writer.writerow(
            [f.finding_type, f.severity, f.package_name, f.version or "", f.path, f.root_label]
        )
    return buf.getvalue()
