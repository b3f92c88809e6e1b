"""Export endpoints for CSV/HTML/XLSX downloads."""

from __future__ import annotations

import time

from fastapi import APIRouter, HTTPException, Query, Response

from clinic_stock.core.config import get_settings
from clinic_stock.core.metrics import exports_total
from clinic_stock.services.reports import REPORTS, build_report
from clinic_stock.web.deps import CurrentUser, DBSession
from clinic_stock.web.utils import to_csv, to_html, to_xlsx

router = APIRouter()

MEDIA_TYPES = {
    "csv": "text/csv",
    "html": "text/html",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@router.get("/{report}.{fmt}")
def export_report(
    report: str,
    fmt: str,
    db: DBSession,
    user: CurrentUser,
    dispensary_id: int = Query(..., description="Dispensary ID"),
    lead_time_days: int | None = Query(None, ge=0, le=365, description="Analytics lead time"),
) -> Response:
    """Export a report as CSV, HTML or XLSX.

    Reports: stock-inventory, transactions, low-stock, expiration, analytics.
    """
    if report not in REPORTS:
        raise HTTPException(status_code=404, detail=f"Unknown report: {report}")
    if fmt not in MEDIA_TYPES:
        raise HTTPException(status_code=404, detail=f"Unsupported format: {fmt}")

    settings = get_settings()
    options = {"lead_time_days": lead_time_days} if report == "analytics" else {}
    data = build_report(db, report, dispensary_id, **options)
    rows = data.rows[: settings.export_max_rows]

    if fmt == "csv":
        content = to_csv(rows, data.columns)
    elif fmt == "html":
        content = to_html(data.title, rows, data.columns, footer=settings.report_footer)
    else:
        content = to_xlsx(rows, data.columns, sheet_name=data.title)

    exports_total.labels(report=report, fmt=fmt).inc()
    filename = f"{report}-{int(time.time() * 1000)}.{fmt}"

    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
