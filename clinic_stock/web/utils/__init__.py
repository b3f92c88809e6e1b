"""Web utilities."""

from __future__ import annotations

from clinic_stock.web.utils.exporters import to_csv, to_html, to_xlsx

__all__ = ["to_csv", "to_html", "to_xlsx"]
