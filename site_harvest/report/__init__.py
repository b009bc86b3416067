"""site_harvest.report: генерация отчётов (JSON и HTML), используемая CLI и тестами."""

from site_harvest.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from site_harvest.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
