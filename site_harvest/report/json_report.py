# site_harvest/report/json_report.py

"""
Генерация JSON-отчёта для проекта SiteHarvest.

Сериализация объекта CrawlReport в файл.
"""
import json
from pathlib import Path

from site_harvest.aggregator import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект CrawlReport с результатами обхода
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела (иначе компактная запись)
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_harvest.report.json_report import render_json
    report_path = render_json(report, 'reports/report.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {
        'seed_url': report.seed_url,
        'site_id': report.site_id,
        'stats': report.stats,
        'pages': report.pages,
    }

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
