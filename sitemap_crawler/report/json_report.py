# sitemap_crawler/report/json_report.py

"""
JSON report generation.

Serializes rank-ordered PageOutcomes into ``results.json``.
"""
import json
from pathlib import Path
from typing import Sequence

from sitemap_crawler.crawler.models import PageOutcome

REPORT_FILENAME = "results.json"


def render_json(outcomes: Sequence[PageOutcome], output_path: Path | str) -> Path:
    """
    Save *outcomes* as a JSON array at *output_path*.

    :param outcomes: outcomes in rank order
    :param output_path: path to the JSON file
    :return: Path of the saved file

    Example:
    ```python
    from sitemap_crawler.report.json_report import render_json
    report_path = render_json(outcomes, 'output/results.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [outcome.to_dict() for outcome in outcomes]

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
