"""
JSON output formatter for verification reports.
Aggregates the reports of several doubles into one document.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from stunt import __version__


class ReportFormatter:
    """
    Formats verification reports as structured JSON.
    """

    SCHEMA_VERSION = "1.0.0"

    def __init__(self, test_name: Optional[str] = None):
        """
        Initialize formatter.

        Args:
            test_name: Test case the reports belong to
        """
        self.test_name = test_name
        self.reports: List[Dict[str, Any]] = []

    def add_report(self, report: Any) -> None:
        """
        Add the verification report of one double.

        Args:
            report: VerificationReport returned by verify()
        """
        self.reports.append(report.to_dict())

    def generate(self) -> Dict[str, Any]:
        """
        Generate the complete JSON output structure.

        Returns:
            Dictionary representing the JSON structure
        """
        expectations = sum(len(r["entries"]) for r in self.reports)
        failed = sum(1 for r in self.reports for e in r["entries"] if not e["passed"])

        return {
            "schema_version": self.SCHEMA_VERSION,
            "metadata": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "test": self.test_name,
                "engine_version": f"stunt-{__version__}",
            },
            "summary": {
                "doubles": len(self.reports),
                "expectations": expectations,
                "passed": expectations - failed,
                "failed": failed,
            },
            "reports": self.reports,
        }

    def to_json_string(self, indent: int = 2) -> str:
        return json.dumps(self.generate(), indent=indent)

    def save_to_file(self, output_path: str, indent: int = 2) -> None:
        """
        Save JSON to file.

        Args:
            output_path: Path to output JSON file
            indent: Number of spaces for indentation
        """
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.generate(), f, indent=indent)
