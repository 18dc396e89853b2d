"""JSON report generator for scenario group runs.

Generates structured JSON reports from GroupResult objects.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..runner.result_collector import GroupResult


class JsonReporter:
    """Generates JSON reports from group results."""

    def generate(
        self,
        result: GroupResult,
        endpoint: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from a group result.

        Args:
            result: Outcomes of the group's steps.
            endpoint: Endpoint the group ran against, if known.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "group": result.group_name,
            "endpoint": endpoint,
            "status": "passed" if result.all_passed else "failed",
            "summary": {
                "total": result.total_count,
                "passed": result.passed_count,
                "failed": result.failed_count,
                "skipped": result.skipped_count,
                "duration_ms": result.duration_ms,
            },
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "duration_ms": s.duration_ms,
                    "error": s.error,
                    "error_type": s.error_type,
                }
                for s in result.steps
            ],
            "variables": list(result.variables_written),
            "error": result.error,
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_cli_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the CLI JSON envelope.

        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary.
            report_path: Path where report was saved.

        Returns:
            CLI output dictionary.
        """
        summary = report["summary"]
        all_passed = report["status"] == "passed"

        data: dict[str, Any] = {
            "group": report["group"],
            "total_steps": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "skipped": summary["skipped"],
            "duration_ms": summary["duration_ms"],
            "failures": [
                {"name": s["name"], "error": s["error"]}
                for s in report["steps"]
                if s["status"] == "failed"
            ],
        }

        if report_path:
            data["report_path"] = report_path

        if not all_passed and report.get("error"):
            message = f"Run failed: {report['error']}"
        elif not all_passed:
            message = f"{summary['failed']} of {summary['total']} steps failed"
        else:
            message = "All steps passed"

        return {
            "success": all_passed,
            "command": "run",
            "data": data,
            "message": message,
        }
