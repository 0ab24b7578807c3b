"""
QA report for terrain world validation.

Generates Markdown reports and console summaries from validation results.
"""

import os

from .qa_validator import ValidationSeverity


# ---------------------------------------------------------------------------
# Category labels for grouping results in reports
# ---------------------------------------------------------------------------

_CATEGORY_ORDER = ['TILE', 'SEAM']

_CATEGORY_LABELS = {
    'TILE': 'Tile Height Fields',
    'SEAM': 'Tile Seams',
}


def _get_category(check_id):
    """Extract category prefix from a check ID like 'SEAM-001' -> 'SEAM'."""
    prefix = check_id.split('-')[0]
    if prefix in _CATEGORY_LABELS:
        return prefix
    return 'OTHER'


def _status(result):
    if result.severity == ValidationSeverity.SKIP:
        return "SKIP"
    return "PASS" if result.passed else "FAIL"


# ---------------------------------------------------------------------------
# QAReport class
# ---------------------------------------------------------------------------

class QAReport:
    """Container for all validation results with reporting methods."""

    def __init__(self, results, metadata):
        """
        Args:
            results: List of ValidationResult objects.
            metadata: Dict with world_name, tile_count, seam_tolerance,
                      elapsed_seconds.
        """
        self.results = results
        self.metadata = metadata

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def get_score(self):
        """
        Calculate 0-100 coverage score.

        score = passed_checks / total_checks * 100, SKIP results excluded.
        Returns 100.0 if there are no applicable checks.
        """
        applicable = [r for r in self.results
                      if r.severity != ValidationSeverity.SKIP]
        if not applicable:
            return 100.0

        passed = sum(1 for r in applicable if r.passed)
        return (passed / float(len(applicable))) * 100.0

    def failures(self, severity=None):
        """Failed, non-skipped results, optionally filtered by severity."""
        return [r for r in self.results
                if not r.passed
                and r.severity != ValidationSeverity.SKIP
                and (severity is None or r.severity == severity)]

    def has_errors(self):
        return bool(self.failures(ValidationSeverity.ERROR))

    def _counts(self):
        skipped = sum(1 for r in self.results
                      if r.severity == ValidationSeverity.SKIP)
        applicable = len(self.results) - skipped
        passed = sum(1 for r in self.results
                     if r.passed and r.severity != ValidationSeverity.SKIP)
        return {
            'applicable': applicable,
            'passed': passed,
            'errors': len(self.failures(ValidationSeverity.ERROR)),
            'warnings': len(self.failures(ValidationSeverity.WARNING)),
            'infos': len(self.failures(ValidationSeverity.INFO)),
            'skipped': skipped,
        }

    # ------------------------------------------------------------------
    # Console summary
    # ------------------------------------------------------------------

    def print_summary(self):
        """Print console summary with pass/fail counts by severity."""
        counts = self._counts()
        world_name = self.metadata.get('world_name', 'Unknown')

        lines = []
        lines.append("")
        lines.append("=== QA Validation Summary: {} ===".format(world_name))
        lines.append("")
        lines.append("Coverage Score: {:.1f}% ({}/{} checks passed)".format(
            self.get_score(), counts['passed'], counts['applicable']
        ))
        lines.append("")
        lines.append("ERROR:   {} failed".format(counts['errors']))
        lines.append("WARNING: {} failed".format(counts['warnings']))
        lines.append("INFO:    {} failed".format(counts['infos']))
        lines.append("SKIPPED: {}".format(counts['skipped']))
        lines.append("")

        errors = self.failures(ValidationSeverity.ERROR)
        if errors:
            lines.append("Critical Issues:")
            for r in errors:
                lines.append("  [{}] {}".format(r.check_id, r.message))
            lines.append("")

        warnings = self.failures(ValidationSeverity.WARNING)
        if warnings:
            lines.append("Warnings:")
            for r in warnings[:10]:
                lines.append("  [{}] {}".format(r.check_id, r.message))
            if len(warnings) > 10:
                lines.append("  ... ({} more warnings)".format(
                    len(warnings) - 10))
            lines.append("")

        if not errors and not warnings:
            lines.append("All automated checks passed!")
            lines.append("")

        elapsed = self.metadata.get('elapsed_seconds', 0)
        if elapsed > 0:
            lines.append("Validation completed in {:.2f}s".format(elapsed))
            lines.append("")

        print("\n".join(lines))

    # ------------------------------------------------------------------
    # Markdown report
    # ------------------------------------------------------------------

    def write_report(self, output_path):
        """
        Write detailed Markdown report to file.

        Args:
            output_path: File path for the output Markdown report.
        """
        content = "\n".join(self._build_report_lines())

        out_dir = os.path.dirname(output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content)

    def _build_report_lines(self):
        counts = self._counts()
        world_name = self.metadata.get('world_name', 'Unknown')

        lines = [
            "# QA Validation Report: {}".format(world_name),
            "",
            "**Tiles:** {}  **Seam Tolerance:** {}".format(
                self.metadata.get('tile_count', 'N/A'),
                self.metadata.get('seam_tolerance', 'N/A')),
            "**Coverage Score:** {:.1f}/100 ({}/{} checks passed)".format(
                self.get_score(), counts['passed'], counts['applicable']),
            "",
        ]

        categorized = self._group_by_category()
        for cat_key in _CATEGORY_ORDER + ['OTHER']:
            if cat_key not in categorized:
                continue
            cat_results = categorized[cat_key]

            lines.append("## {}".format(
                _CATEGORY_LABELS.get(cat_key, 'Other Checks')))
            lines.append("")
            lines.append("| Check ID | Severity | Status | Message |")
            lines.append("|----------|----------|--------|---------|")
            for r in cat_results:
                lines.append("| {} | {} | {} | {} |".format(
                    r.check_id, r.severity.value, _status(r), r.message
                ))
            lines.append("")

            for r in cat_results:
                if _status(r) != "FAIL":
                    continue
                lines.append("- **{}:** {}".format(r.check_id, r.message))
                if r.details:
                    lines.append("  - {}".format(r.details))
                if r.fix_suggestion:
                    lines.append("  - **Fix:** {}".format(r.fix_suggestion))
            lines.append("")

        return lines

    def _group_by_category(self):
        """Group results by check ID category prefix."""
        groups = {}
        for r in self.results:
            groups.setdefault(_get_category(r.check_id), []).append(r)
        return groups
