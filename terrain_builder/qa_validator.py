"""
QA validation for terrain worlds.

Checks every tile's height field and every seam between adjacent tiles:
- Tile checks (TILE-*): canonical resolution, sample shape, finite samples,
  normalized range
- Seam checks (SEAM-*): edge gap between stitched neighbours

Usage:
    from terrain_builder.qa_validator import TerrainValidator

    validator = TerrainValidator(world, seam_tolerance=0.01)
    report = validator.run_full_validation()
    report.print_summary()
    report.write_report('qa_report.md')
"""

import time
from enum import Enum


DEFAULT_SEAM_TOLERANCE = 0.01


# ---------------------------------------------------------------------------
# Validation result classes
# ---------------------------------------------------------------------------

class ValidationSeverity(Enum):
    """Severity level for a validation check."""
    ERROR = "ERROR"       # Tile cannot be pushed to an engine as-is
    WARNING = "WARNING"   # Visible artefact (seam crack, clipped height)
    INFO = "INFO"
    SKIP = "SKIP"         # Check not applicable


class ValidationResult:
    """Single validation check result."""

    def __init__(self, check_id, severity, passed, message,
                 details=None, fix_suggestion=None):
        """
        Args:
            check_id: Unique identifier for this check (e.g. 'TILE-001').
            severity: ValidationSeverity enum value.
            passed: True if the check passed, False if it failed.
            message: Short human-readable description of result.
            details: Optional longer description of what was found.
            fix_suggestion: Optional suggestion for how to fix the issue.
        """
        self.check_id = check_id
        self.severity = severity
        self.passed = passed
        self.message = message
        self.details = details
        self.fix_suggestion = fix_suggestion

    def __repr__(self):
        status = "PASS" if self.passed else "FAIL"
        return "ValidationResult({}, {}, {}, {!r})".format(
            self.check_id, self.severity.value, status, self.message
        )


# ---------------------------------------------------------------------------
# TerrainValidator
# ---------------------------------------------------------------------------

class TerrainValidator:
    """Runs tile and seam checks over a TerrainWorld."""

    def __init__(self, world, seam_tolerance=DEFAULT_SEAM_TOLERANCE):
        """
        Args:
            world: TerrainWorld to validate.
            seam_tolerance: Largest accepted absolute height gap across a
                            seam, in world units.
        """
        self.world = world
        self.seam_tolerance = seam_tolerance

    def run_full_validation(self):
        """
        Run all checks.

        Returns:
            QAReport
        """
        from .qa_report import QAReport

        start_time = time.time()
        all_results = []
        all_results.extend(self.validate_tiles())
        all_results.extend(self.validate_seams())
        elapsed = time.time() - start_time

        metadata = {
            'world_name': self.world.name,
            'tile_count': len(self.world),
            'seam_tolerance': self.seam_tolerance,
            'elapsed_seconds': elapsed,
        }
        return QAReport(all_results, metadata)

    def validate_tiles(self):
        from .validators.tile_validator import validate_tiles
        return validate_tiles(self.world)

    def validate_seams(self):
        from .validators.seam_validator import validate_seams
        return validate_seams(self.world, self.seam_tolerance)
