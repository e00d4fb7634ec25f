"""Run summaries: the end-of-batch log block and an optional JSON report."""

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)


def format_summary(result, output_dir=None):
    lines = [
        "--- Batch Summary ---",
        f"Processed: {result.processed_count}",
        f"Skipped: {result.skipped_count}",
    ]
    for identifier, reason in result.failures:
        lines.append(f"  - {identifier}: {reason}")
    if output_dir is not None:
        lines.append(f"Output folder: {output_dir}")
    lines.append("---------------------")
    return "\n".join(lines)


def log_summary(result, output_dir=None):
    log.info("\n🎉 Processing complete. %d saved to %s", result.processed_count, output_dir)
    log.info(format_summary(result, output_dir))


def write_report(result, path):
    """Dump ``result`` as JSON to ``path`` and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.as_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return path
