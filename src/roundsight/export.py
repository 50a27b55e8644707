"""
Export Functionality for RoundSight

Provides export formats for analysis results:
- JSON (default): complete per-round data with camelCase keys
- CSV: one row per player per round, or any summary table
"""

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from roundsight.analysis.aggregate import round_stats_frame
from roundsight.core.config import ExportConfig
from roundsight.core.models import RoundAnalysis

logger = logging.getLogger(__name__)


# ============================================================================
# JSON Export
# ============================================================================


def export_to_json(
    rounds: RoundAnalysis | Iterable[RoundAnalysis],
    output_path: Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """
    Export analyzed rounds to JSON.

    Args:
        rounds: One analyzed round or several
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata

    Returns:
        JSON string
    """
    if isinstance(rounds, RoundAnalysis):
        rounds = [rounds]

    export_data: dict[str, Any] = {"rounds": [r.to_dict() for r in rounds]}

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "roundsight_json",
                "version": "1.0",
            },
            **export_data,
        }

    json_str = json.dumps(export_data, indent=indent, default=str)

    if output_path:
        output_path.write_text(json_str)
        logger.info(f"Exported JSON to: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def export_frame_to_csv(
    frame: pd.DataFrame,
    output_path: Path | None = None,
    delimiter: str = ",",
) -> str:
    """Export a DataFrame (round stats or a summary table) to CSV."""
    csv_str = frame.to_csv(index=False, sep=delimiter)

    if output_path:
        output_path.write_text(csv_str)
        logger.info(f"Exported CSV to: {output_path}")

    return csv_str


def export_analysis(
    rounds: RoundAnalysis | Iterable[RoundAnalysis],
    output_path: Path,
    format: str | None = None,
    config: ExportConfig | None = None,
) -> None:
    """
    Export analyzed rounds to the specified format.

    Format is detected from the file extension if not specified.

    Args:
        rounds: One analyzed round or several
        output_path: Path to write the export
        format: Optional format override (json, csv)
        config: Export settings (indent, delimiter)
    """
    config = config or ExportConfig()
    if format is None:
        format = output_path.suffix.lstrip(".").lower() or config.default_format

    rounds = [rounds] if isinstance(rounds, RoundAnalysis) else list(rounds)
    if format == "json":
        export_to_json(rounds, output_path, indent=config.json_indent)
    elif format == "csv":
        export_frame_to_csv(round_stats_frame(rounds), output_path, config.csv_delimiter)
    else:
        raise ValueError(f"Unsupported export format: {format}")
