"""CSV and GeoJSON serialization of a completed :class:`Run`."""

import csv
import io
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..config import CSV_PREFIX, GEOJSON_PREFIX
from ..openmaps.models import Coordinate, Run

CSV_HEADER = [
    "feature_type",
    "title",
    "lat",
    "lon",
    "height_m",
    "score_total",
    "nearest_critical_title",
    "nearest_critical_kind",
    "nearest_critical_km",
    "critical_within_1km",
    "critical_within_3km",
    "candidate_kind",
    "osm_url",
]
CSV_MEDIA_TYPE = "text/csv;charset=utf-8"
GEOJSON_MEDIA_TYPE = "application/geo+json;charset=utf-8"

logger = logging.getLogger(__name__)


def to_csv(run: Run) -> str:
    """One row per ranked candidate; fields with commas, quotes, CR or LF are quoted.

    Rows end in CRLF so the writer also quotes fields holding a bare CR.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADER)

    for item in run.candidates:
        candidate, score = item.candidate, item.score
        nearest_km = score.nearest_meters / 1000 if score.has_nearest else ""
        writer.writerow(
            [
                "candidate",
                candidate.title,
                candidate.position.lat,
                candidate.position.lon,
                candidate.height_meters,
                score.total,
                score.nearest_title,
                score.nearest_kind,
                nearest_km,
                score.within_1k,
                score.within_3k,
                candidate.kind,
                candidate.reference_url,
            ]
        )
    return buffer.getvalue()


def _point(position: Coordinate, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [position.lon, position.lat]},
        "properties": properties,
    }


def to_geojson(run: Run) -> Dict[str, Any]:
    """Build a FeatureCollection with the search center, every critical site and the ranked candidates."""
    features: List[Dict[str, Any]] = [
        _point(
            run.center.position,
            {
                "feature_type": "zip_center",
                "zip": run.postal_code,
                "label": run.center.label,
                "radius_km": run.radius_km,
            },
        )
    ]

    for site in run.critical:
        features.append(
            _point(site.position, {"feature_type": "critical", "title": site.title, "kind": site.kind})
        )

    for item in run.candidates:
        candidate, score = item.candidate, item.score
        features.append(
            _point(
                candidate.position,
                {
                    "feature_type": "candidate",
                    "title": candidate.title,
                    "kind": candidate.kind,
                    "height_m": candidate.height_meters,
                    "score_total": score.total,
                    "within_1km": score.within_1k,
                    "within_3km": score.within_3k,
                    "nearest_critical_title": score.nearest_title,
                    "nearest_critical_kind": score.nearest_kind,
                    # JSON has no infinity
                    "nearest_critical_m": score.nearest_meters if math.isfinite(score.nearest_meters) else None,
                    "osm_url": candidate.reference_url,
                },
            )
        )

    return {"type": "FeatureCollection", "features": features}


def geojson_text(run: Run) -> str:
    return json.dumps(to_geojson(run), indent=2, allow_nan=False)


def export_filename(prefix: str, postal_code: str, extension: str) -> str:
    return f"{prefix}_{postal_code or 'zip'}.{extension}"


def write_run(run: Run, directory: Path) -> Tuple[Path, Path]:
    """Write the CSV and GeoJSON exports into ``directory`` and return both paths."""
    directory.mkdir(parents=True, exist_ok=True)
    csv_path = directory / export_filename(CSV_PREFIX, run.postal_code, "csv")
    geojson_path = directory / export_filename(GEOJSON_PREFIX, run.postal_code, "geojson")

    with csv_path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(to_csv(run))
    geojson_path.write_text(geojson_text(run), encoding="utf-8")
    logger.info("Exported %s candidates to %s and %s", len(run.candidates), csv_path, geojson_path)
    return csv_path, geojson_path
