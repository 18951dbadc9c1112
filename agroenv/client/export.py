"""
Export helpers for a finished EnvironmentalRecord.
"""
import csv
import io
import re

from agroenv.domain.models import EnvironmentalRecord


def export_json(record: EnvironmentalRecord) -> str:
    """Serialise a record as indented camelCase JSON."""
    return record.model_dump_json(by_alias=True, indent=2)


def load_json(text: str) -> EnvironmentalRecord:
    """Parse a record previously produced by ``export_json``."""
    return EnvironmentalRecord.model_validate_json(text)


def export_csv(record: EnvironmentalRecord) -> str:
    """Serialise a record as two-column field/value CSV rows."""
    weather, soil = record.weather, record.soil
    rows = [
        ("Location", record.location),
        ("Latitude", record.coordinates.latitude),
        ("Longitude", record.coordinates.longitude),
        ("Avg Temperature (°C)", weather.avg_temperature_c),
        ("Avg Humidity (%)", weather.avg_humidity_pct),
        ("Previous Year Rainfall (mm)", weather.prev_year_rainfall_mm),
        ("Avg Annual Rainfall (mm)", weather.avg_annual_rainfall_mm),
        ("pH", soil.ph),
        ("Nitrogen (mg/kg)", soil.nitrogen_mg_kg),
        ("Phosphorus (mg/kg)", soil.phosphorus_mg_kg),
        ("Potassium (mg/kg)", soil.potassium_mg_kg),
        ("Soil Type", soil.soil_type.value if soil.soil_type else ""),
    ]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def export_filename(record: EnvironmentalRecord, extension: str) -> str:
    """File name for an export, e.g. ``New_Delhi_environmental_data.csv``."""
    stem = re.sub(r"\s+", "_", record.location)
    return f"{stem}_environmental_data.{extension.lstrip('.')}"
