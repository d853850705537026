"""Display formatting for file details and metric values."""

from typing import Union

from app.models import MetricName

DECIBEL_METRICS = {MetricName.DYNAMIC_RANGE}


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def metric_unit(name: Union[MetricName, str]) -> str:
    return "dB" if MetricName(name) in DECIBEL_METRICS else "%"


def format_metric_value(name: Union[MetricName, str], value: float) -> str:
    """Format ``value`` with one decimal and the unit of ``name`` (``"72.5%"``, ``"18.0dB"``)."""
    return f"{value:.1f}{metric_unit(name)}"
