"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    LiveDashboard,
    build_dashboard,
    build_insight_panel,
    build_status_panel,
    console,
    format_time_remaining,
    print_header,
    print_history,
    print_hourly,
    print_insight,
    print_result,
)
from .output import (
    append_csv,
    create_result_json,
    format_csv_header,
    format_csv_row,
    format_text_result,
    save_json,
)

__all__ = [
    "LiveDashboard",
    "append_csv",
    "build_dashboard",
    "build_insight_panel",
    "build_status_panel",
    "console",
    "create_result_json",
    "format_csv_header",
    "format_csv_row",
    "format_text_result",
    "format_time_remaining",
    "print_header",
    "print_history",
    "print_hourly",
    "print_insight",
    "print_result",
    "save_json",
]
