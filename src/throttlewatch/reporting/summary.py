"""
Human-readable session summary.
"""

from datetime import datetime
from typing import List

from ..models.results import SessionState


def _format_time(epoch: float) -> str:
    return datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M:%S")


def render_session_summary(state: SessionState, top_n: int = 5) -> str:
    """
    Render the counters, statistics and hit tables of a session.

    Args:
        state: Session state, finalized or not.
        top_n: Number of entries shown from each hit table.
    """
    lines: List[str] = [
        "CPU Clock Monitoring Summary",
        "============================",
        f"Start: {_format_time(state.start_time)}",
    ]
    if state.end_time is not None:
        lines.append(f"End: {_format_time(state.end_time)} ({state.duration_seconds:.0f}s)")

    count = state.sample_count
    lines.append(f"Samples: {count}")
    if count:
        lines.append(
            f"Low-clock samples: {state.low_clock_sample_count} "
            f"({state.low_clock_sample_count / count:.1%})"
        )
        lines.append(
            f"High-load samples: {state.high_load_sample_count} "
            f"({state.high_load_sample_count / count:.1%}), "
            f"{state.high_load_low_clock_sample_count} of them low-clock"
        )
        lines.append(f"Thermal events: {state.thermal_events_total}")
        clock, load = state.clock_stats, state.load_stats
        lines.append(
            f"Clock MHz min/avg/max: {clock.min_value:.0f} / {clock.average:.0f} / {clock.max_value:.0f}"
        )
        lines.append(
            f"CPU load % min/avg/max: {load.min_value:.1f} / {load.average:.1f} / {load.max_value:.1f}"
        )

    for title, table in (
        ("Top CPU processes", state.cpu_hit_counts),
        ("Top memory processes", state.mem_hit_counts),
    ):
        if not table:
            continue
        lines.append("")
        lines.append(f"--- {title} (samples as top) ---")
        for name, hits in table.most_common(top_n):
            lines.append(f"  {name}: {hits}")

    return "\n".join(lines)
