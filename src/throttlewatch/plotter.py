"""
Generates charts from session sample files.

This module reads the sample table written at the end of a session (Parquet
or CSV), converts the epoch timestamps with Polars and draws a two-row Plotly
chart:
  1. Current clock against max clock, with the low-clock threshold and the
     sustained-alert samples marked.
  2. Aggregate CPU load, with the high-load threshold.

Charts are saved as interactive HTML and, if Kaleido is installed, as static
PNG images.
"""

import logging
from pathlib import Path
from typing import List, Optional

import plotly.graph_objects as go
import polars as pl
from plotly.subplots import make_subplots

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("timestamp", "clock_mhz", "max_clock_mhz", "cpu_load_pct", "alert")


def load_samples_file(data_filepath: Path) -> pl.DataFrame:
    """Read a samples file and add a `time` datetime column."""
    if data_filepath.suffix == ".parquet":
        df = pl.read_parquet(data_filepath)
    elif data_filepath.suffix == ".csv":
        df = pl.read_csv(data_filepath)
    else:
        raise ValueError(f"Unsupported samples file: {data_filepath}")

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{data_filepath.name} is missing columns: {', '.join(missing)}")

    return df.sort("timestamp").with_columns(
        (pl.col("timestamp") * 1000).cast(pl.Int64).cast(pl.Datetime("ms")).alias("time")
    )


def _save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path) -> List[Path]:
    """Save a figure as HTML, and as PNG when Kaleido is available."""
    written: List[Path] = []
    html_path = output_dir / f"{base_filename}.html"
    fig.write_html(html_path)
    written.append(html_path)
    logger.info(f"Interactive plot saved to: {html_path}")

    png_path = output_dir / f"{base_filename}.png"
    try:
        fig.write_image(png_path, width=1200, height=700)
        written.append(png_path)
        logger.info(f"Static plot saved to: {png_path}")
    except Exception as e_kaleido:
        logger.warning(
            f"Failed to save static plot to PNG (Kaleido might be missing or misconfigured): {e_kaleido}. "
            f"To enable PNG export, install Kaleido: `pip install throttlewatch[export]`"
        )
    return written


def build_session_figure(
    df: pl.DataFrame,
    low_clock_ratio: float = 0.8,
    high_load_threshold: float = 70.0,
    title: str = "CPU clock and load",
) -> go.Figure:
    """Build the clock/load chart of a loaded samples table."""
    times = df["time"].to_list()
    fig = make_subplots(
        rows=2,
        cols=1,
        shared_xaxes=True,
        vertical_spacing=0.08,
        subplot_titles=("Clock (MHz)", "CPU load (%)"),
    )

    fig.add_trace(
        go.Scatter(x=times, y=df["clock_mhz"].to_list(), mode="lines", name="Clock"),
        row=1,
        col=1,
    )
    fig.add_trace(
        go.Scatter(
            x=times,
            y=df["max_clock_mhz"].to_list(),
            mode="lines",
            name="Max clock",
            line={"dash": "dot"},
        ),
        row=1,
        col=1,
    )
    fig.add_trace(
        go.Scatter(
            x=times,
            y=(df["max_clock_mhz"] * low_clock_ratio).to_list(),
            mode="lines",
            name=f"Low-clock threshold ({low_clock_ratio:.0%})",
            line={"dash": "dash", "width": 1},
        ),
        row=1,
        col=1,
    )

    alerts = df.filter(pl.col("alert"))
    if not alerts.is_empty():
        fig.add_trace(
            go.Scatter(
                x=alerts["time"].to_list(),
                y=alerts["clock_mhz"].to_list(),
                mode="markers",
                name="Sustained low clock",
                marker={"color": "red", "size": 8, "symbol": "x"},
            ),
            row=1,
            col=1,
        )

    fig.add_trace(
        go.Scatter(x=times, y=df["cpu_load_pct"].to_list(), mode="lines", name="CPU load"),
        row=2,
        col=1,
    )
    fig.add_hline(
        y=high_load_threshold,
        line_dash="dash",
        line_width=1,
        annotation_text="high load",
        row=2,
        col=1,
    )

    fig.update_yaxes(rangemode="tozero", row=1, col=1)
    fig.update_yaxes(range=[0, 100], row=2, col=1)
    fig.update_layout(title=title, hovermode="x unified", legend_title_text="")
    return fig


def plot_session(
    data_filepath: Path,
    output_dir: Optional[Path] = None,
    low_clock_ratio: float = 0.8,
    high_load_threshold: float = 70.0,
) -> List[Path]:
    """
    Generate the session chart for one samples file.

    Args:
        data_filepath: Samples file written by the storage layer.
        output_dir: Where to write the chart, the file's directory when None.
        low_clock_ratio: Ratio drawn as the low-clock threshold line.
        high_load_threshold: Load drawn as the high-load line.

    Returns:
        The files written; empty when the samples file holds no rows.
    """
    data_filepath = Path(data_filepath)
    output_dir = Path(output_dir) if output_dir else data_filepath.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    df = load_samples_file(data_filepath)
    if df.is_empty():
        logger.warning(f"No samples in {data_filepath.name}, skipping plot")
        return []

    fig = build_session_figure(
        df,
        low_clock_ratio=low_clock_ratio,
        high_load_threshold=high_load_threshold,
        title=f"CPU clock and load - {data_filepath.stem} ({len(df)} samples)",
    )
    return _save_plotly_figure(fig, f"{data_filepath.stem}_clock_load", output_dir)
