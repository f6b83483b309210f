"""Plotly-based display of rendered map frames."""

import plotly.graph_objects as go

from src.map_viewer.renderer import (
    LABEL_FONT_FAMILY,
    CircleCommand,
    ImageCommand,
    LabelCommand,
    MarkerCommand,
    RenderResult,
    rgba_to_css,
)
from src.map_viewer.viewport import Viewport

BACKGROUND_COLOR = "rgb(20, 24, 28)"


def create_figure(
    render_result: RenderResult,
    viewport: Viewport,
    title: str | None = None,
) -> go.Figure:
    """
    Create a 2D Plotly figure replaying a frame's draw commands.

    Axes are screen pixels of the viewport (y pointing down), so the
    commands are placed without any further transform.

    Args:
        render_result: Output of renderer.render()
        viewport: Visible canvas area; sets figure size and axis ranges
        title: Optional title shown above the status line

    Returns:
        Plotly Figure object ready for display
    """
    fig = go.Figure()

    for command in render_result.of_type(ImageCommand):
        _add_image_to_figure(fig, command)

    for command in render_result.of_type(CircleCommand):
        _add_circle_to_figure(fig, command)

    markers = render_result.of_type(MarkerCommand)
    if markers:
        _add_markers_to_figure(fig, markers)

    for command in render_result.of_type(LabelCommand):
        _add_label_to_figure(fig, command)

    header = f"<b>{title}</b><br>{render_result.status}" if title else render_result.status
    fig.add_annotation(
        x=0.01,
        y=0.99,
        xref="paper",
        yref="paper",
        xanchor="left",
        yanchor="top",
        text=header,
        showarrow=False,
        align="left",
        font=dict(size=12, color="white"),
        bgcolor="rgba(0,0,0,0.5)",
    )

    left = viewport.offset_x
    top = viewport.offset_y
    fig.update_layout(
        width=int(viewport.width),
        height=int(viewport.height),
        margin=dict(l=0, r=0, t=0, b=0),
        showlegend=False,
        plot_bgcolor=BACKGROUND_COLOR,
        paper_bgcolor=BACKGROUND_COLOR,
        xaxis=dict(range=[left, left + viewport.width], visible=False, fixedrange=False),
        yaxis=dict(range=[top + viewport.height, top], visible=False, fixedrange=False),
        dragmode="pan",
    )

    return fig


def _add_image_to_figure(fig: go.Figure, command: ImageCommand) -> None:
    source = getattr(command.source, "image", command.source)
    fig.add_layout_image(
        dict(
            source=source,
            xref="x",
            yref="y",
            x=command.x,
            y=command.y,
            sizex=command.width,
            sizey=command.height,
            xanchor="left",
            yanchor="top",
            sizing="stretch",
            layer="below",
        )
    )


def _add_circle_to_figure(fig: go.Figure, command: CircleCommand) -> None:
    fig.add_shape(
        type="circle",
        xref="x",
        yref="y",
        x0=command.cx - command.radius,
        y0=command.cy - command.radius,
        x1=command.cx + command.radius,
        y1=command.cy + command.radius,
        line=dict(color=rgba_to_css(command.color), width=command.line_width),
    )


def _add_markers_to_figure(fig: go.Figure, markers: list[MarkerCommand]) -> None:
    """Add all waypoint dots as one trace; size is the dot diameter in pixels."""
    fig.add_trace(
        go.Scatter(
            x=[m.cx for m in markers],
            y=[m.cy for m in markers],
            mode="markers",
            marker=dict(
                size=[2 * m.radius for m in markers],
                color=[rgba_to_css(m.color) for m in markers],
                line=dict(width=0),
            ),
            customdata=[m.index for m in markers],
            hovertemplate="Waypoint %{customdata}<extra></extra>",
            name="Waypoints",
        )
    )


def _add_label_to_figure(fig: go.Figure, command: LabelCommand) -> None:
    # Plotly text has no stroke; the outline color becomes the label background
    fig.add_annotation(
        x=command.x,
        y=command.y,
        xref="x",
        yref="y",
        xanchor="left",
        yanchor="bottom",
        text=command.text,
        showarrow=False,
        font=dict(size=command.font_size, color=rgba_to_css(command.fill), family=LABEL_FONT_FAMILY),
        bgcolor=rgba_to_css(command.outline),
        borderpad=command.outline_width,
    )


def show_figure(fig: go.Figure) -> None:
    """Display figure in browser."""
    fig.show()


def export_html(fig: go.Figure, output_path: str) -> None:
    """Export figure as standalone HTML file."""
    fig.write_html(output_path, include_plotlyjs=True, full_html=True)
