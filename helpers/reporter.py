"""Turn chart payloads into plotly figures, PNG files and hosted image links."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, cast

import plotly.graph_objs as go
import plotly.io as pio
import requests

from core.charts import ChartKind, ChartPayload
from core.errors import ExternalServiceError
from helpers.logging_utils import log_event

SERIES_COLOURS = ["red", "blue", "yellow", "cyan", "green", "purple", "grey", "pink", "brown", "orange"]
IMAGE_URL_PATTERN = re.compile(r"^https?://(i\.)?imgur\.com/.*\.(png|jpg)$")
IMGUR_UPLOAD_URL = "https://api.imgur.com/3/image"


def _pie_figure(payload: ChartPayload) -> go.Figure:
    labels = [term for term, _ in payload.rows]
    values = [count for _, count in payload.rows]
    fig = go.Figure(go.Pie(labels=labels, values=values, sort=False))
    fig.update_layout(title=payload.title)
    return fig


def _table_figure(payload: ChartPayload) -> go.Figure:
    frame = payload.to_frame()
    header = list(payload.header) or ["Words", "Times"]
    fig = go.Figure(
        go.Table(
            header=dict(values=header, fill_color="rgb(229, 236, 246)", align="left"),
            cells=dict(values=[frame["term"].tolist(), frame["count"].tolist()], align="left"),
        )
    )
    fig.update_layout(margin=dict(l=20, r=20, t=20, b=20))
    return fig


def _series_figure(payload: ChartPayload) -> go.Figure:
    x_labels = list(payload.x_labels)
    traces = []
    for i, (term, values) in enumerate(payload.rows):
        colour = SERIES_COLOURS[i % len(SERIES_COLOURS)]
        if payload.kind == ChartKind.LINE:
            traces.append(
                go.Scatter(x=x_labels, y=list(values), name=term, mode="lines+markers", line=dict(width=2, color=colour))
            )
        else:
            traces.append(go.Bar(x=x_labels, y=list(values), name=term, marker_color=colour))
    fig = go.Figure(traces)
    fig.update_layout(
        title=payload.title,
        width=800,
        paper_bgcolor="black",
        plot_bgcolor="black",
        font=dict(color="white"),
        xaxis=dict(type="category"),
    )
    if payload.kind == ChartKind.BAR:
        fig.update_layout(barmode="group")
    return fig


def build_figure(payload: ChartPayload) -> go.Figure:
    if payload.kind == ChartKind.PIE:
        return _pie_figure(payload)
    if payload.kind == ChartKind.TABLE:
        return _table_figure(payload)
    return _series_figure(payload)


def figure_json(payload: ChartPayload) -> str:
    return cast(str, pio.to_json(build_figure(payload), validate=False))


class ChartRenderer:
    """Write payloads as PNG files (static export needs Kaleido)."""

    def __init__(self, output_dir: str = "static/charts") -> None:
        self.output_dir = Path(output_dir)

    def render(self, payload: ChartPayload) -> Path:
        path = self.output_dir / f"{payload.kind.value}.png"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            build_figure(payload).write_image(str(path), format="png")
        except (ValueError, RuntimeError, OSError) as exc:
            log_event("render.error", {"kind": payload.kind.value, "error": str(exc)}, level="error")
            raise ExternalServiceError("chart renderer", str(exc)) from exc
        return path


class ImgurUploader:
    def __init__(self, client_id: str, timeout: int = 10) -> None:
        self.client_id = client_id
        self.timeout = timeout

    def upload(self, path: Path) -> str:
        headers = {"Authorization": f"Client-ID {self.client_id}"}
        try:
            with open(path, "rb") as f:
                response = requests.post(IMGUR_UPLOAD_URL, headers=headers, files={"image": f}, timeout=self.timeout)
            response.raise_for_status()
            link = response.json()["data"]["link"]
        except (OSError, requests.RequestException, ValueError, KeyError, TypeError) as exc:
            log_event("upload.error", {"path": str(path), "error": str(exc)}, level="error")
            raise ExternalServiceError("image host", str(exc)) from exc
        return str(link)


def is_image_url(reply: Optional[str]) -> bool:
    return bool(reply) and IMAGE_URL_PATTERN.match(reply) is not None


def normalize_reply(reply: str) -> Dict[str, str]:
    """Shape a reply as an image message when it is a hosted image link, else as text."""
    if is_image_url(reply):
        return {"type": "image", "originalContentUrl": reply, "previewImageUrl": reply}
    return {"type": "text", "text": reply}


__all__ = [
    "SERIES_COLOURS",
    "build_figure",
    "figure_json",
    "ChartRenderer",
    "ImgurUploader",
    "is_image_url",
    "normalize_reply",
]
