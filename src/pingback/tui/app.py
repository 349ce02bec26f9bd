"""Textual front end: one probe per tick, rendered as a live latency heatmap."""

from __future__ import annotations

import asyncio
import logging

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Footer, Static

from ..config import AppConfig
from ..contracts.error import ProbeError
from ..core.aggregation import AggregatorState
from ..core.samples import Sample
from ..probe import PingProber, Prober
from ..render.colors import ColorMapper
from ..render.legend import LegendCache
from ..render.view import WAITING_MESSAGE, build_view

logger = logging.getLogger(__name__)


class SampleReceived(Message):
    """A probe finished with a reply or a drop."""

    def __init__(self, sample: Sample) -> None:
        super().__init__()
        self.sample = sample


class ProbeFailed(Message):
    """The prober could not run; the app shuts down."""

    def __init__(self, error: ProbeError) -> None:
        super().__init__()
        self.error = error


class PingbackApp(App[None]):
    """Owns the aggregation state; every mutation happens on the app's message loop."""

    CSS = """
    Screen { layout: vertical; overflow-y: auto; }
    #header { padding: 0 0 1 0; color: #e5e7eb; }
    #streams { padding: 0 0 1 0; }
    #legend { color: #94a3b8; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False),
    ]

    def __init__(self, config: AppConfig, prober: Prober | None = None) -> None:
        super().__init__()
        self.config = config
        self.prober: Prober = prober or PingProber(config.probe.target, config.probe.interval_s)
        self.state = AggregatorState(
            config.aggregation.group_size,
            config.aggregation.levels,
            history_factor=config.aggregation.history_factor,
        )
        self.mapper = ColorMapper(self.state.tracker)
        self.legend_cache = LegendCache(config.display.legend_steps)
        self.probe_error: ProbeError | None = None

    def compose(self) -> ComposeResult:
        yield Static(WAITING_MESSAGE, id="header")
        yield Static("", id="streams")
        yield Static("", id="legend")
        yield Footer()

    def on_mount(self) -> None:
        self._header_widget = self.query_one("#header", Static)
        self._streams_widget = self.query_one("#streams", Static)
        self._legend_widget = self.query_one("#legend", Static)
        self.state.resize(self.size.width)
        self.schedule_probe()

    def schedule_probe(self) -> None:
        self.run_worker(self.probe_once(), exclusive=True, group="probe")

    async def probe_once(self) -> None:
        """Run the blocking probe in a thread and post its outcome back to the app."""

        try:
            sample = await asyncio.to_thread(self.prober.probe)
        except ProbeError as exc:
            self.post_message(ProbeFailed(exc))
            return
        self.post_message(SampleReceived(sample))

    def on_sample_received(self, message: SampleReceived) -> None:
        self.handle_sample(message.sample)
        self.set_timer(self.config.probe.interval_s, self.schedule_probe)

    def on_probe_failed(self, message: ProbeFailed) -> None:
        logger.error("Probe failed: %s", message.error)
        self.probe_error = message.error
        self.exit()

    def on_resize(self, event: events.Resize) -> None:
        self.state.resize(event.size.width)
        if hasattr(self, "_header_widget"):
            self.refresh_view()

    def handle_sample(self, sample: Sample) -> None:
        self.state.process(sample)
        self.refresh_view()

    def refresh_view(self) -> None:
        view = build_view(
            self.state,
            self.mapper,
            self.legend_cache,
            target=self.config.probe.target,
            interval_ms=self.config.probe.interval_ms,
            width=self.state.window_width,
        )
        if view is None:
            self._header_widget.update(WAITING_MESSAGE)
            return
        self._header_widget.update(view.header)
        self._streams_widget.update(view.streams)
        self._legend_widget.update(view.legend)


def run_tui(config: AppConfig, prober: Prober | None = None) -> None:
    """Run the visualizer until the user quits; re-raise a fatal probe error afterwards."""

    app = PingbackApp(config, prober=prober)
    logger.info(
        "Pinging %s every %d ms (group %d, %d levels)",
        config.probe.target,
        config.probe.interval_ms,
        config.aggregation.group_size,
        config.aggregation.levels,
    )
    app.run()
    if app.probe_error is not None:
        raise app.probe_error


__all__ = [
    "PingbackApp",
    "ProbeFailed",
    "SampleReceived",
    "run_tui",
]
