# backend.py
from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence, Set, Tuple

import pulsectl

from errors import BackendCommandFailed
from models import AudioNode, CaptureOptions, Node, Pattern
from node_catalog import ListResult
from patterns import matches
from pw_cli import pw_link_connect, pw_link_disconnect, tools_available
from pw_dump import dump_graph
from pw_graph import (
    is_input_stream,
    is_internal_node,
    is_output_stream,
    is_sink_node,
    is_virtual_node,
    map_ports_1_to_1,
    select_ports,
)
from pw_types import PwGraph, PwPort


LinkPairs = List[Tuple[str, str]]


class VirtmicBackend:
    """
    Routes selected application streams into a dedicated null sink.

    The sink is created through pipewire-pulse so Pulse clients see it too; the
    call client records its monitor. Matching streams are joined with native
    PipeWire links, and every link made here is removed again on stop().
    """

    SINK_NAME = "screenshare-audio"
    SINK_DESC = "Screen Share Audio"

    def __init__(
        self,
        pulse_client_name: str = "screenshare-picker",
        host_binary: str = "",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._pulse_client_name = pulse_client_name
        self._host_binary = host_binary
        self._log = logger or logging.getLogger("screenshare.backend")
        self._pulse: Optional[pulsectl.Pulse] = None
        self._sink_module_id: Optional[int] = None
        self._graph = PwGraph()

        self._mode: Optional[str] = None  # "filters" | "system"
        self._patterns: List[Pattern] = []
        self._options = CaptureOptions()
        self._links: Set[Tuple[str, str]] = set()

    @property
    def available(self) -> bool:
        return sys.platform.startswith("linux") and tools_available()

    @property
    def active(self) -> bool:
        return self._mode is not None

    def refresh(self) -> None:
        self._graph = dump_graph()

    def _pulse_connect(self) -> pulsectl.Pulse:
        if self._pulse is None:
            self._pulse = pulsectl.Pulse(self._pulse_client_name)
        return self._pulse

    def close(self) -> None:
        if self._pulse is not None:
            self._pulse.close()
        self._pulse = None

    def has_pipewire_pulse(self) -> bool:
        try:
            info = self._pulse_connect().server_info()
        except pulsectl.PulseError:
            return False
        return "pipewire" in (getattr(info, "server_name", "") or "").lower()

    def _default_sink_name(self) -> str:
        try:
            return self._pulse_connect().server_info().default_sink_name or ""
        except pulsectl.PulseError as e:
            self._log.warning("Could not query the default sink: %s", e)
            return ""

    def _is_own_sink(self, n: AudioNode) -> bool:
        return n.name == self.SINK_NAME or n.name == f"{self.SINK_NAME}.monitor"

    def eligible_nodes(self, options: CaptureOptions) -> List[AudioNode]:
        out: List[AudioNode] = []
        for n in sorted(self._graph.nodes.values(), key=lambda x: x.id):
            if self._is_own_sink(n) or is_internal_node(n):
                continue
            if is_input_stream(n):
                if options.ignore_inputs:
                    continue
            elif not is_output_stream(n):
                continue
            if options.ignore_virtual and is_virtual_node(n):
                continue
            out.append(n)
        return out

    def list(self, options: CaptureOptions) -> ListResult:
        self.refresh()
        nodes: List[Node] = []
        for n in self.eligible_nodes(options):
            node = n.as_node()
            if node and node not in nodes:
                nodes.append(node)
        return ListResult(ok=True, nodes=nodes, has_compat_layer=self.has_pipewire_pulse())

    def ensure_sink(self) -> AudioNode:
        """
        I reuse a sink of the same name if one exists; only a sink I loaded myself is unloaded on stop.
        """
        self.refresh()
        sink = self._graph.find_node(self.SINK_NAME)
        if sink is not None and is_sink_node(sink):
            return sink

        try:
            pulse = self._pulse_connect()
            existing = next((s for s in pulse.sink_list() if s.name == self.SINK_NAME), None)
            if existing is None:
                args = " ".join(
                    [
                        f"sink_name={self.SINK_NAME}",
                        f'sink_properties=device.description="{self.SINK_DESC}"',
                    ]
                )
                self._sink_module_id = int(pulse.module_load("module-null-sink", args))
                self._log.info("Created capture sink %s (module %d)", self.SINK_NAME, self._sink_module_id)
        except pulsectl.PulseError as e:
            raise BackendCommandFailed(f"Failed to create capture sink via pipewire-pulse: {e}") from e

        self.refresh()
        sink = self._graph.find_node(self.SINK_NAME)
        if sink is None or not is_sink_node(sink):
            raise BackendCommandFailed("Capture sink was created via Pulse, but is not visible in PipeWire graph.")
        return sink

    def _destroy_sink_if_owned(self) -> None:
        if self._sink_module_id is None:
            return
        module_id, self._sink_module_id = self._sink_module_id, None
        try:
            self._pulse_connect().module_unload(module_id)
        except pulsectl.PulseError as e:
            raise BackendCommandFailed(f"Failed to remove capture sink: {e}") from e

    def _sink_monitor_ports(self, sink: AudioNode) -> List[PwPort]:
        outs = select_ports(self._graph, sink.id, "out")
        mons = [p for p in outs if p.is_monitor]
        if mons:
            return mons
        mon = self._graph.find_node(f"{sink.name}.monitor")
        return select_ports(self._graph, mon.id, "out") if mon is not None else []

    def _targets(self) -> List[AudioNode]:
        opts = self._options
        # inputs never feed the capture sink; the workaround handles them separately
        nodes = [n for n in self.eligible_nodes(opts) if is_output_stream(n)]

        if self._mode == "filters":
            return [n for n in nodes if any(matches(p, n.as_node()) for p in self._patterns)]

        if opts.only_default_speakers:
            name = self._default_sink_name()
            default = self._graph.find_node(name) if name else None
            if default is None:
                return nodes
            return [n for n in nodes if default.id in self._graph.linked_node_ids(n.id)]

        return nodes

    def _connect(self, src: List[PwPort], dst: List[PwPort]) -> LinkPairs:
        pairs = map_ports_1_to_1(src, dst)
        for o, i in pairs:
            if (o, i) in self._links:
                continue
            pw_link_connect(o, i)
            self._links.add((o, i))
        return pairs

    def _apply_workaround(self, sink: AudioNode) -> None:
        if not self._host_binary:
            self._log.warning("Microphone workaround enabled but no host binary is configured")
            return
        mon = self._sink_monitor_ports(sink)
        for n in self._graph.nodes.values():
            if not is_input_stream(n) or n.props.get("application.process.binary") != self._host_binary:
                continue
            self._connect(mon, select_ports(self._graph, n.id, "in"))

    def relink(self) -> None:
        """Links every currently matching stream into the capture sink."""
        if self._mode is None:
            return

        sink = self.ensure_sink()
        sink_in = select_ports(self._graph, sink.id, "in")
        if not sink_in:
            raise BackendCommandFailed("Capture sink has no input ports.")

        for n in self._targets():
            src = select_ports(self._graph, n.id, "out")
            if src:
                self._connect(src, sink_in)

        if self._options.workaround:
            self._apply_workaround(sink)

    def _start(self, mode: str, patterns: Sequence[Pattern], options: CaptureOptions) -> None:
        if self._mode is not None:
            self.stop()
        self._mode = mode
        self._patterns = list(patterns)
        self._options = options
        try:
            self.relink()
        except Exception:
            try:
                self.stop()
            except BackendCommandFailed as e:
                self._log.warning("Cleanup after failed start was incomplete: %s", e)
            raise

    def start_with_filters(self, patterns: Sequence[Pattern], options: CaptureOptions) -> None:
        if not patterns:
            raise ValueError("start_with_filters needs at least one pattern")
        self._start("filters", patterns, options)

    def start_system(self, options: CaptureOptions) -> None:
        self._start("system", [], options)

    def stop(self) -> None:
        self._mode = None
        self._patterns = []

        errors: List[str] = []
        for o, i in sorted(self._links):
            try:
                pw_link_disconnect(o, i)
            except BackendCommandFailed as e:
                errors.append(str(e))
        self._links.clear()

        try:
            self._destroy_sink_if_owned()
        except BackendCommandFailed as e:
            errors.append(str(e))

        if errors:
            raise BackendCommandFailed("; ".join(errors))
