from types import SimpleNamespace

import pytest

DEFAULT_SINK = "alsa_output.pci-0000_00_1f.3.analog-stereo"


def pw_node(oid, node_name, media_class, **props):
    p = {"node.name": node_name, "media.class": media_class}
    p.update({k.replace("_", "."): v for k, v in props.items()})
    return {"id": oid, "type": "PipeWire:Interface:Node", "info": {"props": p}}


def pw_port(oid, node_id, port_name, direction, channel=None):
    p = {"node.id": node_id, "port.name": port_name, "port.direction": direction}
    if channel:
        p["audio.channel"] = channel
    return {"id": oid, "type": "PipeWire:Interface:Port", "info": {"direction": direction, "props": p}}


def pw_link(oid, out_port, in_port):
    return {
        "id": oid,
        "type": "PipeWire:Interface:Link",
        "info": {"props": {"link.output.port": out_port, "link.input.port": in_port}},
    }


def capture_sink_objects(oid=90):
    return [
        pw_node(oid, "screenshare-audio", "Audio/Sink", node_description="Screen Share Audio"),
        pw_port(oid + 1, oid, "playback_FL", "in", "FL"),
        pw_port(oid + 2, oid, "playback_FR", "in", "FR"),
        pw_port(oid + 3, oid, "monitor_FL", "out", "FL"),
        pw_port(oid + 4, oid, "monitor_FR", "out", "FR"),
    ]


@pytest.fixture
def pw_data():
    return [
        {"id": 0, "type": "PipeWire:Interface:Core", "info": {"props": {}}},
        pw_node(30, DEFAULT_SINK, "Audio/Sink", node_description="Built-in Audio Analog Stereo"),
        pw_port(31, 30, "playback_FL", "in", "FL"),
        pw_port(32, 30, "playback_FR", "in", "FR"),
        pw_port(33, 30, "monitor_FL", "out", "FL"),
        pw_port(34, 30, "monitor_FR", "out", "FR"),
        pw_node(
            40,
            "Firefox",
            "Stream/Output/Audio",
            application_name="Firefox",
            application_process_binary="firefox",
            application_process_id="4242",
            media_name="YouTube",
        ),
        pw_port(41, 40, "output_FL", "out", "FL"),
        pw_port(42, 40, "output_FR", "out", "FR"),
        pw_node(
            50,
            "spotify",
            "Stream/Output/Audio",
            application_name="Spotify",
            application_process_binary="spotify",
            application_process_id="77",
            media_name="Spotify",
        ),
        pw_port(51, 50, "output_FL", "out", "FL"),
        pw_port(52, 50, "output_FR", "out", "FR"),
        pw_node(
            60,
            "vesktop-input",
            "Stream/Input/Audio",
            application_name="Chromium input",
            application_process_binary="vesktop",
            media_name="RecordStream",
        ),
        pw_port(61, 60, "input_MONO", "in", "MONO"),
        pw_node(70, "wp-notify", "Stream/Output/Audio", application_name="WirePlumber"),
        pw_node(80, "loopback-out", "Stream/Output/Audio", application_name="Loopback", node_virtual="true"),
        pw_port(81, 80, "output_MONO", "out", "MONO"),
        pw_link(100, 41, 31),
        pw_link(101, 42, 32),
    ]


class FakePulse:
    def __init__(self, data, server_name="PulseAudio (on PipeWire 1.0.5)"):
        self.data = data
        self.server_name = server_name
        self.loaded = []
        self.unloaded = []
        self.closed = False

    def server_info(self):
        return SimpleNamespace(server_name=self.server_name, default_sink_name=DEFAULT_SINK)

    def sink_list(self):
        return []

    def module_load(self, name, args):
        self.loaded.append((name, args))
        self.data.extend(capture_sink_objects())
        return 17

    def module_unload(self, index):
        self.unloaded.append(index)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_pulse(pw_data):
    return FakePulse(pw_data)
