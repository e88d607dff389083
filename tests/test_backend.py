from types import SimpleNamespace

import pytest

import backend as backend_mod
from backend import VirtmicBackend
from errors import BackendCommandFailed
from models import CaptureOptions, Node, Pattern
from pw_dump import parse_graph

SINK_IN = ["screenshare-audio:playback_FL", "screenshare-audio:playback_FR"]


@pytest.fixture
def rig(monkeypatch, pw_data, fake_pulse):
    made = []
    removed = []

    def connect(o, i):
        made.append((o, i))

    def disconnect(o, i):
        removed.append((o, i))
        return True

    monkeypatch.setattr(backend_mod, "dump_graph", lambda: parse_graph(pw_data))
    monkeypatch.setattr(backend_mod, "pw_link_connect", connect)
    monkeypatch.setattr(backend_mod, "pw_link_disconnect", disconnect)
    monkeypatch.setattr(backend_mod.pulsectl, "Pulse", lambda name: fake_pulse)

    be = VirtmicBackend(host_binary="vesktop")
    return SimpleNamespace(be=be, made=made, removed=removed, pulse=fake_pulse, data=pw_data)


def test_list_default_options_only_app_outputs(rig):
    res = rig.be.list(CaptureOptions())

    assert res.ok
    assert res.has_compat_layer
    assert [n.name for n in res.nodes] == ["Firefox", "Spotify"]
    assert res.nodes[0] == Node(
        name="Firefox",
        process_binary="firefox",
        process_id="4242",
        media_name="YouTube",
        media_class="Stream/Output/Audio",
    )


def test_list_can_include_inputs_and_virtual_nodes(rig):
    res = rig.be.list(CaptureOptions(ignore_inputs=False, ignore_virtual=False))

    assert [n.name for n in res.nodes] == ["Firefox", "Spotify", "Chromium input", "Loopback"]


def test_list_reports_missing_pipewire_pulse(rig):
    rig.pulse.server_name = "pulseaudio"

    assert rig.be.list(CaptureOptions()).has_compat_layer is False


def test_start_with_filters_links_matching_streams(rig):
    rig.be.start_with_filters([Pattern(name="Spotify")], CaptureOptions())

    assert rig.pulse.loaded and rig.pulse.loaded[0][0] == "module-null-sink"
    assert rig.made == [
        ("spotify:output_FL", SINK_IN[0]),
        ("spotify:output_FR", SINK_IN[1]),
    ]
    assert rig.be.active


def test_start_with_filters_uses_subset_matching(rig):
    rig.be.start_with_filters([Pattern(name="Firefox", media_name="Twitch")], CaptureOptions())
    assert rig.made == []

    rig.be.start_with_filters([Pattern(process_binary="firefox")], CaptureOptions())
    assert [o for o, _ in rig.made] == ["Firefox:output_FL", "Firefox:output_FR"]


def test_start_with_filters_rejects_empty_list(rig):
    with pytest.raises(ValueError):
        rig.be.start_with_filters([], CaptureOptions())


def test_start_system_only_default_speakers(rig):
    rig.be.start_system(CaptureOptions(only_default_speakers=True))

    assert {o.split(":")[0] for o, _ in rig.made} == {"Firefox"}


def test_start_system_all_outputs(rig):
    rig.be.start_system(CaptureOptions(only_default_speakers=False))

    assert {o.split(":")[0] for o, _ in rig.made} == {"Firefox", "spotify"}


def test_workaround_feeds_sink_monitor_into_host_input(rig):
    rig.be.start_with_filters([Pattern(name="Spotify")], CaptureOptions(workaround=True))

    assert ("screenshare-audio:monitor_FL", "vesktop-input:input_MONO") in rig.made


def test_stop_removes_links_and_owned_sink_once(rig):
    rig.be.start_with_filters([Pattern(name="Spotify")], CaptureOptions())
    rig.be.stop()

    assert sorted(rig.removed) == sorted(rig.made)
    assert rig.pulse.unloaded == [17]
    assert not rig.be.active

    rig.be.stop()
    assert rig.pulse.unloaded == [17]
    assert len(rig.removed) == len(rig.made)


def test_relink_picks_up_new_matching_stream(rig, pw_data):
    from conftest import pw_node, pw_port

    rig.be.start_with_filters([Pattern(name="Spotify")], CaptureOptions())
    first = list(rig.made)

    pw_data.extend(
        [
            pw_node(200, "spotify-2", "Stream/Output/Audio", application_name="Spotify"),
            pw_port(201, 200, "output_FL", "out", "FL"),
            pw_port(202, 200, "output_FR", "out", "FR"),
        ]
    )
    rig.be.relink()

    assert rig.made[: len(first)] == first
    assert rig.made[len(first):] == [
        ("spotify-2:output_FL", SINK_IN[0]),
        ("spotify-2:output_FR", SINK_IN[1]),
    ]
    assert len(rig.pulse.loaded) == 1


def test_failed_start_cleans_up(rig, monkeypatch):
    def boom(o, i):
        raise BackendCommandFailed("pw-link connect failed")

    monkeypatch.setattr(backend_mod, "pw_link_connect", boom)

    with pytest.raises(BackendCommandFailed):
        rig.be.start_system(CaptureOptions(only_default_speakers=False))

    assert not rig.be.active
    assert rig.pulse.unloaded == [17]
