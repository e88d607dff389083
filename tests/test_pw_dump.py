import subprocess

import pytest

import pw_cli
from errors import BackendCommandFailed, IncompatibleNativeLibrary
from models import Node
from pw_channels import channel_from_port_props, normalize_channel
from pw_dump import parse_graph, props_from_obj
from pw_graph import (
    is_input_stream,
    is_internal_node,
    is_output_stream,
    is_sink_node,
    is_virtual_node,
    map_ports_1_to_1,
    select_ports,
)


def test_props_merge_prefers_info_and_stringifies():
    obj = {"props": {"a": 1, "b": "top"}, "info": {"props": {"b": "info", "c": None}}}

    assert props_from_obj(obj) == {"a": "1", "b": "info", "c": ""}


def test_parse_graph_nodes_ports_links(pw_data):
    g = parse_graph(pw_data)

    assert set(g.nodes) == {30, 40, 50, 60, 70, 80}
    ff = g.nodes[40]
    assert ff.name == "Firefox"
    assert ff.as_node() == Node(
        name="Firefox",
        process_binary="firefox",
        process_id="4242",
        media_name="YouTube",
        media_class="Stream/Output/Audio",
    )
    assert g.nodes[30].description == "Built-in Audio Analog Stereo"

    port = g.ports[41]
    assert port.full_name == "Firefox:output_FL"
    assert port.direction == "out"
    assert port.channel == "FL"
    assert [(lk.out_port_id, lk.in_port_id) for lk in g.links] == [(41, 31), (42, 32)]
    assert g.linked_node_ids(40) == [30]
    assert g.linked_node_ids(50) == []


def test_node_classification(pw_data):
    g = parse_graph(pw_data)

    assert is_output_stream(g.nodes[40])
    assert not is_output_stream(g.nodes[60])
    assert is_input_stream(g.nodes[60])
    assert is_sink_node(g.nodes[30])
    assert is_internal_node(g.nodes[70])
    assert is_virtual_node(g.nodes[80])
    assert not is_virtual_node(g.nodes[40])


def test_select_ports_orders_by_channel(pw_data):
    g = parse_graph(pw_data)

    outs = select_ports(g, 30, "out")
    assert [p.port_name for p in outs] == ["monitor_FL", "monitor_FR"]
    assert select_ports(g, 70, "out") == []


def test_map_ports_matches_channels_and_fans_out_mono(pw_data):
    g = parse_graph(pw_data)
    stereo = select_ports(g, 40, "out")
    sink_in = select_ports(g, 30, "in")

    assert map_ports_1_to_1(stereo, sink_in) == [
        ("Firefox:output_FL", f"{g.nodes[30].name}:playback_FL"),
        ("Firefox:output_FR", f"{g.nodes[30].name}:playback_FR"),
    ]

    mono = select_ports(g, 80, "out")
    assert len(map_ports_1_to_1(mono, sink_in)) == 2
    assert map_ports_1_to_1([], sink_in) == []


@pytest.mark.parametrize(
    "raw, expected",
    [("fl", "FL"), ("front-right", "FR"), ("aux07", "AUX7"), ("mono", "MONO"), ("", "")],
)
def test_normalize_channel(raw, expected):
    assert normalize_channel(raw) == expected


def test_channel_from_port_name_suffix():
    assert channel_from_port_props({"port.name": "monitor_FR"}) == "FR"
    assert channel_from_port_props({"audio.channel": "rl", "port.name": "x_FL"}) == "RL"
    assert channel_from_port_props({}) == ""


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(["pw"], returncode, stdout=stdout, stderr=stderr)


def test_pw_dump_json_errors(monkeypatch):
    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(stdout="not json"))
    with pytest.raises(BackendCommandFailed):
        pw_cli.pw_dump_json()

    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(stdout="{}"))
    with pytest.raises(BackendCommandFailed):
        pw_cli.pw_dump_json()

    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(1, stderr="can't connect: Host is down"))
    with pytest.raises(BackendCommandFailed):
        pw_cli.pw_dump_json()


def test_pw_dump_json_reports_incompatible_library(monkeypatch):
    err = "pw-dump: /lib/libstdc++.so.6: version `GLIBCXX_3.4.32' not found"
    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(127, stderr=err))

    with pytest.raises(IncompatibleNativeLibrary):
        pw_cli.pw_dump_json()


def test_pw_link_tolerates_existing_and_missing_links(monkeypatch):
    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(1, stderr="failed to link ports: File exists"))
    pw_cli.pw_link_connect("a:out", "b:in")

    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(1, stderr="No such file or directory"))
    assert pw_cli.pw_link_disconnect("a:out", "b:in") is False

    monkeypatch.setattr(pw_cli, "_run", lambda cmd: _completed(1, stderr="permission denied"))
    with pytest.raises(BackendCommandFailed):
        pw_cli.pw_link_connect("a:out", "b:in")
    with pytest.raises(BackendCommandFailed):
        pw_cli.pw_link_connect("", "b:in")
