import os
import socket
import struct
import sys
import tempfile
import threading
import time
from pathlib import Path

import pytest

from zimdesk.localpeer import ACK, LocalPeer, make_socket_name, qchecksum


@pytest.fixture
def short_dir():
    base = "/tmp" if os.path.isdir("/tmp") else None
    path = tempfile.mkdtemp(prefix="zp", dir=base)
    yield path
    for entry in Path(path).iterdir():
        entry.unlink()
    os.rmdir(path)


def _serve_until_done(server, thread, limit=10.0):
    deadline = time.monotonic() + limit
    while thread.is_alive() and time.monotonic() < deadline:
        server.receive_connection()
        time.sleep(0.01)
    thread.join(1)


def test_qchecksum_standard_check_value():
    assert qchecksum(b"123456789") == 0x906E


def test_qchecksum_empty_and_str_equal_bytes():
    assert qchecksum(b"") == 0
    assert qchecksum("kiwix") == qchecksum(b"kiwix")


def test_socket_name_prefix_keeps_six_letters():
    name = make_socket_name("a1b2c3d4e5f6g7")
    assert name.startswith("qtsingleapp-abcdef-")


def test_socket_name_contains_checksum():
    name = make_socket_name("kiwix-desktop")
    parts = name.split("-")
    assert parts[0] == "qtsingleapp"
    assert parts[1] == "kiwixd"
    assert int(parts[2], 16) == qchecksum("kiwix-desktop")


def test_socket_name_differs_between_ids():
    assert make_socket_name("alpha") != make_socket_name("beta")


def test_empty_id_uses_program_path(short_dir):
    with LocalPeer("", directory=short_dir) as peer:
        assert peer.application_id().endswith(os.path.basename(sys.argv[0]).lower() if os.name == "nt" else os.path.basename(sys.argv[0]))


def test_lock_file_created(short_dir):
    with LocalPeer("app", directory=short_dir) as peer:
        assert peer.application_id() == "app"
        assert Path(peer.lock_path).exists()
        assert peer.lock_path.endswith("-lockfile")


def test_first_is_server_second_is_client(short_dir):
    with LocalPeer("app", directory=short_dir) as first, LocalPeer("app", directory=short_dir) as second:
        assert first.is_client() is False
        assert first.is_client() is False
        assert second.is_client() is True


def test_send_without_running_instance_fails_and_takes_over(short_dir):
    with LocalPeer("app", directory=short_dir) as peer, LocalPeer("app", directory=short_dir) as other:
        assert peer.send_message("hello", 500) is False
        assert other.is_client() is True


def test_receive_connection_without_pending_returns_none(short_dir):
    with LocalPeer("app", directory=short_dir) as peer:
        assert peer.receive_connection() is None
        peer.is_client()
        assert peer.receive_connection() is None


@pytest.mark.parametrize("message", ["hello", "", "Überall ✓ 日本"])
def test_message_round_trip(short_dir, message):
    with LocalPeer("app", directory=short_dir) as server, LocalPeer("app", directory=short_dir) as client:
        assert server.is_client() is False
        received = []
        server.add_listener(received.append)
        result = {}
        thread = threading.Thread(target=lambda: result.setdefault("ok", client.send_message(message, 5000)))
        thread.start()
        _serve_until_done(server, thread)
        assert result["ok"] is True
        assert received == [message]


def test_wire_format_and_ack(short_dir):
    with LocalPeer("app", directory=short_dir) as server:
        server.is_client()
        payload = "ping".encode("utf-8")
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as raw:
            raw.settimeout(5)
            raw.connect(server.socket_path)
            raw.sendall(struct.pack(">I", len(payload)) + payload)
            assert server.receive_connection() == "ping"
            assert raw.recv(3) == ACK


def test_close_releases_for_next_instance(short_dir):
    first = LocalPeer("app", directory=short_dir)
    assert first.is_client() is False
    first.close()
    assert not Path(first.socket_path).exists()
    with LocalPeer("app", directory=short_dir) as second:
        assert second.is_client() is False