import socket
import threading

import pytest

from remotefs.client import ClientError, RemoteFileClient, main
from remotefs.server import FileServer


@pytest.fixture
def server():
    srv = FileServer("127.0.0.1", 0)
    worker = threading.Thread(target=srv.serve_forever, daemon=True)
    worker.start()
    yield srv
    srv.shutdown()
    worker.join(5)


@pytest.fixture
def client(server):
    host, port = server.server_address
    return RemoteFileClient(host, port)


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_write_then_get_round_trip(client, tmp_path):
    local = tmp_path / "local.bin"
    local.write_bytes(b"hello world")
    remote = tmp_path / "remote.bin"
    assert client.write(local, str(remote)) == "OK"
    assert remote.read_bytes() == b"hello world"

    fetched = tmp_path / "fetched.bin"
    assert client.get(str(remote), fetched) == len(b"hello world")
    assert fetched.read_bytes() == b"hello world"


def test_large_file_round_trip(client, tmp_path):
    payload = bytes(range(256)) * 20
    local = tmp_path / "big.bin"
    local.write_bytes(payload)
    remote = tmp_path / "big_remote.bin"
    assert client.write(local, str(remote)) == "OK"
    fetched = tmp_path / "big_fetched.bin"
    assert client.get(str(remote), fetched) == len(payload)
    assert fetched.read_bytes() == payload


def test_readonly_file_cannot_be_overwritten_or_removed(client, tmp_path):
    local = tmp_path / "a.txt"
    local.write_bytes(b"first")
    remote = tmp_path / "ro.txt"
    assert client.write(local, str(remote), readonly=True) == "OK"

    local.write_bytes(b"second")
    assert client.write(local, str(remote)) == "ERROR: File is read-only"
    assert remote.read_bytes() == b"first"
    assert client.rm(str(remote)) == "ERROR: Cannot delete read-only file"
    assert remote.exists()


def test_write_empty_file_is_rejected(client, tmp_path):
    local = tmp_path / "empty.txt"
    local.write_bytes(b"")
    assert client.write(local, str(tmp_path / "out.txt")) == "ERROR: Invalid file size"


def test_write_missing_local_file_raises(client, tmp_path):
    with pytest.raises(ClientError):
        client.write(tmp_path / "missing.txt", str(tmp_path / "out.txt"))


def test_get_missing_remote_gives_empty_file(client, tmp_path):
    fetched = tmp_path / "fetched.txt"
    assert client.get(str(tmp_path / "nope.txt"), fetched) == 0
    assert fetched.read_bytes() == b""


def test_rm_existing_and_missing(client, tmp_path):
    target = tmp_path / "gone.txt"
    target.write_bytes(b"x")
    assert client.rm(str(target)) == "OK"
    assert not target.exists()
    assert client.rm(str(target)) == "FAIL: File not found"


def test_ls_directory_lists_entries(client, tmp_path):
    (tmp_path / "one.txt").write_bytes(b"1")
    (tmp_path / "two.txt").write_bytes(b"2")
    listing = client.ls(str(tmp_path))
    assert sorted(listing.splitlines()) == ["one.txt", "two.txt"]


def test_ls_file_shows_metadata(client, tmp_path):
    target = tmp_path / "meta.txt"
    target.write_bytes(b"12345")
    listing = client.ls(str(target))
    assert listing == f"File: {target}\nSize: 5 bytes\nPermission: READWRITE\n"


def test_ls_missing_path(client, tmp_path):
    assert client.ls(str(tmp_path / "missing")) == "ERROR: File or directory not found\n"


def test_connection_refused_raises():
    client = RemoteFileClient("127.0.0.1", _free_port())
    with pytest.raises(ClientError):
        client.rm("anything")


def test_main_without_command_prints_usage(capsys):
    assert main([]) == 1
    assert "WRITE local_file remote_file [READONLY]" in capsys.readouterr().err


def test_main_invalid_write_usage(capsys):
    assert main(["WRITE", "only_one"]) == 1
    assert "Invalid WRITE usage" in capsys.readouterr().err


def test_main_invalid_command(capsys):
    assert main(["GET", "only_one"]) == 1
    assert "Invalid usage." in capsys.readouterr().err


def test_main_write_and_rm(server, tmp_path, capsys):
    port = str(server.server_address[1])
    local = tmp_path / "src.txt"
    local.write_bytes(b"data")
    remote = tmp_path / "dst.txt"
    assert main(["--port", port, "WRITE", str(local), str(remote)]) == 0
    assert "File sent successfully." in capsys.readouterr().out
    assert remote.read_bytes() == b"data"

    assert main(["--port", port, "RM", str(remote)]) == 0
    assert "Server response: OK" in capsys.readouterr().out
    assert not remote.exists()


def test_main_get(server, tmp_path, capsys):
    port = str(server.server_address[1])
    remote = tmp_path / "remote.txt"
    remote.write_bytes(b"payload")
    local = tmp_path / "copy.txt"
    assert main(["--port", port, "GET", str(remote), str(local)]) == 0
    assert f"File received and saved to {local}" in capsys.readouterr().out
    assert local.read_bytes() == b"payload"


def test_main_connection_failure(capsys):
    assert main(["--port", str(_free_port()), "LS"]) == 1
    assert "Connection failed" in capsys.readouterr().err