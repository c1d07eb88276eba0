"""Command-line client for the remote file server's line-based protocol."""

from __future__ import annotations

import argparse
import os
import re
import socket
import sys
from pathlib import Path

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2024
BUFFER_SIZE = 1024
_HEADER_LIMIT = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_USAGE = """\
Usage: {prog} COMMAND args...
  WRITE local_file remote_file [READONLY]
  GET remote_file local_file
  RM remote_file
  LS [path]
"""


class ClientError(Exception):
    """Raised when a request cannot be carried out on the client side."""


def _atol(text: str) -> int:
    """Parse a leading integer leniently; text without digits yields 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _request(*lines: str) -> bytes:
    return b"".join(os.fsencode(line) + b"\n" for line in lines)


def _read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        try:
            block = sock.recv(BUFFER_SIZE)
        except ConnectionResetError:
            break
        if not block:
            break
        chunks.append(block)
    return b"".join(chunks)


class RemoteFileClient:
    """Issue WRITE, GET, RM and LS requests, one connection per request."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        self.host = host
        self.port = port

    def _connect(self) -> socket.socket:
        try:
            return socket.create_connection((self.host, self.port))
        except OSError as exc:
            raise ClientError(f"Connection failed: {exc}") from exc

    def write(self, local_path: str | os.PathLike[str], remote_path: str, readonly: bool = False) -> str:
        """Upload ``local_path`` as ``remote_path``; return the server's reply."""
        try:
            data = Path(local_path).read_bytes()
        except OSError as exc:
            raise ClientError(f"Cannot open local file: {exc}") from exc

        lines = ["WRITE", remote_path, str(len(data))]
        if readonly:
            lines.append("READONLY")
        with self._connect() as sock:
            try:
                sock.sendall(_request(*lines) + data)
            except OSError as exc:
                raise ClientError(f"File send failed: {exc}") from exc
            reply = _read_all(sock)
        return os.fsdecode(reply).rstrip("\n")

    def get(self, remote_path: str, local_path: str | os.PathLike[str]) -> int:
        """Download ``remote_path`` into ``local_path``; return the bytes received."""
        with self._connect() as sock, sock.makefile("rb") as stream:
            sock.sendall(_request("GET", remote_path))
            header = stream.readline(_HEADER_LIMIT)
            size = _atol(header.decode("ascii", "replace"))
            try:
                out = open(local_path, "wb")
            except OSError as exc:
                raise ClientError(f"Cannot open local file to write: {exc}") from exc
            received = 0
            with out:
                while received < size:
                    block = stream.read(min(BUFFER_SIZE, size - received))
                    if not block:
                        break
                    out.write(block)
                    received += len(block)
        return received

    def rm(self, remote_path: str) -> str:
        """Ask the server to delete ``remote_path``; return its reply."""
        with self._connect() as sock:
            sock.sendall(_request("RM", remote_path))
            reply = _read_all(sock)
        return os.fsdecode(reply).rstrip("\n")

    def ls(self, path: str = ".") -> str:
        """Return the server's listing of ``path``."""
        with self._connect() as sock:
            sock.sendall(_request("LS", path))
            reply = _read_all(sock)
        return os.fsdecode(reply)


def _run(client: RemoteFileClient, command: str, args: list[str]) -> int:
    if command == "WRITE":
        if len(args) == 3 and args[2] == "READONLY":
            reply = client.write(args[0], args[1], readonly=True)
        elif len(args) == 2:
            reply = client.write(args[0], args[1])
        else:
            print("Invalid WRITE usage", file=sys.stderr)
            return 1
        if not reply.startswith("OK"):
            print(f"Server response: {reply}", file=sys.stderr)
            return 1
        print("File sent successfully.")
    elif command == "GET" and len(args) == 2:
        client.get(args[0], args[1])
        print(f"File received and saved to {args[1]}")
    elif command == "RM" and len(args) == 1:
        print(f"Server response: {client.rm(args[0])}")
    elif command == "LS":
        sys.stdout.write(client.ls(args[0] if args else "."))
    else:
        print("Invalid usage.", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run one client command from the command line."""
    parser = argparse.ArgumentParser(add_help=True, usage=_USAGE.format(prog="%(prog)s"))
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("command", nargs="?")
    parser.add_argument("args", nargs="*")
    options = parser.parse_args(argv)

    if options.command is None:
        sys.stderr.write(_USAGE.format(prog=parser.prog))
        return 1

    client = RemoteFileClient(options.host, options.port)
    try:
        return _run(client, options.command, options.args)
    except ClientError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())