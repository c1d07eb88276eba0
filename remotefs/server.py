"""A small multi-threaded file server speaking a line-based protocol.

Each connection carries one request: a command line followed by argument
lines (``WRITE``, ``GET``, ``RM`` or ``LS``), after which the server answers
and closes the connection.
"""

from __future__ import annotations

import argparse
import errno
import logging
import os
import re
import selectors
import socket
import stat
import threading

from .permissions import Permission, PermissionTable

DEFAULT_PORT = 2024
BUFFER_SIZE = 1024
_HEADER_LIMIT = BUFFER_SIZE - 1
_BACKLOG = 5
_POLL_INTERVAL = 0.2

_LINE = re.compile(rb"[^\n]+")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_FLAGS = {b"READONLY": Permission.READONLY, b"READWRITE": Permission.READWRITE}

logger = logging.getLogger(__name__)


def _parse_long(text: str) -> int:
    """Parse a leading integer the lenient way; no digits yields 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _payload_start(chunk: bytes, size_end: int) -> tuple[int, Permission]:
    """Locate where file data begins after a WRITE header and read its flag."""
    offset = min(size_end + 1, len(chunk))
    newline = chunk.find(b"\n", offset)
    line_end = newline if newline != -1 else len(chunk)
    permission = _FLAGS.get(chunk[offset:line_end])
    if permission is None:
        return offset, Permission.READWRITE
    return min(line_end + 1, len(chunk)), permission


class FileServer:
    """Serve WRITE, GET, RM and LS requests on a TCP socket."""

    def __init__(
        self,
        host: str = "",
        port: int = DEFAULT_PORT,
        permissions: PermissionTable | None = None,
    ) -> None:
        self.permissions = permissions if permissions is not None else PermissionTable()
        self._sock = socket.create_server((host, port), backlog=_BACKLOG)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._active = threading.Event()
        self._stopped = threading.Event()

    @property
    def server_address(self) -> tuple[str, int]:
        """The (host, port) the server is listening on."""
        host, port = self._sock.getsockname()[:2]
        return host, port

    def __enter__(self) -> FileServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @staticmethod
    def _reply(conn: socket.socket, text: str) -> None:
        conn.sendall(os.fsencode(text))

    def handle_client(self, conn: socket.socket) -> None:
        """Read one request from ``conn``, answer it and close the connection."""
        with conn:
            try:
                chunk = conn.recv(_HEADER_LIMIT)
                if not chunk:
                    logger.warning("Read failed or connection closed")
                    return
                self._dispatch(conn, chunk)
            except OSError as exc:
                logger.warning("Connection error: %s", exc)

    def _dispatch(self, conn: socket.socket, chunk: bytes) -> None:
        fields = list(_LINE.finditer(chunk))
        if not fields:
            self._reply(conn, "ERROR: No command received\n")
            return
        command = os.fsdecode(fields[0].group())
        arg1 = os.fsdecode(fields[1].group()) if len(fields) > 1 else None

        if command == "WRITE":
            self._handle_write(conn, chunk, fields)
        elif command == "GET":
            if arg1 is None:
                self._reply(conn, "ERROR: GET requires filename\n")
            else:
                self.handle_get(conn, arg1)
        elif command == "RM":
            if arg1 is None:
                self._reply(conn, "ERROR: RM requires filename\n")
            elif not self.permissions.check(arg1, require_write=True):
                self._reply(conn, "ERROR: Cannot delete read-only file\n")
            else:
                self.handle_rm(conn, arg1)
                self.permissions.discard(arg1)
        elif command == "LS":
            self.handle_ls(conn, arg1)
        else:
            self._reply(conn, "ERROR: Unknown command\n")

    def _handle_write(self, conn: socket.socket, chunk: bytes, fields: list[re.Match[bytes]]) -> None:
        if len(fields) < 3:
            self._reply(conn, "ERROR: WRITE requires filename and size\n")
            return
        path = os.fsdecode(fields[1].group())
        if not self.permissions.check(path, require_write=True):
            self._reply(conn, "ERROR: File is read-only\n")
            return

        size = _parse_long(fields[2].group().decode("ascii", "replace"))
        offset, permission = _payload_start(chunk, fields[2].end())
        logger.debug("WRITE path=%s size=%d permission=%s", path, size, permission.value)
        if size <= 0:
            self._reply(conn, "ERROR: Invalid file size\n")
            return

        try:
            out = open(path, "wb")
        except OSError as exc:
            logger.error("Failed to open file %s: %s", path, exc)
            self._reply(conn, "ERROR: Could not create file\n")
            return
        with out:
            head = chunk[offset:offset + size]
            out.write(head)
            remaining = size - len(head)
            while remaining > 0:
                data = conn.recv(min(remaining, BUFFER_SIZE))
                if not data:
                    break
                out.write(data)
                remaining -= len(data)

        self.permissions.set(path, permission)
        self._reply(conn, "OK\n")

    def handle_get(self, conn: socket.socket, path: str) -> None:
        """Send the size of ``path`` on one line followed by its contents."""
        try:
            source = open(path, "rb")
        except OSError as exc:
            logger.warning("File not found on server: %s (%s)", path, exc)
            self._reply(conn, "0\n")
            return
        with source:
            size = os.fstat(source.fileno()).st_size
            self._reply(conn, f"{size}\n")
            for block in iter(lambda: source.read(BUFFER_SIZE), b""):
                conn.sendall(block)

    def handle_rm(self, conn: socket.socket, path: str) -> None:
        """Delete ``path`` and report ``OK`` or the reason for failure."""
        if not path:
            self._reply(conn, "ERROR: Invalid filename\n")
            return
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                os.rmdir(path)
            else:
                os.remove(path)
        except OSError as exc:
            if exc.errno == errno.ENOENT:
                reason = "File not found"
            elif exc.errno == errno.EACCES:
                reason = "Permission denied"
            else:
                reason = f"Error {exc.errno}"
            logger.warning("Delete failed: %s", exc)
            self._reply(conn, f"FAIL: {reason}\n")
            return
        logger.info("Deleted file: %s", path)
        self._reply(conn, "OK\n")

    def handle_ls(self, conn: socket.socket, path: str | None) -> None:
        """List a directory's entries, or describe a single file."""
        try:
            info = os.stat(path) if path is not None else None
        except OSError:
            info = None
        if info is None:
            self._reply(conn, "ERROR: File or directory not found\n")
            return

        if stat.S_ISDIR(info.st_mode):
            try:
                names = os.listdir(path)
            except OSError:
                self._reply(conn, "ERROR: Could not open directory\n")
                return
            for name in names:
                self._reply(conn, f"{name}\n")
        else:
            access = "READWRITE" if self.permissions.check(path, require_write=False) else "READONLY"
            self._reply(
                conn,
                f"File: {path}\nSize: {info.st_size} bytes\nPermission: {access}\n",
            )

    def serve_forever(self) -> None:
        """Accept connections until :meth:`shutdown`, one thread per client."""
        with self._lock:
            if self._stop.is_set():
                return
            self._active.set()
            self._stopped.clear()
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(self._sock, selectors.EVENT_READ)
                while not self._stop.is_set():
                    if not selector.select(timeout=_POLL_INTERVAL):
                        continue
                    try:
                        conn, _ = self._sock.accept()
                    except OSError as exc:
                        logger.warning("Accept failed: %s", exc)
                        continue
                    worker = threading.Thread(target=self.handle_client, args=(conn,), daemon=True)
                    worker.start()
                    logger.info("New client connected in thread %s", worker.name)
        finally:
            self._active.clear()
            self._stopped.set()

    def shutdown(self) -> None:
        """Stop the accept loop and close the listening socket."""
        with self._lock:
            self._stop.set()
            active = self._active.is_set()
        if active:
            self._stopped.wait()
        self._sock.close()


def main(argv: list[str] | None = None) -> int:
    """Run the file server from the command line."""
    parser = argparse.ArgumentParser(description="Serve files over a simple line protocol.")
    parser.add_argument("--host", default="", help="address to bind (default: all interfaces)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    server = FileServer(args.host, args.port)
    print(f"Server listening on port {server.server_address[1]}...", flush=True)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())