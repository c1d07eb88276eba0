# remotefs

A small file server and matching client that talk a simple line-based
protocol over TCP. Each connection carries one request; the server answers
it and closes the connection. The client can upload a file (optionally
marking it read-only), download a file, delete a file, and list a directory
or show a single file's size and permission.

## Installation

```
pip install .
```

## Running the server

```
rfserver [--host HOST] [--port PORT]
```

By default the server binds all interfaces on port 2024 and prints
`Server listening on port 2024...`. Each client connection is handled on
its own thread. Paths sent by clients are used as given, so relative paths
resolve against the server's working directory. Stop it with Ctrl+C.

## Using the client

```
rfs [--host HOST] [--port PORT] COMMAND args...

rfs WRITE local_file remote_file [READONLY]
rfs GET remote_file local_file
rfs RM remote_file
rfs LS [path]
```

The client connects to 127.0.0.1, port 2024, unless `--host` or `--port`
say otherwise.

- `WRITE` uploads `local_file` as `remote_file` and prints
  `File sent successfully.` when the server answers `OK`; otherwise it
  prints the server's reply and exits with status 1. With `READONLY`, the
  server refuses later overwrites or deletions of that file. Empty files
  are rejected by the server (`ERROR: Invalid file size`).
- `GET` downloads `remote_file` and saves it as `local_file`. If the file
  does not exist on the server, the server reports a size of 0 and the
  local file is created empty.
- `RM` deletes `remote_file` unless it was marked read-only, and prints
  `Server response: ...` (`OK`, `FAIL: File not found`,
  `FAIL: Permission denied`, or an error message).
- `LS` prints a directory's entries (without `.` and `..`), or the name,
  size and permission of a single file. Without a path it lists the
  server's current directory.

Errors on the client side (the server cannot be reached, a local file
cannot be read or written) are printed and give exit status 1.

## Using it from Python

```python
from remotefs.client import ClientError, RemoteFileClient

client = RemoteFileClient("127.0.0.1", 2024)
try:
    print(client.write("notes.txt", "notes.txt", readonly=True))  # "OK"
    received = client.get("notes.txt", "copy.txt")                # bytes received
    print(client.ls("."))
    print(client.rm("copy.txt"))
except ClientError as exc:
    print("request failed:", exc)
```

`write` and `rm` return the server's reply without its trailing newline;
`ls` returns the reply text as sent; `get` returns the number of bytes
written to the local file. Each raises `ClientError` when the connection
or a local file operation fails.

A server can be embedded too. `server_address` is a property giving the
bound `(host, port)`; port 0 picks a free port. `FileServer` is a context
manager, and `shutdown()` stops `serve_forever()` from another thread and
closes the listening socket.

```python
import threading

from remotefs.permissions import Permission, PermissionTable
from remotefs.server import FileServer

table = PermissionTable(100)
with FileServer("127.0.0.1", 0, table) as server:
    print(server.server_address)
    thread = threading.Thread(target=server.serve_forever)
    thread.start()
    ...
    server.shutdown()
    thread.join()

table.set("report.txt", Permission.READONLY)
table.check("report.txt", require_write=True)  # False
```

`PermissionTable` is thread-safe. Files without an entry count as
writable, and once the table holds `capacity` entries, new files are not
recorded.

## What it does not do

- Read-only marks live in memory only: they are lost when the server
  stops, and at most `capacity` (100 by default) files are tracked.
- There is no authentication, encryption or path restriction; any client
  that can reach the port can read, write and delete any file the server
  process can.
- Only one file is transferred per connection, and there is no resuming,
  no directory upload and no way to create or remove directories apart
  from `RM` on an empty directory.