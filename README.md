# zimdesk

The logic behind a desktop reader for ZIM archives, with no GUI toolkit
required.

## Modules

### `zimdesk.lockedfile`

`LockedFile` puts advisory locks on a file; `LockMode` names them
(`NO_LOCK`, `READ_LOCK`, `WRITE_LOCK`). Read locks may be shared, a write
lock is exclusive.

- `open(mode="r+")` opens the file (`"r+"` creates it when missing). Modes
  that truncate (`"w"`) are refused with `ValueError`.
- `lock(mode, block=True)` returns `True` when the file is locked in that mode
  afterwards; with `block=False` it returns `False` at once if the lock is
  held elsewhere. Holding another mode first releases it.
- `unlock()`, `is_locked()`, `lock_mode()`, `is_open()`, `close()`.
- Locking or unlocking a file that is not open raises `ValueError`.
- `LockedFile` is a context manager; leaving it closes the file and so
  releases the lock.

### `zimdesk.localpeer`

`LocalPeer` finds out whether another instance of an application is running
and passes text messages to it. The first instance takes a write lock on a
lock file in the temporary directory (or the directory given) and listens on
a Unix domain socket beside it. A message is sent as a big-endian 32-bit
length followed by its UTF-8 bytes, and is answered with `ack`.

- `is_client()` is `True` when another instance already holds the lock;
  otherwise this peer becomes the running instance and starts listening.
- `send_message(message, timeout=5000)` returns `True` once the running
  instance acknowledged the message (timeout in milliseconds).
- `receive_connection()` serves one waiting connection without blocking,
  calls the callbacks given to `add_listener`, and returns the message, or
  `None` when nothing was waiting.
- `application_id()`, `close()`.

The module also provides `make_socket_name(app_id)` and `qchecksum(data)`,
the CRC-16/X-25 checksum used in socket names.

### `zimdesk.singleapp`

`SingleCoreApplication(app_id="", directory=None)` wraps `LocalPeer`:
`is_running()`, `send_message(message, timeout)`, `id()`,
`add_listener(callback)`, `process_pending()` and `close()`. An empty
identifier stands for the path of the running program.

`SingleApplication` adds an activation window: any object with a `minimized`
attribute and `raise_window()` and `activate_window()` methods.
`set_activation_window(window, activate_on_message=True)` sets it,
`activation_window()` returns it, and `activate_window()` restores, raises
and activates it. With `activate_on_message` the window is activated each
time a message arrives, before the listeners are called.

### `zimdesk.translation`

`load_translation_file(path)` reads a JSON object of strings; an unreadable
or invalid file gives an empty dict. `Translation(directory)` looks up
`<language>.json` files in a directory: `set_translation(locale)` loads a
language such as `"fr"` or `"pt-BR"`, filling missing or empty texts from
`en.json` (and raises `RuntimeError` if `en.json` is missing or empty);
`get_text(key)` returns the text, or the key itself when it is unknown.

### `zimdesk.zimurl`

Helpers for `zim://` URLs, whose host names what is asked for:
`<id>.zim` for an archive entry, `<id>.meta` for book metadata, and
`<id>.search` (or `library.search?content=<id>`) for a full-text search.

- `classify_request(url)` returns a `RequestKind`
  (`CONTENT`, `META`, `SEARCH`, `UNKNOWN`).
- `content_path(url)`, `content_zim_id(url)`, `zim_id_from_url(url)`,
  `result_type_from_url(url)`.
- `parse_search_request(url)` returns a `SearchRequest` with `host`,
  `book_id`, `pattern`, `start` (default 0) and `page_length` (default 25),
  plus the `book_query` and `search_protocol_prefix` properties.
- `is_search_results_view(url)`, `accepts_navigation(url)` (only `zim`
  URLs), `name_for_id(zim_id)`, `id_for_name(name)`,
  `strip_mime_parameters(mimetype)`, `home_page_url(zim_id)`.

### `zimdesk.tabs`

`TabModel` models a tab strip that starts with a library tab and ends with a
"+" button drawn as a tab. It holds `Tab` objects of a `TabKind`
(`LIBRARY`, `SETTINGS`, `ZIM`) and offers `create_new_tab`, `open_settings`,
`set_current_index`, `current_tab`, `move_to_next_tab`,
`move_to_previous_tab`, `select_by_shortcut` (Alt+1 … Alt+9, 0 for the
tenth), `close_tab`, `close_tabs_by_zim_id`, `move_tab`, `set_title_of`,
`tab_size_hint`, `real_tab_count` and `current_zim_id`. The library tab
cannot be closed or moved and the "+" button is never selected.

`display_title(title)` shows only the path of a `zim://` URL;
`zoom_in(factor)` and `zoom_out(factor)` step by 0.1 between 0.25 and 5.

## Examples

### Single instance

```python
from zimdesk.singleapp import SingleCoreApplication

app = SingleCoreApplication("my-reader")
if app.is_running():
    app.send_message("open /path/to/file.zim", 5000)
else:
    app.add_listener(lambda msg: print("received", msg))
    app.process_pending()
```

### Translations

```python
from zimdesk.translation import Translation

tr = Translation(directory)  # holds en.json, fr.json, ...
tr.set_translation("fr")
print(tr.get_text("settings"))
```

### zim:// URLs

```python
from zimdesk.zimurl import classify_request, parse_search_request

classify_request("zim://abcd.zim/A/Page")      # RequestKind.CONTENT
req = parse_search_request("zim://abcd.search/?pattern=moon&start=10")
req.pattern, req.start, req.page_length         # ("moon", 10, 25)
```

### Tabs

```python
from zimdesk.tabs import TabModel

tabs = TabModel()
tab = tabs.create_new_tab(True, False)
tabs.set_title_of("zim://abcd.zim/A/Moon", tab)
tabs.move_to_next_tab()
```

## What this package does not do

It has no window, web view or other screen, and no command to start. It does
not open or read ZIM archives, serve their entries, run full-text searches or
render result pages: `zimdesk.zimurl` only takes URLs apart and routes them.
It keeps no settings store. `LocalPeer` needs Unix domain sockets.

## Installation

```
pip install zimdesk
```

## Running the tests

```
pip install "zimdesk[test]"
pytest
```