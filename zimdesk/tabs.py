"""Model of the reader's tab strip.

The strip always starts with the library tab and ends with a "+" button
that is drawn as a tab but shows nothing. Between them sit settings and
content tabs. The library tab stays first and the "+" button stays last.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlsplit

from .zimurl import PROTOCOL_PREFIX

MIN_ZOOM = 0.25
MAX_ZOOM = 5.0
ZOOM_STEP = 0.1
ICON_TAB_SIZE = (40, 40)
TEXT_TAB_SIZE = (205, 40)


class TabKind(Enum):
    """What a tab shows."""

    LIBRARY = "library"
    SETTINGS = "settings"
    ZIM = "zim"


@dataclass(eq=False)
class Tab:
    """One tab of the strip; tabs compare by identity."""

    kind: TabKind
    zim_id: str = ""
    title: str = ""
    url: str = ""

    @property
    def tooltip(self) -> str:
        return self.title


def display_title(title: str) -> str:
    """The text shown for a page title; ``zim://`` URLs show only their path."""
    if title.startswith(PROTOCOL_PREFIX):
        return unquote(urlsplit(title).path)
    return title


def _clamp_zoom(factor: float) -> float:
    return max(min(factor, MAX_ZOOM), MIN_ZOOM)


def zoom_in(factor: float) -> float:
    """The zoom factor one step larger, kept between 0.25 and 5."""
    return _clamp_zoom(factor + ZOOM_STEP)


def zoom_out(factor: float) -> float:
    """The zoom factor one step smaller, kept between 0.25 and 5."""
    return _clamp_zoom(factor - ZOOM_STEP)


class TabModel:
    """The ordered tabs, the current one, and the rules for changing them."""

    def __init__(self) -> None:
        self._tabs: list[Tab] = [Tab(TabKind.LIBRARY)]
        self._current = 0

    @property
    def tabs(self) -> tuple[Tab, ...]:
        """The real tabs, without the "+" button."""
        return tuple(self._tabs)

    @property
    def count(self) -> int:
        """Number of tabs drawn, the "+" button included."""
        return len(self._tabs) + 1

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def library_page_displayed(self) -> bool:
        return self._tabs[self._current].kind is TabKind.LIBRARY

    @property
    def current_title(self) -> str:
        tab = self._tabs[self._current]
        return tab.title if tab.kind is TabKind.ZIM else ""

    def real_tab_count(self) -> int:
        """Number of tabs that show content: all but the "+" button."""
        return len(self._tabs)

    def set_current_index(self, index: int) -> None:
        """Select a tab; invalid indexes are ignored and the "+" button is never selected."""
        if not 0 <= index < self.count:
            return
        if index >= self.real_tab_count():
            index = self.real_tab_count() - 1
        self._current = index

    def current_tab(self) -> Tab:
        return self._tabs[self._current]

    def _insert(self, index: int, tab: Tab, set_current: bool) -> None:
        index = max(0, min(index, self.real_tab_count()))
        self._tabs.insert(index, tab)
        if index <= self._current:
            self._current += 1
        if set_current:
            self.set_current_index(index)

    def create_new_tab(self, set_current: bool, adjacent_to_current: bool) -> Tab:
        """Add a content tab next to the current one or just before the "+" button."""
        index = self._current + 1 if adjacent_to_current else self.real_tab_count()
        tab = Tab(TabKind.ZIM)
        self._insert(index, tab, set_current)
        return tab

    def open_settings(self) -> Tab:
        """Select the settings tab, opening it after the current tab if needed."""
        for index, tab in enumerate(self._tabs):
            if tab.kind is TabKind.SETTINGS:
                self.set_current_index(index)
                return tab
        tab = Tab(TabKind.SETTINGS, title="settings")
        self._insert(self._current + 1, tab, True)
        return tab

    def move_to_next_tab(self) -> None:
        index = self._current
        self.set_current_index(0 if index == self.real_tab_count() - 1 else index + 1)

    def move_to_previous_tab(self) -> None:
        index = self._current
        self.set_current_index(self.real_tab_count() - 1 if index <= 0 else index - 1)

    def select_by_shortcut(self, number: int) -> None:
        """Select the tab for the Alt+<number> shortcut; 0 stands for the tenth."""
        tab_n = 10 if number == 0 else number
        if tab_n >= self.count:
            return
        self.set_current_index(tab_n - 1)

    def close_tab(self, index: int) -> None:
        """Close a tab; the "+" button and the library tab cannot be closed."""
        if not 0 <= index < self.count:
            raise IndexError(f"no tab at index {index}")
        if index == self.real_tab_count():
            return
        if index == self.count - 2:
            self.set_current_index(index - 1)
        else:
            self.set_current_index(index + 1)
        if self._tabs[index].kind is TabKind.LIBRARY:
            return
        del self._tabs[index]
        if index < self._current:
            self._current -= 1

    def close_tabs_by_zim_id(self, zim_id: str) -> None:
        """Close every content tab showing the given book."""
        for index in reversed(range(self.real_tab_count())):
            tab = self._tabs[index]
            if tab.kind is TabKind.ZIM and tab.zim_id == zim_id:
                self.close_tab(index)

    def move_tab(self, source: int, target: int) -> bool:
        """Move a tab; refused (False) when it involves the library tab or the "+" button."""
        for index in (source, target):
            if not 0 <= index < self.count:
                raise IndexError(f"no tab at index {index}")
        last = self.real_tab_count()
        if last in (source, target) or 0 in (source, target):
            return False
        current = self._tabs[self._current]
        tab = self._tabs.pop(source)
        self._tabs.insert(target, tab)
        self._current = self._tabs.index(current)
        return True

    def set_title_of(self, title: str, tab: Tab | None = None) -> None:
        """Set a tab's title, by default the current tab's."""
        if tab is None:
            tab = self.current_tab()
        if tab not in self._tabs:
            return
        tab.title = display_title(title)

    def tab_size_hint(self, index: int) -> tuple[int, int]:
        """Width and height of a tab: the library tab holds only an icon."""
        if 0 <= index < self.real_tab_count() and self._tabs[index].kind is TabKind.LIBRARY:
            return ICON_TAB_SIZE
        return TEXT_TAB_SIZE

    def current_zim_id(self) -> str:
        tab = self.current_tab()
        return tab.zim_id if tab.kind is TabKind.ZIM else ""