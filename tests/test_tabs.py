import pytest

from zimdesk.tabs import (
    Tab,
    TabKind,
    TabModel,
    display_title,
    zoom_in,
    zoom_out,
)


def make_model(n):
    model = TabModel()
    tabs = [model.create_new_tab(False, False) for _ in range(n)]
    return model, tabs


def test_initial_state_has_library_only():
    model = TabModel()
    assert model.real_tab_count() == 1
    assert model.count == 2
    assert model.current_tab().kind is TabKind.LIBRARY
    assert model.library_page_displayed


def test_create_new_tab_appends_before_plus():
    model, tabs = make_model(2)
    assert list(model.tabs[1:]) == tabs
    assert model.current_index == 0


def test_create_new_tab_set_current():
    model = TabModel()
    tab = model.create_new_tab(True, False)
    assert model.current_tab() is tab
    assert not model.library_page_displayed


def test_adjacent_tab_inserted_after_current():
    model, tabs = make_model(3)
    model.set_current_index(1)
    new = model.create_new_tab(False, True)
    assert model.tabs[2] is new
    assert model.current_tab() is tabs[0]


def test_plus_button_cannot_be_selected():
    model, tabs = make_model(2)
    model.set_current_index(model.real_tab_count())
    assert model.current_tab() is tabs[-1]


def test_invalid_index_ignored():
    model, _ = make_model(1)
    model.set_current_index(99)
    assert model.current_index == 0


def test_next_and_previous_wrap():
    model, tabs = make_model(2)
    model.set_current_index(model.real_tab_count() - 1)
    model.move_to_next_tab()
    assert model.current_index == 0
    model.move_to_previous_tab()
    assert model.current_tab() is tabs[-1]


def test_shortcut_selects_tab():
    model, tabs = make_model(3)
    model.select_by_shortcut(2)
    assert model.current_tab() is tabs[0]


def test_shortcut_out_of_range_ignored():
    model, _ = make_model(1)
    model.select_by_shortcut(0)
    assert model.current_index == 0
    model.select_by_shortcut(model.count)
    assert model.current_index == 0


def test_close_last_real_tab_selects_previous():
    model, tabs = make_model(2)
    model.set_current_index(2)
    model.close_tab(2)
    assert model.tabs == (model.tabs[0], tabs[0])
    assert model.current_tab() is tabs[0]


def test_close_middle_tab_selects_next():
    model, tabs = make_model(3)
    model.set_current_index(1)
    model.close_tab(1)
    assert tabs[0] not in model.tabs
    assert model.current_tab() is tabs[1]


def test_plus_and_library_cannot_be_closed():
    model, _ = make_model(1)
    before = model.tabs
    model.close_tab(model.real_tab_count())
    model.close_tab(0)
    assert model.tabs == before


def test_close_out_of_range_raises():
    model = TabModel()
    with pytest.raises(IndexError):
        model.close_tab(-1)


def test_close_tabs_by_zim_id():
    model, tabs = make_model(3)
    tabs[0].zim_id = "abc"
    tabs[2].zim_id = "abc"
    model.close_tabs_by_zim_id("abc")
    assert model.tabs[1:] == (tabs[1],)


def test_move_tab_refuses_library_and_plus():
    model, _ = make_model(2)
    before = model.tabs
    assert model.move_tab(1, 0) is False
    assert model.move_tab(1, model.real_tab_count()) is False
    assert model.tabs == before


def test_move_tab_swaps_and_keeps_current():
    model, tabs = make_model(2)
    model.set_current_index(1)
    assert model.move_tab(1, 2) is True
    assert model.tabs[1:] == (tabs[1], tabs[0])
    assert model.current_tab() is tabs[0]


def test_open_settings_reuses_existing():
    model, _ = make_model(1)
    settings = model.open_settings()
    assert model.current_tab() is settings
    model.set_current_index(0)
    assert model.open_settings() is settings
    assert sum(t.kind is TabKind.SETTINGS for t in model.tabs) == 1
    assert model.current_title == ""


def test_set_title_of_zim_url_uses_path():
    model = TabModel()
    tab = model.create_new_tab(True, False)
    model.set_title_of("zim://abc.zim/A/Page")
    assert tab.title == "/A/Page"
    assert tab.tooltip == tab.title
    assert model.current_title == "/A/Page"


def test_set_title_of_foreign_tab_ignored():
    model = TabModel()
    stranger = Tab(TabKind.ZIM)
    model.set_title_of("Hello", stranger)
    assert stranger.title == ""


def test_display_title_plain():
    assert display_title("Hello") == "Hello"


def test_tab_size_hint():
    model, _ = make_model(1)
    assert model.tab_size_hint(0) == (40, 40)
    assert model.tab_size_hint(1) == (205, 40)


def test_current_zim_id():
    model = TabModel()
    assert model.current_zim_id() == ""
    tab = model.create_new_tab(True, False)
    tab.zim_id = "book"
    assert model.current_zim_id() == "book"


def test_zoom_limits():
    assert zoom_in(5.0) == 5.0
    assert zoom_out(0.25) == 0.25
    assert zoom_out(zoom_in(1.0)) == pytest.approx(1.0)
    assert zoom_in(1.0) > 1.0