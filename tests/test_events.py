import dataclasses

import pytest

from rssterm.events import Close, Exit, Expand, KeyInput, Open, Scroll


def test_scroll_to_top_and_bottom_flags():
    top = Scroll.to_top()
    bottom = Scroll.to_bottom()
    assert top.is_top and not top.is_bottom
    assert bottom.is_bottom and not bottom.is_top
    assert top.delta < Scroll(-1).delta < Scroll(1).delta < bottom.delta


def test_ordinary_scroll_is_neither_top_nor_bottom():
    event = Scroll(-1)
    assert event.delta == -1
    assert not event.is_top
    assert not event.is_bottom


def test_events_compare_by_value():
    assert Scroll(3) == Scroll(3)
    assert Scroll(3) != Scroll(-3)
    assert Expand() == Expand()
    assert Close() != Open()
    assert len({Exit(), Exit(), Close()}) == 2


def test_key_input_defaults_to_plain_press():
    key = KeyInput("j")
    assert key == KeyInput("j", ctrl=False, shift=False, pressed=True)
    assert key != KeyInput("j", ctrl=True)


def test_events_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Scroll(1).delta = 2  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        KeyInput("q").key = "x"  # type: ignore[misc]