from rssterm.debug import (
    STYLE_DELTA,
    STYLE_DELTA_DOWN,
    STYLE_DELTA_UP,
    STYLE_FPS,
    FpsWidget,
)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def render_at(widget, clock, *times):
    result = []
    for moment in times:
        clock.now = moment
        result = widget.render()
    return result


def test_no_readout_before_first_measurement():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    assert render_at(widget, clock, 0.2, 0.5, 0.9) == []


def test_needs_more_than_two_frames():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    assert render_at(widget, clock, 5.0, 6.0) == []
    assert widget.curr_fps is None


def test_first_measurement_reports_rate():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    segments = render_at(widget, clock, 0.5, 0.8, 2.0)
    assert segments == [("1.50 fps", STYLE_FPS)]


def test_rising_rate_is_marked_up():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    render_at(widget, clock, 0.5, 1.0, 2.0)
    segments = render_at(widget, clock, 2.2, 2.4, 2.6, 2.8, 3.0, 3.2)
    assert widget.prev_fps < widget.curr_fps
    text, style = segments[-1]
    assert style == STYLE_DELTA_UP
    assert "▲" in text


def test_falling_rate_is_marked_down():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    render_at(widget, clock, 0.2, 0.4, 0.6, 0.8, 1.0, 1.2)
    segments = render_at(widget, clock, 2.0, 3.0, 4.0)
    assert widget.prev_fps > widget.curr_fps
    text, style = segments[-1]
    assert style == STYLE_DELTA_DOWN
    assert "▼" in text


def test_steady_rate_counts_as_no_change():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    render_at(widget, clock, 0.5, 1.0, 2.0)
    segments = render_at(widget, clock, 2.5, 3.0, 4.0)
    assert widget.prev_fps == widget.curr_fps
    assert segments[0][1] == STYLE_FPS
    assert segments[-1][1] == STYLE_DELTA


def test_readout_persists_between_measurements():
    clock = FakeClock()
    widget = FpsWidget(clock=clock)
    first = render_at(widget, clock, 0.5, 0.8, 2.0)
    later = render_at(widget, clock, 2.1)
    assert later == first