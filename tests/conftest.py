import logging

import pytest

from dataset import Dataset


class LinearGradient:
    """Gray ramp that records every t it is asked for."""
    def __init__(self):
        self.calls = []

    def evaluate(self, t):
        self.calls.append(t)
        return (t, t, t, 1.0)


class RecordingSink:
    def __init__(self):
        self.uploads = []

    def set_primitives(self, buffer, count):
        self.uploads.append((buffer, count))


def make_text(rows, header="x y z vx vy vz", delimiter=" "):
    lines = [header]
    for row in rows:
        lines.append(delimiter.join(str(v) for v in row))
    return "\n".join(lines) + "\n"


@pytest.fixture
def gradient():
    return LinearGradient()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def three_rows():
    return [
        (1.0, 2.0, 3.0, 0.1, 0.0, 0.0),
        (-1.0, 0.5, 2.0, 0.0, 0.2, 0.0),
        (4.0, -2.0, 1.0, 0.0, 0.0, 0.3),
    ]


@pytest.fixture
def three_row_text(three_rows):
    return make_text(three_rows)


@pytest.fixture
def line_dataset():
    """Points on the x axis at 1, 2 and 6 with speeds 1, 2 and 4."""
    return Dataset(
        positions=[[1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [6.0, 0.0, 0.0]],
        velocities=[[1.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 4.0]],
    )


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
