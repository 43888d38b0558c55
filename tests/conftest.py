"""Shared fixtures: small canvases and parameter sets that render quickly."""

import pytest

from halftonelab import Params, RenderMode, Shape, SourceMode

BLACK = "#000000"
WHITE = "#ffffff"


def flat_params(brightness=0.0, **halftone):
    """Uniform source field: contrast 0 pins every pixel to mid-gray plus brightness."""
    hp = {"fg_color": BLACK, "bg_color": WHITE}
    hp.update(halftone)
    return Params().replace(
        noise={"contrast": 0.0, "brightness": brightness},
        halftone=hp,
    )


@pytest.fixture
def flat():
    """Factory for uniform-source parameters."""
    return flat_params


@pytest.fixture
def params():
    """Default parameters with black ink on white."""
    return Params().replace(halftone={"fg_color": BLACK, "bg_color": WHITE})


@pytest.fixture
def gradient_params():
    """Left-to-right gradient, smooth vertical-period lines."""
    return Params(source_mode=SourceMode.GRADIENT, render_mode=RenderMode.SMOOTH).replace(
        gradient={"direction": 0, "start": 0, "end": 100, "curve": 1},
        halftone={
            "shape": Shape.LINE, "frequency": 10, "thickness": 1,
            "fg_color": BLACK, "bg_color": WHITE, "invert": False, "transparent": False,
        },
    )
