"""
Parameter structure for halftonelab.

A :class:`Params` value is an immutable bundle of configuration groups
(noise, gradient, blend, halftone, mask) plus the two top-level selectors
``source_mode`` and ``render_mode``. It fully determines a render: the same
``Params`` and canvas size always produce the same pixels.

Parameter files are plain JSON with the same nesting as :meth:`Params.to_dict`;
any group or key may be omitted and falls back to its default::

    {
      "source_mode": "both",
      "noise": {"seed": 7, "noise_type": "ridged"},
      "halftone": {"shape": "circle", "frequency": 60}
    }
"""

import dataclasses
import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Type, TypeVar

from ._common import hex_to_rgb


class SourceMode(Enum):
    NOISE = "noise"
    GRADIENT = "gradient"
    BOTH = "both"


class RenderMode(Enum):
    STEPPED = "stepped"
    SMOOTH = "smooth"


class NoiseType(Enum):
    PERLIN = "perlin"
    RIDGED = "ridged"
    WARP = "warp"


class BlendMode(Enum):
    MULTIPLY = "multiply"
    ADD = "add"
    MIX = "mix"


class Shape(Enum):
    LINE = "line"
    SQUARE = "square"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"
    CROSS = "cross"
    DITHER = "dither"


@dataclass(frozen=True)
class NoiseParams:
    seed: int = 500
    scale: float = 3.0
    octaves: int = 3
    persistence: float = 0.5
    contrast: float = 1.0
    brightness: float = 0.0         # display units, -255..255
    noise_type: NoiseType = NoiseType.PERLIN
    warp_amount: float = 1.5


@dataclass(frozen=True)
class GradientParams:
    direction: float = 0.0          # degrees; 0 = left->right, 90 = top->bottom
    start: float = 0.0              # percent of the span
    end: float = 100.0
    curve: float = 1.0


@dataclass(frozen=True)
class BlendParams:
    mix: float = 0.5
    mode: BlendMode = BlendMode.MULTIPLY


@dataclass(frozen=True)
class HalftoneParams:
    frequency: float = 40.0         # lines across the canvas width
    angle: float = 90.0             # degrees
    thickness: float = 1.0
    cell_size: float = 2.0          # along-line cell length, in periods
    shape: Shape = Shape.LINE
    fg_color: str = "#ff0000"
    bg_color: str = "#c8c0b8"
    invert: bool = False
    transparent: bool = False


@dataclass(frozen=True)
class MaskParams:
    enabled: bool = False
    scale: float = 1.0
    threshold: float = 0.45
    softness: float = 0.1
    vertical_bias: float = 0.5
    edge_fade: float = 0.3


_ENUM_FIELDS = {
    "noise_type": NoiseType,
    "mode": BlendMode,
    "shape": Shape,
    "source_mode": SourceMode,
    "render_mode": RenderMode,
}

G = TypeVar("G")


def _coerce_enum(enum_cls: Type[Enum], value: Any) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = [m.value for m in enum_cls]
        raise ValueError(f"Unknown {enum_cls.__name__} {value!r}. Choose from {choices}") from None


_BOOL_WORDS = {"true": True, "false": False}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_WORDS:
        return _BOOL_WORDS[value.strip().lower()]
    raise ValueError(f"expected true or false, got {value!r}")


def _coerce_field(kind: Any, name: str, value: Any) -> Any:
    if name in _ENUM_FIELDS:
        return _coerce_enum(_ENUM_FIELDS[name], value)
    if kind in (bool, "bool"):
        return _coerce_bool(value)
    if kind in (str, "str"):
        if not isinstance(value, str):
            raise ValueError(f"expected a string, got {value!r}")
        return value
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if kind in (int, "int"):
        return int(value)
    if kind in (float, "float"):
        return float(value)
    return value


def _coerce_group(cls: Type[G], data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {}
    for name, value in data.items():
        try:
            kwargs[name] = _coerce_field(known[name].type, name, value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"{cls.__name__}.{name}: {exc}") from None
    return kwargs


def _group_from_dict(cls: Type[G], data: Mapping[str, Any]) -> G:
    return cls(**_coerce_group(cls, data))


def _group_to_dict(group) -> Dict[str, Any]:
    out = {}
    for f in fields(group):
        v = getattr(group, f.name)
        out[f.name] = v.value if isinstance(v, Enum) else v
    return out


def _clip(v: float, lo: float, hi: float = float("inf")) -> float:
    return max(lo, min(hi, v))


@dataclass(frozen=True)
class Params:
    source_mode: SourceMode = SourceMode.NOISE
    render_mode: RenderMode = RenderMode.STEPPED
    noise: NoiseParams = field(default_factory=NoiseParams)
    gradient: GradientParams = field(default_factory=GradientParams)
    blend: BlendParams = field(default_factory=BlendParams)
    halftone: HalftoneParams = field(default_factory=HalftoneParams)
    mask: MaskParams = field(default_factory=MaskParams)

    _GROUPS = {
        "noise": NoiseParams,
        "gradient": GradientParams,
        "blend": BlendParams,
        "halftone": HalftoneParams,
        "mask": MaskParams,
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Params":
        """Build from nested plain values; missing keys keep their defaults."""
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in cls._GROUPS:
                if not isinstance(value, Mapping):
                    raise ValueError(f"Parameter group {key!r} must be an object")
                kwargs[key] = _group_from_dict(cls._GROUPS[key], value)
            elif key in ("source_mode", "render_mode"):
                kwargs[key] = _coerce_enum(_ENUM_FIELDS[key], value)
            else:
                raise ValueError(f"Unknown parameter {key!r}")
        params = cls(**kwargs)
        # Fail early on bad colours rather than mid-render.
        hex_to_rgb(params.halftone.fg_color)
        hex_to_rgb(params.halftone.bg_color)
        return params

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source_mode": self.source_mode.value,
            "render_mode": self.render_mode.value,
        }
        for name in self._GROUPS:
            out[name] = _group_to_dict(getattr(self, name))
        return out

    def replace(self, **changes: Any) -> "Params":
        """Copy with whole groups or individual group fields swapped.

        ``params.replace(halftone={"shape": Shape.CIRCLE})`` updates one field
        of a group; passing a group instance replaces the group outright.
        Plain values are coerced the same way :meth:`from_dict` coerces them.
        """
        kwargs: Dict[str, Any] = {}
        for key, value in changes.items():
            if key in self._GROUPS and isinstance(value, Mapping):
                value = dataclasses.replace(getattr(self, key), **_coerce_group(self._GROUPS[key], value))
            elif key in ("source_mode", "render_mode"):
                value = _coerce_enum(_ENUM_FIELDS[key], value)
            kwargs[key] = value
        return dataclasses.replace(self, **kwargs)

    def clamped(self) -> "Params":
        """Coerce every numeric value into a range the renderers can handle."""
        n, g, b, h, m = self.noise, self.gradient, self.blend, self.halftone, self.mask
        return dataclasses.replace(
            self,
            noise=dataclasses.replace(
                n,
                seed=int(n.seed),
                scale=_clip(n.scale, 1e-6),
                octaves=max(1, int(n.octaves)),
                persistence=_clip(n.persistence, 0.0),
                contrast=_clip(n.contrast, 0.0),
                warp_amount=_clip(n.warp_amount, 0.0),
            ),
            gradient=dataclasses.replace(g, curve=_clip(g.curve, 0.01)),
            blend=dataclasses.replace(b, mix=_clip(b.mix, 0.0, 1.0)),
            halftone=dataclasses.replace(
                h,
                frequency=_clip(h.frequency, 0.01),
                thickness=_clip(h.thickness, 0.0),
                cell_size=_clip(h.cell_size, 0.01),
            ),
            mask=dataclasses.replace(
                m,
                scale=_clip(m.scale, 1e-6),
                threshold=_clip(m.threshold, 0.0, 1.0),
                softness=_clip(m.softness, 0.0),
                vertical_bias=_clip(m.vertical_bias, 0.0, 1.0),
                edge_fade=_clip(m.edge_fade, 0.0),
            ),
        )


def load_params(path: str) -> Params:
    """Read a JSON parameter file."""
    with open(path, "r") as jf:
        data = json.load(jf)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: parameter file must contain a JSON object")
    return Params.from_dict(data)
