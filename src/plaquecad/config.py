"""Design definitions loaded from YAML.

A design file names the user editable inputs, the printable regions and a
few layout constants.  ``load_design_config`` turns it into frozen
dataclasses; ``FieldSpec.coerce`` maps raw user input onto a valid value
and never raises.

    id: basketball-jersey
    name: Basketball Jersey
    inputs:
      - id: number
        kind: text
        default: "23"
        max_length: 2
    regions:
      - id: body
        color: "#C8102E"
    layout:
      number_size: 28
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from plaquecad.errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}

_TRANSFORMS = {
    "upper": str.upper,
    "lower": str.lower,
    "strip": str.strip,
}


class FieldKind(enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


@dataclass(frozen=True)
class FieldSpec:
    """One user editable input of a design."""

    id: str
    kind: FieldKind
    default: Any
    label: Optional[str] = None
    options: Tuple[str, ...] = ()
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    max_length: Optional[int] = None
    transform: Optional[str] = None

    def coerce(self, value: Any) -> Any:
        """Return ``value`` mapped onto this field's domain.

        Missing or malformed numbers fall back to the default and are
        clamped to ``[min, max]``; text is transformed and truncated;
        unknown select options fall back to the default.
        """

        if self.kind is FieldKind.TEXT:
            return self._coerce_text(value)
        if self.kind is FieldKind.NUMBER:
            return self._coerce_number(value)
        if self.kind is FieldKind.BOOLEAN:
            return self._coerce_bool(value)
        return self._coerce_select(value)

    def _coerce_text(self, value: Any) -> str:
        text = self.default if value is None else str(value)
        if self.transform:
            text = _TRANSFORMS[self.transform](text)
        if self.max_length is not None:
            text = text[:self.max_length]
        return text

    def _coerce_number(self, value: Any) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = float(self.default)
        if isinstance(value, bool) or not math.isfinite(number):
            number = float(self.default)
        if self.min is not None and number < self.min:
            number = float(self.min)
        if self.max is not None and number > self.max:
            number = float(self.max)
        return number

    def _coerce_bool(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        return bool(self.default)

    def _coerce_select(self, value: Any) -> str:
        if value is not None and str(value) in self.options:
            return str(value)
        return self.default


@dataclass(frozen=True)
class RegionSpec:
    """A separately printable part of a design."""

    id: str
    label: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class DesignConfig:
    """Validated contents of a design YAML file."""

    id: str
    name: str
    inputs: Tuple[FieldSpec, ...]
    regions: Tuple[RegionSpec, ...]
    description: Optional[str] = None
    printer: Dict[str, Any] = field(default_factory=dict, compare=False)
    layout: Dict[str, Any] = field(default_factory=dict, compare=False)
    print_guide: Optional[str] = field(default=None, compare=False)
    source: Optional[str] = field(default=None, compare=False)

    @property
    def region_ids(self) -> Tuple[str, ...]:
        return tuple(r.id for r in self.regions)

    def get_field(self, field_id: str) -> FieldSpec:
        for spec in self.inputs:
            if spec.id == field_id:
                return spec
        raise KeyError(field_id)

    def defaults(self) -> Dict[str, Any]:
        return {spec.id: spec.default for spec in self.inputs}

    def coerce_fields(self, fields: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Coerce ``fields`` against every input; missing ones take defaults."""

        fields = dict(fields or {})
        unknown = set(fields) - {spec.id for spec in self.inputs}
        if unknown:
            logger.debug("ignoring unknown fields for %s: %s", self.id, sorted(unknown))
        return {spec.id: spec.coerce(fields.get(spec.id)) for spec in self.inputs}

    def layout_value(self, key: str) -> float:
        try:
            return float(self.layout[key])
        except KeyError:
            raise ConfigError(f"design {self.id!r} has no layout value {key!r}") from None
        except (TypeError, ValueError):
            raise ConfigError(f"design {self.id!r}: layout value {key!r} is not a number") from None

    def layout_point(self, key: str) -> Tuple[float, float]:
        raw = self.layout.get(key)
        try:
            x, y = raw
            return float(x), float(y)
        except (TypeError, ValueError):
            raise ConfigError(f"design {self.id!r}: layout value {key!r} is not an (x, y) pair") from None


def _parse_field(raw: Any, source: str) -> FieldSpec:
    if not isinstance(raw, dict) or "id" not in raw:
        raise ConfigError(f"{source}: every input needs an 'id'")
    field_id = str(raw["id"])
    try:
        kind = FieldKind(raw.get("kind", "text"))
    except ValueError:
        raise ConfigError(f"{source}: input {field_id!r} has unknown kind {raw.get('kind')!r}") from None
    if "default" not in raw:
        raise ConfigError(f"{source}: input {field_id!r} has no default")

    transform = raw.get("transform")
    if transform is not None and transform not in _TRANSFORMS:
        raise ConfigError(f"{source}: input {field_id!r} has unknown transform {transform!r}")

    options = tuple(str(o) for o in raw.get("options", ()) or ())
    default = raw["default"]
    if kind is FieldKind.SELECT:
        if not options:
            raise ConfigError(f"{source}: select input {field_id!r} has no options")
        if str(default) not in options:
            raise ConfigError(f"{source}: default of {field_id!r} is not one of its options")
        default = str(default)
    elif kind is FieldKind.NUMBER:
        try:
            default = float(default)
        except (TypeError, ValueError):
            raise ConfigError(f"{source}: number input {field_id!r} has a non-numeric default") from None
    elif kind is FieldKind.BOOLEAN:
        default = bool(default)
    else:
        default = str(default)

    max_length = raw.get("max_length")
    return FieldSpec(
        id=field_id,
        kind=kind,
        default=default,
        label=raw.get("label"),
        options=options,
        min=None if raw.get("min") is None else float(raw["min"]),
        max=None if raw.get("max") is None else float(raw["max"]),
        step=None if raw.get("step") is None else float(raw["step"]),
        max_length=None if max_length is None else int(max_length),
        transform=transform,
    )


def _parse_region(raw: Any, source: str) -> RegionSpec:
    if isinstance(raw, str):
        return RegionSpec(raw)
    if not isinstance(raw, dict) or "id" not in raw:
        raise ConfigError(f"{source}: every region needs an 'id'")
    return RegionSpec(str(raw["id"]), raw.get("label"), raw.get("color"))


def parse_design_config(data: Any, source: str = "<design>") -> DesignConfig:
    """Validate an already parsed mapping into a :class:`DesignConfig`."""

    if not isinstance(data, dict):
        raise ConfigError(f"{source}: design must be a mapping, got {type(data).__name__}")
    missing = [key for key in ("id", "inputs", "regions") if key not in data]
    if missing:
        raise ConfigError(f"{source}: design missing required keys: {', '.join(missing)}")

    inputs = tuple(_parse_field(raw, source) for raw in data.get("inputs") or ())
    regions = tuple(_parse_region(raw, source) for raw in data.get("regions") or ())
    if not regions:
        raise ConfigError(f"{source}: design declares no regions")

    for kind, ids in (("input", [f.id for f in inputs]), ("region", [r.id for r in regions])):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ConfigError(f"{source}: duplicate {kind} ids: {', '.join(dupes)}")

    return DesignConfig(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        description=data.get("description"),
        inputs=inputs,
        regions=regions,
        printer=dict(data.get("printer") or {}),
        layout=dict(data.get("layout") or {}),
        print_guide=data.get("print_guide"),
        source=source,
    )


def load_design_config(path: Path | str) -> DesignConfig:
    """Load and validate a design YAML file."""

    design_path = Path(path)
    try:
        with design_path.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp)
    except FileNotFoundError:
        raise ConfigError(f"design file not found: {design_path}") from None
    except yaml.YAMLError as exc:
        raise ConfigError(f"{design_path}: invalid YAML: {exc}") from exc
    return parse_design_config(data, str(design_path))


__all__ = [
    "FieldKind",
    "FieldSpec",
    "RegionSpec",
    "DesignConfig",
    "parse_design_config",
    "load_design_config",
]
