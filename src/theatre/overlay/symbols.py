"""Record-to-glyph mappers for every marker category.

Every mapper is pure: it reads a frozen record and returns a frozen
``Glyph``. Icon and pip tables are module constants and palettes are cached
per conflict summary, so mapping a marker never rebuilds lookup state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from theatre.domain.types import (
    BattleSite,
    CapitalMarker,
    CityMarker,
    CoatOfArms,
    ConflictSummary,
    Control,
    InfrastructureItem,
    NavalPosition,
    NuclearPlant,
    Side,
    Unit,
    UnitSize,
    UnitType,
)
from theatre.overlay.geometry import SectorLabel

CONTESTED_COLOR = "#ffa500"
CONTESTED_BORDER = "#ffffff"
FALLBACK_ICON = "●"

UNIT_ICONS: dict[UnitType, str] = {
    UnitType.INFANTRY: "╳",
    UnitType.MECHANIZED: "╳⊙",
    UnitType.ARMOR: "⊙",
    UnitType.ARTILLERY: "●",
    UnitType.MARINES: "⚓",
}

ECHELON_PIPS: dict[UnitSize, str] = {
    UnitSize.BATTALION: "II",
    UnitSize.REGIMENT: "III",
    UnitSize.BRIGADE: "╳",
    UnitSize.DIVISION: "╳╳",
    UnitSize.CORPS: "╳╳╳",
}

INFRA_ICONS: dict[str, str] = {
    "airbase": "✈",
    "port": "⚓",
    "depot": "◆",
    "bridge": "⌇",
    "airdefense": "⊕",
}

NAVAL_ICONS: dict[str, str] = {
    "patrol": "⛵",
    "anchorage": "⚓",
    "submarine": "▼",
    "coastal": "🛡",
    "usv": "◈",
    "corridor": "⇢",
    "wreck": "✕",
}

BATTLE_ICON = "⚔"
NUCLEAR_ICON = "☢"
CITY_ICON = "•"
CAPITAL_STAR = "12,2 15,9 22,9 16.5,14 18.5,21 12,17 5.5,21 7.5,14 2,9 9,9"

_BATTLE_PREFIX = re.compile(r"^(Battle of |Siege of |Operation )")
_NAVAL_PREFIX = re.compile(r"^(BSF |UA )")
_NPP_SUFFIX = re.compile(r" NPP$")


@dataclass(frozen=True)
class SideColors:
    fill: str
    border: str


@dataclass(frozen=True)
class Palette:
    side_a: SideColors
    side_b: SideColors
    contested: SideColors

    @staticmethod
    def from_summary(summary: ConflictSummary) -> "Palette":
        return _palette(summary)

    def for_side(self, side: Side) -> SideColors:
        return self.side_a if side == Side.A else self.side_b

    def for_control(self, control: Control) -> SideColors:
        if control == Control.SIDE_A:
            return self.side_a
        if control == Control.SIDE_B:
            return self.side_b
        return self.contested


@lru_cache(maxsize=32)
def _palette(summary: ConflictSummary) -> Palette:
    return Palette(
        side_a=SideColors(summary.side_a.color, summary.side_a.accent),
        side_b=SideColors(summary.side_b.color, summary.side_b.accent),
        contested=SideColors(CONTESTED_COLOR, CONTESTED_BORDER),
    )


@dataclass(frozen=True)
class Glyph:
    kind: str
    icon: str
    fill: str
    border: str
    title: str
    label: str | None = None  # None: no text label drawn
    pips: str = ""
    css_class: str = ""
    shape: str = "icon"  # "icon" | "box" | "star" | "dot" | "shield" | "text"


def unit_glyph(unit: Unit, palette: Palette) -> Glyph:
    colors = palette.for_side(unit.side)
    return Glyph(
        kind="unit",
        icon=UNIT_ICONS.get(unit.unit_type, UNIT_ICONS[UnitType.INFANTRY]),
        pips=ECHELON_PIPS.get(unit.unit_size, ECHELON_PIPS[UnitSize.BRIGADE]),
        fill=colors.fill,
        border=colors.border,
        title=f"{unit.name} ({unit.sector})",
        css_class=f"nato nato--{unit.side.value}",
        shape="box",
    )


def capital_glyph(capital: CapitalMarker, palette: Palette) -> Glyph:
    colors = palette.for_control(capital.country)
    return Glyph(
        kind="capital",
        icon=CAPITAL_STAR,
        fill=colors.fill,
        border=colors.border,
        title=f"{capital.name} (Capital)",
        label=capital.name,
        css_class=f"capital capital--{capital.country.value}",
        shape="star",
    )


def city_glyph(city: CityMarker, palette: Palette, *, hide_label: bool = False) -> Glyph:
    colors = palette.for_control(city.country)
    return Glyph(
        kind="city",
        icon=CITY_ICON,
        fill=colors.fill,
        border=colors.border,
        title=city.note or city.name,
        label=None if hide_label else city.name,
        css_class=f"city city--{city.country.value}",
        shape="dot",
    )


def infrastructure_glyph(item: InfrastructureItem, palette: Palette, *, show_label: bool) -> Glyph:
    colors = palette.for_side(item.side)
    title = f"{item.name}: {item.note}" if item.note else item.name
    return Glyph(
        kind="infrastructure",
        icon=INFRA_ICONS.get(item.type, FALLBACK_ICON),
        fill=colors.fill,
        border=colors.border,
        title=title,
        label=item.name.split(" ")[0] if show_label else None,
        css_class=f"infra infra--{item.type} infra--{item.side.value}",
    )


def naval_glyph(position: NavalPosition, palette: Palette) -> Glyph:
    colors = palette.for_side(position.side)
    wreck = position.status == "destroyed"
    css = f"naval naval--{position.side.value}"
    if wreck:
        css += " naval--wreck"
    title = "\n".join(part for part in (position.name, position.vessels, position.note) if part)
    return Glyph(
        kind="naval",
        icon=NAVAL_ICONS.get(position.type, FALLBACK_ICON),
        fill=colors.fill,
        border=colors.border,
        title=title,
        label=_NAVAL_PREFIX.sub("", position.name),
        css_class=css,
    )


def battle_result_class(result: str, summary: ConflictSummary) -> str:
    """``sideA``, ``sideB`` or ``contested`` from the side prefix of a free-text result."""
    text = result.strip().upper()
    sides = sorted(
        ((Side.A, summary.side_a.short_name), (Side.B, summary.side_b.short_name)),
        key=lambda pair: len(pair[1]),
        reverse=True,
    )
    for side, short in sides:
        if short and text.startswith(short.upper()):
            return side.value
    return "contested"


def battle_glyph(site: BattleSite, palette: Palette, summary: ConflictSummary) -> Glyph:
    result_class = battle_result_class(site.result, summary)
    if result_class == Side.A.value:
        colors = palette.side_a
    elif result_class == Side.B.value:
        colors = palette.side_b
    else:
        colors = palette.contested
    return Glyph(
        kind="battle",
        icon=BATTLE_ICON,
        fill=colors.fill,
        border=colors.border,
        title=f"{site.name}: click for details",
        label=_BATTLE_PREFIX.sub("", site.name),
        css_class=f"battle battle--{result_class}",
    )


def nuclear_plant_glyph(plant: NuclearPlant, palette: Palette) -> Glyph:
    colors = palette.for_control(plant.country)
    return Glyph(
        kind="nuclear_plant",
        icon=NUCLEAR_ICON,
        fill=colors.fill,
        border=colors.border,
        title=f"{plant.name}\n{plant.note}" if plant.note else plant.name,
        label=_NPP_SUFFIX.sub("", plant.name),
        css_class=f"npp npp--{plant.status}",
    )


def sector_label_glyph(label: SectorLabel) -> Glyph:
    return Glyph(
        kind="sector_label",
        icon="",
        fill="",
        border="",
        title=f"{label.label}: {label.caption}",
        label=label.label,
        css_class=f"sector sector--{label.status.value}",
        shape="text",
    )


def coat_of_arms_glyph(coat: CoatOfArms, palette: Palette) -> Glyph:
    colors = palette.for_side(coat.side)
    return Glyph(
        kind="coat_of_arms",
        icon="",
        fill=colors.fill,
        border=colors.border,
        title=coat.name,
        css_class=f"coa coa--{coat.side.value}",
        shape="shield",
    )
