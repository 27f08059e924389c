"""Map legend built from whatever data the active conflict carries."""

from __future__ import annotations

from dataclasses import dataclass

from theatre.domain.types import ConflictBundle, UnitSize, UnitType
from theatre.overlay.geometry import FORTIFICATION_COLOR, OCCUPIED_BORDER_COLOR
from theatre.overlay.recency import RECENCY_LEGEND
from theatre.overlay.symbols import (
    BATTLE_ICON,
    CONTESTED_COLOR,
    ECHELON_PIPS,
    INFRA_ICONS,
    NAVAL_ICONS,
    NUCLEAR_ICON,
    UNIT_ICONS,
)

INFRA_LABELS = {
    "airbase": "Airbase",
    "port": "Port / Naval base",
    "depot": "Supply depot",
    "bridge": "Bridge",
    "airdefense": "Air defense",
}

NAVAL_LABELS = {
    "patrol": "Naval patrol",
    "anchorage": "Fleet anchorage",
    "submarine": "Submarine",
    "coastal": "Coastal defense",
    "usv": "Unmanned surface vehicle",
    "corridor": "Shipping corridor",
    "wreck": "Wreck",
}

UNIT_TYPE_LABELS = {
    UnitType.INFANTRY: "Infantry",
    UnitType.ARMOR: "Armor / Tanks",
    UnitType.MECHANIZED: "Mechanized Infantry",
    UnitType.ARTILLERY: "Artillery",
    UnitType.MARINES: "Marines",
}

UNIT_SIZE_LABELS = {
    UnitSize.BATTALION: "Battalion (~300–1,000)",
    UnitSize.REGIMENT: "Regiment (~1,000–3,000)",
    UnitSize.BRIGADE: "Brigade (~3,000–5,000)",
    UnitSize.DIVISION: "Division (~10,000–20,000)",
    UnitSize.CORPS: "Corps (~20,000–40,000)",
}


@dataclass(frozen=True)
class LegendRow:
    swatch: str  # "line" | "dashed" | "dot" | "icon" | "box" | "pips"
    text: str
    color: str = ""
    icon: str = ""


@dataclass(frozen=True)
class LegendSection:
    heading: str
    rows: tuple[LegendRow, ...]


def build_legend(bundle: ConflictBundle) -> tuple[LegendSection, ...]:
    summary = bundle.summary
    a, b = summary.side_a, summary.side_b
    sections = [
        LegendSection(
            "Belligerents",
            (LegendRow("dot", a.name, color=a.color), LegendRow("dot", b.name, color=b.color)),
        )
    ]

    if bundle.frontlines:
        rows = [
            LegendRow("line", f"{a.short_name} side", color=a.color),
            LegendRow("line", f"{b.short_name} side", color=b.color),
        ]
        rows.extend(LegendRow("line", f"Updated {label}", color=color) for color, label in RECENCY_LEGEND)
        sections.append(LegendSection("Frontlines", tuple(rows)))

    if bundle.fortifications:
        sections.append(
            LegendSection(
                "Fortifications",
                tuple(LegendRow("dashed", line.name, color=FORTIFICATION_COLOR) for line in bundle.fortifications),
            )
        )

    if bundle.cities or bundle.capitals or bundle.occupied is not None:
        rows = [
            LegendRow("icon", "Capital city", color=a.color, icon="★"),
            LegendRow("dot", f"{a.short_name}-controlled city", color=a.color),
            LegendRow("dot", f"{b.short_name}-controlled city", color=b.color),
            LegendRow("dot", "Contested city", color=CONTESTED_COLOR),
        ]
        if bundle.occupied is not None:
            rows.append(LegendRow("dashed", bundle.occupied.label, color=OCCUPIED_BORDER_COLOR))
        sections.append(LegendSection("Cities & Territory", tuple(rows)))

    if bundle.infrastructure:
        present = {item.type for item in bundle.infrastructure}
        sections.append(
            LegendSection(
                "Military Infrastructure",
                tuple(
                    LegendRow("icon", INFRA_LABELS[kind], icon=icon)
                    for kind, icon in INFRA_ICONS.items()
                    if kind in present
                ),
            )
        )

    if bundle.naval:
        present = {pos.type for pos in bundle.naval}
        sections.append(
            LegendSection(
                "Naval",
                tuple(
                    LegendRow("icon", NAVAL_LABELS[kind], icon=icon)
                    for kind, icon in NAVAL_ICONS.items()
                    if kind in present
                ),
            )
        )

    combat = []
    if bundle.battles:
        combat.append(LegendRow("icon", "Battle site", color=CONTESTED_COLOR, icon=BATTLE_ICON))
    if bundle.nuclear_plants:
        combat.append(LegendRow("icon", "Nuclear power plant", color="#66ff66", icon=NUCLEAR_ICON))
    if combat:
        sections.append(LegendSection("Combat & Strategic", tuple(combat)))

    if bundle.units:
        sections.append(
            LegendSection(
                "Unit Affiliation",
                (
                    LegendRow("box", f"{a.name} unit", color=a.color, icon=UNIT_ICONS[UnitType.INFANTRY]),
                    LegendRow("box", f"{b.name} unit", color=b.color, icon=UNIT_ICONS[UnitType.INFANTRY]),
                ),
            )
        )
        sections.append(
            LegendSection(
                "Unit Type (symbol inside box)",
                tuple(LegendRow("box", UNIT_TYPE_LABELS[t], icon=UNIT_ICONS[t]) for t in UnitType),
            )
        )
        sections.append(
            LegendSection(
                "Unit Size (pips above box)",
                tuple(LegendRow("pips", UNIT_SIZE_LABELS[s], icon=ECHELON_PIPS[s]) for s in UnitSize),
            )
        )

    if bundle.coats_of_arms:
        sections.append(
            LegendSection(
                "Coat of Arms",
                tuple(
                    LegendRow("icon", coat.name, color=summary.side(coat.side).color)
                    for coat in bundle.coats_of_arms
                ),
            )
        )
    return tuple(sections)
