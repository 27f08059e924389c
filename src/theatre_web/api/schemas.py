from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_by_name=True)


class SideInfo(CamelModel):
    name: str
    short_name: str = Field(..., alias="shortName")
    color: str
    accent: str


class ConflictSummary(CamelModel):
    id: str
    name: str
    side_a: SideInfo = Field(..., alias="sideA")
    side_b: SideInfo = Field(..., alias="sideB")


class ConflictListResponse(CamelModel):
    active: str
    conflicts: List[ConflictSummary]


class Visibility(CamelModel):
    detail: bool
    labels: bool


class Glyph(CamelModel):
    kind: str
    icon: str
    fill: str
    border: str
    title: str
    label: Optional[str] = None
    pips: str = ""
    css_class: str = Field("", alias="cssClass")
    shape: str = "icon"


class Marker(CamelModel):
    id: str
    category: str
    lon: float
    lat: float
    anchor: str
    clickable: bool
    glyph: Glyph


class ScreenPosition(CamelModel):
    x: float
    y: float


class PopupSide(CamelModel):
    name: str
    color: str
    rows: List[Tuple[str, str]]


class BattlePopup(CamelModel):
    id: str
    title: str
    result: str
    result_class: str = Field(..., alias="resultClass")
    date: str
    sides: List[PopupSide]
    significance: str
    note: str
    lon: float
    lat: float
    anchor: str
    screen: Optional[ScreenPosition] = None
    captures_pointer: bool = Field(True, alias="capturesPointer")


class TroopPopup(CamelModel):
    id: str
    title: str
    side_name: str = Field(..., alias="sideName")
    color: str
    unit_type: str = Field(..., alias="unitType")
    unit_size: str = Field(..., alias="unitSize")
    icon: str
    pips: str
    sector: str
    lon: float
    lat: float
    anchor: str
    screen: Optional[ScreenPosition] = None
    captures_pointer: bool = Field(True, alias="capturesPointer")


class LegendRow(CamelModel):
    swatch: str
    text: str
    color: str = ""
    icon: str = ""


class LegendSection(CamelModel):
    heading: str
    rows: List[LegendRow]


class UiEvent(CamelModel):
    kind: str
    message: str
    data: Optional[Dict[str, Any]] = None


class OverlayResponse(CamelModel):
    conflict_id: str = Field(..., alias="conflictId")
    conflict_name: str = Field(..., alias="conflictName")
    visible: bool
    show_troops: bool = Field(..., alias="showTroops")
    zoom: float
    visibility: Visibility
    sources: Dict[str, Dict[str, Any]]
    layers: List[Dict[str, Any]]
    markers: List[Marker]
    popup: Optional[BattlePopup] = None
    troop_popup: Optional[TroopPopup] = Field(None, alias="troopPopup")
    legend: List[LegendSection]
    globe_radius: float = Field(..., alias="globeRadius")
    globe_radius_css: str = Field(..., alias="globeRadiusCss")
    events: List[UiEvent]
    revision: int


class ApiResponse(CamelModel):
    ok: bool
    message: Optional[str] = None
    message_kind: Optional[str] = Field(None, alias="messageKind")
    overlay: Optional[OverlayResponse] = None


class LngLat(CamelModel):
    lon: float = Field(..., ge=-540, le=540)
    lat: float = Field(..., ge=-90, le=90)


class ConflictRequest(CamelModel):
    conflict_id: str = Field(..., alias="conflictId")


class ViewRequest(CamelModel):
    zoom: Optional[float] = Field(None, ge=0, le=24)
    center: Optional[LngLat] = None
    bearing: Optional[float] = None
    pitch: Optional[float] = Field(None, ge=0, le=85)
    globe: Optional[bool] = None
    transparent_globe: Optional[bool] = Field(None, alias="transparentGlobe")
    width: Optional[int] = Field(None, ge=1)
    height: Optional[int] = Field(None, ge=1)


class ToggleRequest(CamelModel):
    visible: Optional[bool] = None
    show_troops: Optional[bool] = Field(None, alias="showTroops")
