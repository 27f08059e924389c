from __future__ import annotations

from typing import Iterable

from theatre.domain.events import UiEvent
from theatre.domain.types import ConflictSummary, ScreenPoint, SideInfo
from theatre.overlay.composer import MarkerView, OverlayFrame
from theatre.overlay.legend import LegendSection
from theatre.overlay.selection import BattlePopup, TroopPopup
from theatre_web.api import schemas
from theatre_web.session import OverlaySession


def build_overlay_response(session: OverlaySession) -> schemas.OverlayResponse:
    composer = session.composer
    frame = composer.compose()
    return schemas.OverlayResponse(
        conflict_id=frame.conflict_id,
        conflict_name=composer.bundle.summary.name,
        visible=frame.visible,
        show_troops=bool(session.show_troops.value),
        zoom=session.zoom.value,
        visibility=schemas.Visibility(detail=frame.visibility.detail, labels=frame.visibility.labels),
        sources=frame.sources,
        layers=frame.layers,
        markers=[_marker(m) for m in frame.markers],
        popup=_battle_popup(frame.popup) if frame.popup else None,
        troop_popup=_troop_popup(frame.troop_popup) if frame.troop_popup else None,
        legend=_legend(frame.legend),
        globe_radius=session.radius.value,
        globe_radius_css=session.radius.css_value(),
        events=_events(composer.drain_events()),
        revision=composer.revision,
    )


def build_conflict_list(summaries: Iterable[ConflictSummary], active: str) -> schemas.ConflictListResponse:
    return schemas.ConflictListResponse(active=active, conflicts=[_summary(s) for s in summaries])


def _side(info: SideInfo) -> schemas.SideInfo:
    return schemas.SideInfo(name=info.name, short_name=info.short_name, color=info.color, accent=info.accent)


def _summary(summary: ConflictSummary) -> schemas.ConflictSummary:
    return schemas.ConflictSummary(
        id=summary.id,
        name=summary.name,
        side_a=_side(summary.side_a),
        side_b=_side(summary.side_b),
    )


def _marker(marker: MarkerView) -> schemas.Marker:
    glyph = marker.glyph
    return schemas.Marker(
        id=marker.id,
        category=marker.category.value,
        lon=marker.lon,
        lat=marker.lat,
        anchor=marker.anchor,
        clickable=marker.clickable,
        glyph=schemas.Glyph(
            kind=glyph.kind,
            icon=glyph.icon,
            fill=glyph.fill,
            border=glyph.border,
            title=glyph.title,
            label=glyph.label,
            pips=glyph.pips,
            css_class=glyph.css_class,
            shape=glyph.shape,
        ),
    )


def _screen(point: ScreenPoint | None) -> schemas.ScreenPosition | None:
    if point is None:
        return None
    return schemas.ScreenPosition(x=point.x, y=point.y)


def _battle_popup(popup: BattlePopup) -> schemas.BattlePopup:
    return schemas.BattlePopup(
        id=popup.id,
        title=popup.title,
        result=popup.result,
        result_class=popup.result_class,
        date=popup.date,
        sides=[schemas.PopupSide(name=s.name, color=s.color, rows=list(s.rows)) for s in popup.sides],
        significance=popup.significance,
        note=popup.note,
        lon=popup.lon,
        lat=popup.lat,
        anchor=popup.anchor,
        screen=_screen(popup.screen),
    )


def _troop_popup(popup: TroopPopup) -> schemas.TroopPopup:
    return schemas.TroopPopup(
        id=popup.id,
        title=popup.title,
        side_name=popup.side_name,
        color=popup.color,
        unit_type=popup.unit_type,
        unit_size=popup.unit_size,
        icon=popup.icon,
        pips=popup.pips,
        sector=popup.sector,
        lon=popup.lon,
        lat=popup.lat,
        anchor=popup.anchor,
        screen=_screen(popup.screen),
    )


def _legend(sections: Iterable[LegendSection]) -> list[schemas.LegendSection]:
    return [
        schemas.LegendSection(
            heading=section.heading,
            rows=[schemas.LegendRow(swatch=r.swatch, text=r.text, color=r.color, icon=r.icon) for r in section.rows],
        )
        for section in sections
    ]


def _events(events: Iterable[UiEvent]) -> list[schemas.UiEvent]:
    return [schemas.UiEvent(kind=e.kind, message=e.message, data=e.data) for e in events]
