"""The bundled impulse-response catalogue and editor layout helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

PLACEHOLDER_TEXT = "Select An Impulse Response"
DEFAULT_EDITOR_SIZE = (400, 300)


@dataclass(frozen=True)
class ImpulseResponse:
    """One selectable impulse response."""

    ir_id: int
    name: str
    filename: str


CATALOGUE: tuple[ImpulseResponse, ...] = tuple(
    ImpulseResponse(ir_id, name, filename)
    for ir_id, (name, filename) in enumerate(
        [
            ("York Minster", "York_Minster_bformat_48k.wav"),
            ("Usina Symphony Hall", "Usina_bformat_48.wav"),
            ("Koli Forest in Summer", "koli_summer_site1_1way_bformat_48k.wav"),
            ("Falkland Royal Tennis Court", "falkland_tennis_court_b_format.wav"),
            ("Cliffords Tower", "clifford_tower_S1R3_Bformat.wav"),
            ("Air Museum", "Air_museum_bformat_S1R1_1.wav"),
            ("Alcuin Outside", "alcuin_s1r1front_bformat.wav"),
            ("Bottle Dungeon", "bottledungeon1_sf_edited.wav"),
            ("York Uni Central Hall", "Central_Hall_ir_row_3c_centre_front_bformat.wav"),
            ("Creswell Crags", "Creswell_crags_1_r_rhcbottom_s_rhc_bottom.wav"),
            ("Yorkshire Dales Canyon", "dales_Canyon_site2_4way_bformat.wav"),
            ("Dixon Studio Theater", "Dixon_studioTheatre_r1_rir_bformat.wav"),
            ("Gill Head Mine", "gill_head_mine_site1_1way_bformat.wav"),
            ("Hendrix Hall", "Hendrix_Hall_EigenmikeHHB1_processed_Bformat.wav"),
            ("Heslington Church", "heslington_church002_bformat.wav"),
            ("Jack Lyons Concert Hall", "jack_lyons_lp1_96k.wav"),
            ("Koli Forest in Winter", "koli_snow_site1_1way_bformat.wav"),
            ("Lime Kiln", "lime_kiln_p1_bformat.wav"),
            ("Maes Howe", "maes_howe_000_bformat_48k.wav"),
            ("Hamilton Mausoleum", "Mausoleum_2_000_bformat_48k.wav"),
            ("New Grange", "newgrange_s1r1.wav"),
            ("R1 Reactor Hall", "r1_bformat48k.wav"),
            ("Railway Tunnel", "railway_tunnel_4way_bformat.wav"),
            ("Ron Cooke Hub", "RonCooke_hub_fsfrbformat.wav"),
            ("Rymer Auditorium", "Rymer_s1r2_bformat.wav"),
            ("Studio Live room", "S1R1_LiveRoom_IR_1.wav"),
            ("York Sports Centre Hall", "sportscentre_hall_bformat.wav"),
            ("Spring Lane Building", "Spring_lane_sp1_mp1_ir_bformat_trimmed.wav"),
            ("St Andrews Church", "St_Andrews_church_000_bformat_48k.wav"),
            ("St Marys Abbey", "st_marys_abbey_phase3_bformat.wav"),
            ("St Patricks Church", "st_Patricks_church_s1r1.wav"),
            ("St Patricks Church Model", "stpatricks_model_s1r1.wav"),
            ("Terrys Typing Room", "terrys_typing_b_format.wav"),
            ("Terrys Warehouse", "terrys_warehouse_b_format.wav"),
            ("Tyndall Bruce", "tyndall_bruce_b_format.wav"),
            ("Wheldrake Wood", "wheldrake_wood_S1R1_SF.wav"),
            ("York Guildhall", "York_guildhall_councilchamber_s1_r1_ir_1_96000.wav"),
        ],
        start=1,
    )
)

_BY_ID = {entry.ir_id: entry for entry in CATALOGUE}


def ir_by_id(ir_id: int) -> ImpulseResponse:
    """Return the catalogue entry with the given selection id."""
    try:
        return _BY_ID[ir_id]
    except KeyError:
        raise KeyError(f"no impulse response with id {ir_id}") from None


def ir_names() -> list[str]:
    """Names of the catalogue entries in selection order."""
    return [entry.name for entry in CATALOGUE]


def _jmap(value, source_min, source_max, target_min, target_max):
    return target_min + (value - source_min) * (target_max - target_min) / (
        source_max - source_min
    )


def waveform_points(samples, x: float, y: float, width: float, height: float) -> np.ndarray:
    """Path points of a waveform plot inside the given rectangle.

    The first point sits at the left edge on the centre line; sample ``i`` of
    ``n`` lies at ``x + i * width / n``, with -1 at the bottom and 1 at the top.
    """
    data = np.asarray(samples, dtype=np.float64).ravel()
    count = data.size
    bottom = y + height
    points = np.empty((count + 1, 2))
    points[0] = (x, y + height / 2)
    if count:
        points[1:, 0] = _jmap(np.arange(count), 0, count, x, x + width)
        points[1:, 1] = _jmap(data, -1.0, 1.0, bottom, y)
    return points


def time_ticks(num_samples: int, sample_rate: float, x: float, width: float) -> list[tuple[int, str]]:
    """Pixel positions and labels of whole-second ticks under a waveform plot."""
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    if num_samples <= 0:
        return []
    duration = math.ceil(num_samples / sample_rate)
    return [
        (int(_jmap(second, 0.0, float(duration), x, x + width)), f"{second}s")
        for second in range(duration + 1)
    ]


def selection_box_bounds(width: int, height: int) -> tuple[int, int, int, int]:
    """Bounds (x, y, width, height) of the IR selection box in an editor of the given size."""
    return (
        int(width * 0.21),
        int(height * 0.27),
        int(width * 0.59),
        int(height * 0.1),
    )