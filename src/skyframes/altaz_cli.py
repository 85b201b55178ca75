from __future__ import annotations

import argparse
import csv
import math
from pathlib import Path

import numpy as np

from .config import ObserverConfig
from .ephemeris import AstropyEphemeris, HorizonsEphemeris
from .frames import Origin, ReferenceFrame
from .geometry import normalize, unit_to_radec, vector_to_altaz
from .observer import ObserverState
from .pipeline import convert_frame
from .transforms import position_to_apparent


def body_position(observer: ObserverState, body: str) -> dict:
    """Apparent ICRS RA/Dec and observed az/alt/distance of a solar-system body."""
    pvb = observer.ephemeris.body_pvb(body, observer.tt)
    apparent = position_to_apparent(observer, Origin.BARYCENTRIC, False, pvb)
    ra, dec = unit_to_radec(normalize(apparent[0]))
    observed = convert_frame(
        observer, ReferenceFrame.ICRF, ReferenceFrame.OBSERVED, False, apparent[0]
    )
    az, alt, dist = vector_to_altaz(observed)
    return {"ra_deg": ra, "dec_deg": dec, "az_deg": az, "alt_deg": alt, "dist_au": dist}


def build_track(
    observer: ObserverState, body: str, hours: float, step_min: float
) -> list[dict]:
    rows: list[dict] = []
    start_tt = observer.tt
    n_steps = max(1, int(math.floor(hours * 60.0 / step_min)) + 1) if hours > 0 else 1
    for i in range(n_steps):
        observer.tt = start_tt + i * step_min / 1440.0
        observer.update()
        row = {"tt_mjd": observer.tt, "utc_mjd": observer.utc}
        row.update(body_position(observer, body))
        rows.append(row)
    return rows


def plot_track(rows: list[dict], body: str, out: Path) -> None:
    import matplotlib.pyplot as plt

    hours = (np.array([r["tt_mjd"] for r in rows]) - rows[0]["tt_mjd"]) * 24.0
    alt = np.array([r["alt_deg"] for r in rows])
    az = np.array([r["az_deg"] for r in rows])
    fig, (ax_alt, ax_az) = plt.subplots(2, 1, sharex=True, figsize=(8, 6))
    ax_alt.plot(hours, alt, color="tab:blue")
    ax_alt.axhline(0.0, color="0.6", lw=0.8)
    ax_alt.set_ylabel("altitude (deg)")
    ax_alt.set_title(f"{body} apparent track")
    ax_az.plot(hours, az, color="tab:orange")
    ax_az.set_ylabel("azimuth (deg)")
    ax_az.set_xlabel("hours since start")
    fig.tight_layout()
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=120)
    plt.close(fig)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Apparent azimuth/altitude of a solar-system body.")
    parser.add_argument("--lon", type=float, required=True, help="Longitude (deg, east positive).")
    parser.add_argument("--lat", type=float, required=True, help="Latitude (deg).")
    parser.add_argument("--height", type=float, default=0.0, help="Height above ellipsoid (m).")
    time_group = parser.add_mutually_exclusive_group(required=True)
    time_group.add_argument("--utc", type=float, help="UTC as MJD.")
    time_group.add_argument("--tt", type=float, help="TT as MJD.")
    parser.add_argument("--body", type=str, default="sun", help="Body name (sun, moon, mars, ...).")
    parser.add_argument("--refraction", action="store_true", help="Apply atmospheric refraction.")
    parser.add_argument("--pressure", type=float, default=math.nan, help="Pressure (hPa); default from height.")
    parser.add_argument("--ephemeris", type=str, default=None, help="astropy ephemeris name or 'horizons'.")
    parser.add_argument("--hours", type=float, default=0.0, help="Track duration (hours).")
    parser.add_argument("--step-min", type=float, default=10.0, help="Track step (minutes).")
    parser.add_argument("--csv", type=Path, default=None, help="Write the track to CSV.")
    parser.add_argument("--plot", type=Path, default=None, help="Write a PNG track plot.")
    args = parser.parse_args(argv)

    if args.step_min <= 0:
        raise SystemExit("--step-min must be positive.")

    if args.ephemeris in (None, "horizons"):
        config = ObserverConfig()
    else:
        config = ObserverConfig(ephemeris=args.ephemeris)
    if args.ephemeris == "horizons":
        provider = HorizonsEphemeris()
    else:
        provider = AstropyEphemeris(config.ephemeris)
    observer = ObserverState(
        config,
        provider,
        longitude=math.radians(args.lon),
        latitude=math.radians(args.lat),
        height=args.height,
        pressure=args.pressure,
        refraction=args.refraction,
    )
    if args.utc is not None:
        observer.set_utc(args.utc)
    else:
        observer.tt = args.tt

    rows = build_track(observer, args.body, args.hours, args.step_min)

    if args.csv is not None:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        with args.csv.open("w", newline="") as fh:
            writer = csv.DictWriter(fh, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        print(f"Wrote {len(rows)} rows to {args.csv}")
    else:
        for row in rows:
            print(
                f"TT {row['tt_mjd']:.6f}  az {row['az_deg']:9.4f}  "
                f"alt {row['alt_deg']:8.4f}  dist {row['dist_au']:.6f} AU"
            )
    if args.plot is not None:
        plot_track(rows, args.body, args.plot)
        print(f"Wrote plot to {args.plot}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
