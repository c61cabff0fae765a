#!/usr/bin/env python3
"""
Chemical Release Dispersion Engine: command-line interface.

Runs one assessment of a release under a weather observation and prints a
JSON summary: stability class, effective height, peak ground
concentration, receptor concentrations and contour footprints.

Usage:
    python main.py --rate 500 --height 2 --wind-speed 3 --wind-dir 270
    python main.py --chemical Ammonia --release-temp 60 --figure plume.html
    python main.py --scenarios
"""

import sys
import os
import argparse
import json
import logging
from datetime import datetime

# Ensure the project root is on the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np

import config
from analysis.contour_metrics import polygon_area_m2, to_geojson
from analysis.contours import ContourSettings
from analysis.engine import DispersionEngine, EngineConfig
from data.sample_data import get_chemicals, get_sites, receptor_ring, sample_release
from data.weather import WeatherState, percent_to_fraction
from models.dispersion_coefficients import DISPERSION_TABLES
from models.errors import DispersionError
from models.gaussian_plume import centerline_concentration
from models.stability import stability_description
from models.units import g_to_mg, ppm_to_mg_m3
from validation.scenarios import run_all

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chemical Release Dispersion Engine")

    release = parser.add_argument_group("release")
    release.add_argument("--chemical", default="Chlorine", choices=sorted(get_chemicals()),
                         help="Released chemical")
    release.add_argument("--site", default=get_sites()[0]["name"],
                         choices=[s["name"] for s in get_sites()], help="Release site")
    release.add_argument("--rate", type=float, default=500.0, help="Release rate (g/s)")
    release.add_argument("--duration", type=float, default=3600.0, help="Release duration (s)")
    release.add_argument("--height", type=float, default=2.0, help="Release height (m)")
    release.add_argument("--release-temp", type=float, default=None,
                         help="Release temperature (C); omit for ambient")

    weather = parser.add_argument_group("weather")
    weather.add_argument("--wind-speed", type=float, default=3.0, help="Wind speed (m/s)")
    weather.add_argument("--wind-dir", type=float, default=270.0,
                         help="Wind direction, degrees the wind blows FROM")
    weather.add_argument("--temperature", type=float, default=15.0, help="Air temperature (C)")
    weather.add_argument("--cloud", type=float, default=None,
                         help="Cloud cover (percent, 0-100)")
    weather.add_argument("--time", default=None,
                         help="Observation time, ISO 8601 (default: now)")

    engine = parser.add_argument_group("engine")
    engine.add_argument("--levels", type=float, nargs="+",
                        default=list(config.DEFAULT_CONTOUR_LEVELS),
                        help="Contour levels (mg/m3, or ppm with --ppm)")
    engine.add_argument("--ppm", action="store_true",
                        help="Read --levels as ppm of the released chemical")
    engine.add_argument("--table", default=config.DEFAULT_DISPERSION_TABLE,
                        choices=sorted(DISPERSION_TABLES), help="Dispersion coefficient table")
    engine.add_argument("--sectors", type=int, default=config.CONTOUR_SECTORS,
                        help="Contour rays around the source")
    engine.add_argument("--resolution", type=float, default=config.CONTOUR_RESOLUTION_M,
                        help="Contour sample spacing (m)")
    engine.add_argument("--max-distance", type=float, default=config.CONTOUR_MAX_DISTANCE_M,
                        help="Contour sweep radius (m)")
    engine.add_argument("--calm-policy", default=config.CALM_POLICY,
                        choices=["reject", "floor"], help="Behaviour below the calm floor")
    engine.add_argument("--receptors", type=int, default=5,
                        help="Number of sample receptors around the source")

    output = parser.add_argument_group("output")
    output.add_argument("--figure", default=None, help="Write contour map HTML here")
    output.add_argument("--centerline-figure", default=None,
                        help="Write centerline profile HTML here")
    output.add_argument("--geojson", default=None, help="Write contours as GeoJSON here")
    output.add_argument("--scenarios", action="store_true",
                        help="Run the reference scenarios and exit")
    output.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def summarise(assessment) -> dict:
    eff = assessment.effective_source
    return {
        "source": eff.source.name,
        "stability_class": assessment.stability_class,
        "stability": stability_description(assessment.stability_class),
        "wind_speed": assessment.wind_speed,
        "wind_direction": assessment.wind_direction,
        "calm_floor_applied": assessment.calm_floor_applied,
        "source_strength_g_s": eff.source_strength,
        "effective_height_m": round(eff.effective_height, 2),
        "plume_rise_m": round(eff.plume_rise, 2),
        "peak_concentration_mg_m3": assessment.peak_concentration,
        "peak_distance_m": assessment.peak_distance,
        "receptors": [
            {
                "name": o.receptor.name,
                "concentration_mg_m3": o.result.concentration if o.ok else None,
                "concentration_ppm": o.result.concentration_ppm if o.ok else None,
                "impact_level": o.impact_level,
                "low_confidence": o.result.low_confidence if o.ok else None,
                "error": o.error,
            }
            for o in assessment.receptors
        ],
        "worst_impact": assessment.worst_impact,
        "contours": [
            {
                "level_mg_m3": c.level,
                "max_radius_m": round(c.max_radius, 1),
                "area_m2": round(polygon_area_m2(c), 1),
                "truncated_sectors": list(c.truncated_sectors),
            }
            for c in assessment.contours
        ],
    }


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.scenarios:
        results = run_all()
        print(json.dumps(results, indent=2, default=str))
        return 0 if all(r["passed"] for r in results.values()) else 1

    try:
        source = sample_release(
            args.chemical, args.site,
            release_rate=args.rate,
            release_duration=args.duration,
            release_height=args.height,
            release_temperature=args.release_temp,
        )
        weather = WeatherState(
            wind_speed=args.wind_speed,
            wind_direction=args.wind_dir,
            temperature=args.temperature,
            cloud_cover=None if args.cloud is None else percent_to_fraction(args.cloud),
            timestamp=datetime.fromisoformat(args.time) if args.time else datetime.now(),
        )
        levels = tuple(args.levels)
        if args.ppm:
            levels = tuple(
                float(ppm_to_mg_m3(level, source.molecular_weight,
                                   weather.temperature, weather.pressure))
                for level in levels
            )
        engine = DispersionEngine(EngineConfig(
            table=args.table,
            calm_policy=args.calm_policy,
            contour=ContourSettings(
                sectors=args.sectors,
                resolution_m=args.resolution,
                max_distance_m=args.max_distance,
            ),
            levels=levels,
        ))
        assessment = engine.assess(source, weather, receptor_ring(source, args.receptors))
    except (DispersionError, ValueError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(summarise(assessment), indent=2))

    if args.geojson:
        collection = {
            "type": "FeatureCollection",
            "features": [to_geojson(c) for c in assessment.contours],
        }
        with open(args.geojson, "w") as f:
            json.dump(collection, f)
        logger.info("Wrote %s", args.geojson)

    if args.figure or args.centerline_figure:
        from visualization.plots import create_centerline_figure, create_contour_figure

        if args.figure:
            fig = create_contour_figure(assessment.contours, source, assessment.receptors)
            fig.write_html(args.figure)
            logger.info("Wrote %s", args.figure)
        if args.centerline_figure:
            eff = assessment.effective_source
            distances = np.geomspace(10.0, args.max_distance, 300)
            conc = g_to_mg(centerline_concentration(
                distances, eff.source_strength, eff.effective_height,
                assessment.wind_speed, assessment.stability_class, table=args.table,
            ))
            fig = create_centerline_figure(distances, conc, levels, assessment.peak_distance)
            fig.write_html(args.centerline_figure)
            logger.info("Wrote %s", args.centerline_figure)

    return 0


if __name__ == "__main__":
    sys.exit(main())
