from __future__ import annotations
import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Any
from ..config import SimConfig
from ..runtime.geometry import CacheGeometry
from ..runtime.simulator import SimResult
from . import viz

def format_configuration(config: SimConfig) -> str:
    """The configuration block printed before a run."""
    return "\n".join([
        "--- Configuration ---",
        f"Cache Size: {config.cache_size_kb} KB",
        f"Block Size: {config.block_size_bytes} Bytes",
        f"Associativity: {config.associativity}",
        "---------------------",
    ])

def format_geometry(geometry: CacheGeometry) -> str:
    return "\n".join([
        "--- Cache Geometry ---",
        f"Num Sets: {geometry.num_sets}",
        f"Offset Bits: {geometry.offset_bits}",
        f"Index Bits: {geometry.index_bits}",
        f"Tag Bits: {geometry.tag_bits}",
        "----------------------",
    ])

def format_summary(result: SimResult) -> str:
    stats = result.stats
    return "\n".join([
        "--- Simulation Results ---",
        f"Total Accesses: {stats.accesses}",
        f"Hits: {stats.hits}",
        f"Misses: {stats.misses}",
        f"Hit Rate: {stats.hit_rate_percent}",
        "--------------------------",
    ])

def generate_report_json(result: SimResult, config: SimConfig) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary from a finished run."""
    stats = result.stats
    set_stats = [
        {"set": i, "hits": hits, "misses": misses}
        for i, (hits, misses) in enumerate(zip(result.set_hits, result.set_misses))
    ]
    return {
        "total_accesses": stats.accesses,
        "hits": stats.hits,
        "misses": stats.misses,
        "cold_misses": stats.cold_misses,
        "capacity_misses": stats.capacity_misses,
        "hit_rate": stats.hit_rate,
        "hit_rate_percent": stats.hit_rate_percent,
        "reads": result.reads,
        "writes": result.writes,
        "geometry": asdict(result.geometry),
        "hit_rate_history": [list(point) for point in result.hit_rate_history],
        "set_stats": set_stats,
        "config": config.__dict__,
    }

def generate_report(result: SimResult, config: SimConfig):
    """Generates all report artifacts."""
    report_data = generate_report_json(result, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    if config.html_report:
        viz.export_hit_rate_chart(result.hit_rate_history, str(output_dir / "report.html"))

    print(viz.export_set_histogram_ascii(result.set_hits, result.set_misses))

    print(f"\nReports generated in {output_dir.absolute()}")
    print()
    print(format_summary(result))
    if result.stats.misses:
        print(f"  Cold Misses: {result.stats.cold_misses}")
        print(f"  Capacity Misses: {result.stats.capacity_misses}")
    return report_data
