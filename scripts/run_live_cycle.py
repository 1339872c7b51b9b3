#!/usr/bin/env python
"""
Run one refresh cycle against the live OpenWeatherMap API.

Alerts go to the log and nothing is persisted to the database.

Usage (from repo root):
    OPENWEATHER_API_KEY=... python scripts/run_live_cycle.py [lat lon]
"""

import asyncio
import logging
import sys

from bagyo.ingestors import LocationIngestor, OpenWeatherIngestor
from bagyo.services import AlertLedger, LoggingNotifier, ThreatAssessmentOrchestrator
from bagyo.storage import InMemoryKeyValueStore

# Tacloban City, Leyte
LAT = 11.2443
LON = 125.0039


async def main(lat: float, lon: float) -> None:
    store = InMemoryKeyValueStore()
    orchestrator = ThreatAssessmentOrchestrator(
        location_provider=LocationIngestor(latitude=lat, longitude=lon),
        weather_provider=OpenWeatherIngestor(),
        ledger=AlertLedger(store, LoggingNotifier()),
        store=store,
    )
    orchestrator.load()

    print(f"=== Live threat assessment for {lat}, {lon} ===\n")
    state = await orchestrator.refresh()
    await orchestrator.stop()

    if state.reading is None:
        print("No reading available; check the API key and network access.")
        return

    reading = state.reading
    print(f"Location:  {state.location.label}")
    print(
        f"Wind:      {reading.wind_speed_ms:.1f} m/s ({reading.wind_speed_kmh} km/h) "
        f"from {state.wind_compass or 'n/a'}"
    )
    print(f"Condition: {reading.condition.value} ({reading.description or '-'})")
    print(f"Signal:    #{int(state.signal_level)} {state.signal_description}")
    print(f"Forecast:  {len(state.forecast)} days")
    print(
        f"Overlays:  {len(state.projection.vortex_bands)} bands, "
        f"{len(state.projection.wind_flow_lines)} flow lines, "
        f"{len(state.projection.precipitation_zones)} rain zones"
    )
    for alert in state.alert_history:
        print(f"Alert:     {alert.message}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    if len(sys.argv) == 3:
        asyncio.run(main(float(sys.argv[1]), float(sys.argv[2])))
    else:
        asyncio.run(main(LAT, LON))
