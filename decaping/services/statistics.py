"""Dashboard figures computed from the stored operations, machines and incidents."""

from datetime import datetime, time, timedelta
from typing import Dict, Iterable, List
from zoneinfo import ZoneInfo

from decaping.core import clock
from decaping.models import Operation
from decaping.models.enums import DecapingMethod, MachineState
from decaping.store.entity_store import EntityStore

WEEKDAY_LABELS = ["Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim"]
TREND_DAYS = 7
INCIDENT_WINDOW_DAYS = 30


def _yield(volume: float, hours: float) -> float:
    return volume / hours if hours > 0 else 0


def yield_by_method(operations: Iterable[Operation]) -> Dict[str, float]:
    totals = {m.value: [0.0, 0.0] for m in DecapingMethod}
    for op in operations:
        if op.decaping_method in totals:
            totals[op.decaping_method][0] += op.excavated_volume
            totals[op.decaping_method][1] += op.running_hours
    return {method: _yield(volume, hours) for method, (volume, hours) in totals.items()}


def dashboard_stats(store: EntityStore) -> Dict[str, float]:
    operations = store.operations.list()
    machines = store.machines.list()

    total_volume = sum(op.excavated_volume for op in operations)
    total_hours = sum(op.running_hours for op in operations)

    running = sum(1 for m in machines if m.current_state == MachineState.RUNNING.value)
    availability = running / len(machines) * 100 if machines else 0

    since = clock.now() - timedelta(days=INCIDENT_WINDOW_DAYS)

    return {
        "totalExcavatedVolume": total_volume,
        "machineAvailability": availability,
        "averageYield": _yield(total_volume, total_hours),
        "safetyIncidents30Days": store.safety_incidents.count_since(since),
    }


def performance_by_method(store: EntityStore) -> Dict[str, object]:
    """Overall yield per method plus a daily trend over the last seven site days."""
    tz = ZoneInfo(store.site_timezone)
    today = clock.site_date(store.site_timezone)
    days = [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]

    start = datetime.combine(days[0], time.min, tzinfo=tz)
    end = datetime.combine(today + timedelta(days=1), time.min, tzinfo=tz)
    recent = store.operations.list_between(start, end)

    per_day: Dict[str, List[Operation]] = {d.isoformat(): [] for d in days}
    for op in recent:
        key = op.date.astimezone(tz).date().isoformat()
        if key in per_day:
            per_day[key].append(op)

    daily_yields = [yield_by_method(per_day[d.isoformat()]) for d in days]

    return {
        "averages": yield_by_method(store.operations.list()),
        "trend": {
            "labels": [WEEKDAY_LABELS[d.weekday()] for d in days],
            "datasets": [
                {"method": m.value, "data": [round(y[m.value], 2) for y in daily_yields]}
                for m in DecapingMethod
            ],
        },
    }
