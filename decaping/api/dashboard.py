"""Dashboard statistics and per-method performance."""

from typing import Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from decaping.api.dependencies import get_current_user, get_store
from decaping.core.security import AuthUser
from decaping.services import statistics
from decaping.store.entity_store import EntityStore

router = APIRouter(tags=["dashboard"])


class DashboardStats(BaseModel):
    totalExcavatedVolume: float
    machineAvailability: float
    averageYield: float
    safetyIncidents30Days: int


class TrendDataset(BaseModel):
    method: str
    data: List[float]


class Trend(BaseModel):
    labels: List[str]
    datasets: List[TrendDataset]


class PerformanceByMethod(BaseModel):
    averages: Dict[str, float]
    trend: Trend


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return statistics.dashboard_stats(store)


@router.get("/performance/by-method", response_model=PerformanceByMethod)
def performance_by_method(
    user: AuthUser = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    return statistics.performance_by_method(store)
