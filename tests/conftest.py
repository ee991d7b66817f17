"""
Shared fixtures for the claim service tests.
"""
import copy
from datetime import datetime, timedelta, timezone

import pytest

from claim_store.record_store import JsonRecordStore


class FixedClock:
    """Settable clock for day-boundary tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


SAMPLE_ANALYSIS = {
    "damagedParts": [
        {
            "part": "Front bumper",
            "severity": "severe",
            "description": "Cracked and pushed in on the driver side",
            "estimatedRepairCost": "$800 - $1,200",
            "repairOrReplace": "replace",
            "repairOrReplaceReason": "Mounting tabs are broken",
        },
    ],
    "inferredInternalDamages": [
        {
            "component": "Radiator support",
            "likelihood": "likely",
            "description": "Impact energy reached the core support",
            "basedOn": "Bumper intrusion depth",
        },
    ],
    "overallSeverity": "moderate",
    "estimatedRepairComplexity": "medium",
    "estimatedTotalRepairCost": 2400,
    "damageType": "rear-end",
    "damageCause": "Low speed collision in a parking lot",
    "confidence": 0.82,
    "confidenceReasoning": "Clear footage of the front of the vehicle",
    "safetyConcerns": ["Headlight alignment"],
    "recommendedActions": ["Inspect radiator support", ""],
    "investigationNeeded": False,
    "vehicleVerification": {
        "videoVehicle": {"make": "Toyota", "model": "Corolla", "year": 2019, "color": "Silver"},
        "policyVehicle": {"make": "Toyota", "model": "Corolla", "year": 2019, "color": "Silver"},
        "verificationStatus": "matched",
        "mismatches": [],
        "confidenceScore": 0.9,
        "notes": "Plate visible",
    },
    "claimAssessment": {
        "status": "approved",
        "financialBreakdown": {
            "totalRepairEstimate": 2400,
            "coveredAmount": 2400,
            "deductible": 500,
            "nonCoveredItems": 0,
            "estimatedPayout": 1900,
        },
        "reasoning": "Collision coverage applies",
    },
}


@pytest.fixture
def sample_analysis():
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def record_store(tmp_path):
    return JsonRecordStore(tmp_path / "data")


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 14, 10, 30, tzinfo=timezone.utc))
