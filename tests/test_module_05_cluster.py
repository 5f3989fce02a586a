"""
Tests for Module 05 — Cluster Aggregator.
"""
from datetime import datetime, timezone

import pytest

from pipeline.confidence.cluster import ClusterThresholds, aggregate
from pipeline.confidence.verifier import Tier
from pipeline.ingestion.models import Station, make_reading
from pipeline.orchestrator import SensorSnapshot

NOW = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)


def _make_member(station_id: str, pm25: float, anchor_id: str = "official-md") -> SensorSnapshot:
    station = Station(
        station_id=station_id, name=station_id,
        latitude=28.6, longitude=77.28, anchor_id=anchor_id,
    )
    return SensorSnapshot(station=station, reading=make_reading(pm25, NOW))


def _members(*values):
    return [_make_member(f"s{i}", v) for i, v in enumerate(values, start=1)]


class TestEmptyCluster:
    def test_no_members(self):
        result = aggregate([], 123.0)
        assert result.active_sensors == 0
        assert result.mean_concentration == 0.0
        assert result.confidence == Tier.LOW
        assert result.anomaly_detected is False
        assert result.calibration_factor == 1.0
        assert result.member_status == {}

    def test_only_inactive_members(self):
        result = aggregate(_members(0.0, 0.0), 100.0)
        assert result.active_sensors == 0
        assert result.calibration_factor == 1.0


class TestSingleMember:
    def test_single_active_member_forces_low(self):
        result = aggregate(_members(100.0), 100.0)
        assert result.active_sensors == 1
        assert result.member_status["s1"].deviation == 0.0
        assert result.member_status["s1"].is_anomaly is False
        assert result.confidence == Tier.LOW


class TestScenarios:
    def test_uniform_cluster_is_high(self):
        result = aggregate(_members(100.0, 100.0, 100.0), 100.0)
        assert result.mean_concentration == 100.0
        assert all(s.deviation == 0.0 for s in result.member_status.values())
        assert result.confidence == Tier.HIGH
        assert result.anomaly_detected is False
        assert result.calibration_factor == 1.0

    def test_outlier_cluster_is_low(self):
        result = aggregate(_members(100.0, 100.0, 400.0), 150.0)
        assert result.mean_concentration == 200.0
        deviations = [result.member_status[k].deviation for k in ("s1", "s2", "s3")]
        assert deviations == pytest.approx([0.5, 0.5, 1.0])
        assert all(s.is_anomaly for s in result.member_status.values())
        assert result.anomaly_detected is True
        assert result.confidence == Tier.LOW
        assert result.calibration_factor == pytest.approx(0.75)

    def test_moderate_spread_is_medium(self):
        result = aggregate(_members(100.0, 120.0, 80.0), 100.0)
        assert result.max_deviation == pytest.approx(0.2)
        assert result.confidence == Tier.MEDIUM
        assert result.anomaly_detected is False

    def test_calibration_factor_reflects_anchor_offset(self):
        result = aggregate(_members(120.0, 120.0), 90.0)
        assert result.calibration_factor == pytest.approx(0.75)


class TestMembership:
    def test_inactive_members_are_excluded(self):
        result = aggregate(_members(100.0, 0.0, 100.0), 100.0)
        assert result.active_sensors == 2
        assert set(result.member_status) == {"s1", "s3"}

    def test_anchor_is_never_a_member(self):
        members = _members(100.0, 100.0) + [_make_member("official-md", 500.0, anchor_id=None)]
        result = aggregate(members, 100.0, anchor_id="official-md")
        assert "official-md" not in result.member_status
        assert result.active_sensors == 2
        assert result.confidence == Tier.HIGH

    def test_anchor_name_left_for_caller(self):
        assert aggregate(_members(100.0, 100.0), 100.0).anchor_name == ""


class TestThresholds:
    def test_relaxed_thresholds(self):
        relaxed = ClusterThresholds(anomaly=0.50, low_confidence=0.40, medium_confidence=0.20)
        result = aggregate(_members(100.0, 120.0, 80.0), 100.0, thresholds=relaxed)
        assert result.confidence == Tier.HIGH

    def test_anomaly_threshold_is_strict(self):
        # 55 vs mean 100 → exactly 0.45 deviation, not above 0.45
        t = ClusterThresholds(anomaly=0.45, low_confidence=0.9, medium_confidence=0.5)
        result = aggregate(_members(145.0, 55.0), 100.0, thresholds=t)
        assert result.anomaly_detected is False
