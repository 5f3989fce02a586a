#!/usr/bin/env python3
"""
smoke_test.py — MeshPulse End-to-End Smoke Test

Runs against a live API (uvicorn api.main:app) and checks:
  1. API health
  2. Sensor listing and detail
  3. Cluster listing and detail
  4. Category table
  5. On-demand refresh
"""

import os
import sys

import httpx

CHECKS = []


def check(name, fn):
    try:
        result = fn()
        ok = bool(result) if not isinstance(result, bool) else result
        if ok:
            print(f"  ✅  {name}")
            CHECKS.append((name, True, None))
        else:
            print(f"  ❌  {name}: returned falsy")
            CHECKS.append((name, False, "returned falsy"))
    except Exception as e:
        print(f"  ❌  {name}: {e}")
        CHECKS.append((name, False, str(e)))


def main():
    api = os.environ.get("MESHPULSE_API", "http://localhost:8000")
    client = httpx.Client(timeout=20)

    print()
    print("=" * 60)
    print("  MeshPulse — End-to-End Smoke Test")
    print("=" * 60)
    print()

    check("GET /api/health → ok",
          lambda: client.get(f"{api}/api/health").json()["status"] == "ok")

    print()
    print("── Sensors ──────────────────────────────────────────────")

    sensors = []

    def list_sensors():
        r = client.get(f"{api}/api/sensors/")
        sensors.extend(r.json())
        return r.status_code == 200 and len(sensors) > 0
    check("GET /api/sensors/ → non-empty", list_sensors)

    def community_verified():
        community = [s for s in sensors if not s["is_official"]]
        return community and all(s["verification"] is not None for s in community)
    check("every community sensor carries a verification", community_verified)

    def officials_unverified():
        return all(s["verification"] is None for s in sensors if s["is_official"])
    check("no official station carries a verification", officials_unverified)

    def sensor_detail():
        sid = sensors[0]["id"]
        r = client.get(f"{api}/api/sensors/{sid}")
        return r.status_code == 200 and len(r.json()["history"]) > 0
    check("GET /api/sensors/{id} → history present", sensor_detail)

    print()
    print("── Clusters ─────────────────────────────────────────────")

    def clusters():
        r = client.get(f"{api}/api/clusters/")
        body = r.json()
        return r.status_code == 200 and all(
            c["confidence"] in ("High", "Medium", "Low") and c["anchor_id"] not in c["member_status"]
            for c in body
        )
    check("GET /api/clusters/ → valid tiers, anchor not a member", clusters)

    check("GET /api/categories → 6 categories",
          lambda: len(client.get(f"{api}/api/categories").json()) == 6)

    print()
    print("── Refresh ──────────────────────────────────────────────")

    def refresh():
        r = client.post(f"{api}/api/refresh")
        return r.status_code == 200 and r.json()["cycle"] >= 2
    check("POST /api/refresh → new cycle", refresh)

    # ── Summary ──────────────────────────────────────────────────────────────
    print()
    print("=" * 60)
    passed = sum(1 for _, ok, _ in CHECKS if ok)
    failed = len(CHECKS) - passed
    print(f"  Results: {passed}/{len(CHECKS)} checks passed")
    if failed == 0:
        print("  ✅  ALL CHECKS PASSED — System healthy")
    else:
        print(f"  ❌  {failed} CHECKS FAILED")
        for name, ok, err in CHECKS:
            if not ok:
                print(f"       • {name}: {err}")
    print("=" * 60)

    client.close()
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
