"""
MeshPulse — Air-Quality Trust Engine Package.

Components:
    - aqi: NAQI breakpoint conversion and category presentation lookup
    - confidence: triangulation verifier and cluster aggregator
    - ingestion: data models, sensor catalog, validator, simulated feed
    - streaming: rolling per-sensor reading history
    - orchestrator: one refresh cycle → complete Snapshot
    - reconcile: snapshot-to-snapshot diff for presentation layers
    - monitor: refresh-cycle host with atomic snapshot publication
"""
