"""Services Layer - sync targets, reconciliation engine and multi-target coordinator.

Invariants:
    - Records and targets processed sequentially (no worker pools)
    - Engine and coordinator depend on the SyncTarget protocol, never on concrete stores
"""
