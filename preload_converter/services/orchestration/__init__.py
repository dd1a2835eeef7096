"""Service orchestration layer: coordinates multi-file conversion workflows.

Modules:
- conversion_service: plans jobs for file or folder mode, runs them fault-isolated,
  and re-runs them on change events.
"""
