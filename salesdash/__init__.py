"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- data loading (CSV -> pandas)
- selection state and the derived, filtered views
- aggregation functions (one result shape per chart)
- playback (timer-driven year animation)
- chart renderers (Altair -> Vega-Lite spec dict) and the enlarge/export presenter
"""
