"""Strain Engine — deterministic multi-skill difficulty rating for typed rhythm charts.

Sub-package containing:
    config            – YAML tuning loader (all tuned constants)
    keymap            – static key → finger / row / offset table
    rate_utils        – playback-rate scaling and flam snapping
    normalization     – canonical notes and chord rows
    finger_state      – per-finger physical state
    pattern_analyzer  – roll / jack / jump comfort modifiers
    skill, skills     – strain framework and the seven skills
    aggregation       – peak weighting and final skill combination
    calculator        – orchestrates one rating pass
    official          – legacy single-formula rating, for comparison
"""
