"""
Application-wide constants
"""

# The 91-day cycle: day 0 through day 90 inclusive
ROUTINE_WINDOW_DAYS = 90
ROUTINE_TOTAL_DAYS = ROUTINE_WINDOW_DAYS + 1

DEFAULT_TARGET_COMPLETIONS = 91

# How far next/previous expected-date lookups scan before giving up.
# Sparse rules (e.g. once a month) need at least ~35 days.
SEARCH_HORIZON_DAYS = 60

NTH_WEEK_MIN = 1
NTH_WEEK_MAX = 4

# Pace thresholds (share of expected completions achieved so far)
PACE_ON_TRACK_RATIO = 0.95
PACE_SLIGHTLY_BEHIND_RATIO = 0.80

# Consistency grades, highest first: (minimum compliance %, grade)
CONSISTENCY_GRADES = (
    (95.0, "A+"),
    (90.0, "A"),
    (85.0, "A-"),
    (80.0, "B+"),
    (75.0, "B"),
    (70.0, "B-"),
    (65.0, "C+"),
    (60.0, "C"),
)
CONSISTENCY_GRADE_FAILING = "F"
