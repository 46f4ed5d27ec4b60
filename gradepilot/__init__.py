"""
GradePilot: grade aggregation and what-if GPA engine

Turns raw per-assignment scores into category percentages, per-class letter
grades and semester/cumulative GPA, and previews hypothetical grade changes
without touching stored records.
"""

__version__ = "1.0.0"
__author__ = "GradePilot Development Team"
__description__ = "Grade aggregation and what-if GPA engine"
