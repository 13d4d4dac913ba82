"""
Utility functions module.

Date handling shared by the parser, the lot matcher and the resampler.

Date Semantics:
- Execution and bar dates are calendar dates with no time-of-day component
- Week buckets start on Monday; Sunday belongs to the preceding week
- Month buckets start on the 1st
"""
