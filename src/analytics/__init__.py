"""
Analytics Package
=================
Pure, synchronous computations over in-memory life-log records.

Modules:
  time_normalization - pivot-hour day-cycle clock, AM/PM formatting
  day_records        - RawEvent / JournalEntry / DayRecord, event aggregation
  stats_primitives   - Pearson r, Cohen's d, standard deviation, p-value
  insight_analyzers  - the four cohort analyses and AnalyticsResult
  averages           - mean times, durations, scores, moving averages
  feelings           - journal feeling / state tallies
"""
