"""
Scoring layer: pure functions from fetched records to dashboard numbers.

Modules
-------
coverage    Live/simulated accounting over a record list.
metrics     Volatility, active disruptions, overall risk, indicator and KPI rows.
predictor   Logistic disruption nowcast and the aggregated 0–100 indicator.

Nothing here performs I/O; identical inputs always give identical outputs.
"""
