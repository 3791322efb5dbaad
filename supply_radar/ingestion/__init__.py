"""
Ingestion layer: one client per upstream feed, all behind ``ResilientSource``.

Submodules:
  resilient            fetch-with-fallback wrapper, shape helpers, JSON I/O
  oscillator           synthetic percent-change generator (injectable clock/rng)
  quote_client         quote chart API (metals, indices, VIX)
  news_client          GDELT DOC API disruption news
  disaster_client      ReliefWeb disaster registry (POST query)
  vulnerability_client CISA Known Exploited Vulnerabilities feed

No feed requires credentials.  Every client returns a SIMULATED record
instead of raising when its upstream is unavailable.
"""
