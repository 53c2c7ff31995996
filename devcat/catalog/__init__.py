"""Catalog core — aggregation and filtering of devfile descriptors.

The catalog provides:
- Fetching: one concurrent request per configured registry endpoint
- Aggregation: merge, stamp with origin, sort by display name
- Facets: frequency tables over tags and types
- Filtering: search text -> tags -> types
"""
