"""Deal records -- schemas, valuation, month handling, and name lookups.

Provides the Pydantic deal and reference-entity models consumed by the
forecast engine, the per-deal valuation functions, YYYY-MM period helpers,
and the NameLookup capability used to resolve manufacturer/reseller names.
"""
