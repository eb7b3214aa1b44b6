"""
Pagination and content aggregation shared by every feature endpoint.

Request flow, leaf-first:
1) `cursor` decodes the client's opaque token into sort-key values
2) `fetcher` runs one bounded keyset (or offset) read of the primary rows
3) `references` batch-resolves foreign keys found on those rows
4) `translations` overlays locale-specific fields with per-field fallback
5) `assembler` shapes items and packages the page envelope
"""
