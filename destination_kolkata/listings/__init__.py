"""
Listing search & filter pipeline.

Responsibilities:
- Normalize raw request parameters into a typed filter query.
- Build a store predicate from the filter query.
- Assemble the ordered stage sequence (proximity or match, sort, paging, projection).
- Count matches with the same predicate and wrap results in a pagination envelope.
"""
