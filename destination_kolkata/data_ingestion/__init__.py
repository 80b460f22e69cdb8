"""
Listing data ingestion package.

Responsibilities:
- Read the bundled seed JSON for each listing type.
- Normalize every record into a store-ready listing document.
- Persist the processed documents locally and swap them into the live store.
- Keep a history of ingestion runs for the back office.
"""
