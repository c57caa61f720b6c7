# Services package init
"""
HomeStock Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and repositories.
Why:   Routes handle HTTP, services handle ordering and failure rules.

Service Inventory:
    - ImageService: Cloudinary upload, deletion and health check
    - StockService: validate → upload → persist workflow for stock items

Both are built from explicit arguments (no module-level clients), so tests
can hand the app a fake ImageService through `app.state`.
"""
