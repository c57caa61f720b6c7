# Routes package init
"""
HomeStock Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource.

Route Inventory:
    - stock.py:   GET/POST /api/v1/stock, GET/PATCH/DELETE /api/v1/stock/{id}
    - health.py:  GET / (welcome), GET /health (service health check)

Design Principle:
    Routes are THIN: they extract fields and files from the request, call
    StockService, and pick the status code. Business logic lives in services.
"""
