# Routes package init
"""
Alpaca API — API Routes Package
================================

Route Inventory:
    - projects.py: GET/POST        /api/projects
                   POST            /api/projects/_search
                   GET/PUT/DELETE  /api/projects/{id}
    - info.py:     GET  /api/version
    - health.py:   GET  /health

Routes are thin: they read the request, call a service and return its result.
Collection endpoints are not written by hand; RecordEndpointMaker generates them.
"""
