# Services package init
"""
Alpaca API — Services Layer
============================

What:  The layer between routes (HTTP) and the MongoDB driver.

Service Inventory:
    - RecordService: CRUD and prefix search for one collection bound to one
      document shape; translates driver outcomes into application exceptions.
"""
