# REST package init
"""
Alpaca API — Generic REST Endpoints
====================================

What:  RecordEndpointMaker, the factory that turns a collection name and a
       document shape into list/get/create/update/remove/search routes.
"""

from alpaca.rest.endpoint_maker import RecordEndpointMaker, make_path

__all__ = ["RecordEndpointMaker", "make_path"]
