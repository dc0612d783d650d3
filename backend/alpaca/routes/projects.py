"""
Alpaca API — Projects Routes
=============================

What:  Binds the `projects` collection to /{api_prefix}/projects.
How:   RecordEndpointMaker registers the six record endpoints for the
       Project shape on this module's router.
"""

from fastapi import APIRouter

from alpaca.config import settings
from alpaca.models.project import Project
from alpaca.rest.endpoint_maker import RecordEndpointMaker

PROJECTS = "projects"

router = APIRouter(tags=["Projects"])

maker = RecordEndpointMaker(prefix=settings.api_prefix, router=router)
maker.make_record_endpoints(PROJECTS, Project)
