import logging

from .common import app
from .routers.auth.endpoints import router as AuthEndpoints
from .routers.invites.endpoints import router as InvitesEndpoints
from .routers.relationships.endpoints import router as RelationshipsEndpoints
from .routers.search.endpoints import router as SearchEndpoints

logger = logging.getLogger(__name__)

# Include routers
app.include_router(AuthEndpoints)
app.include_router(InvitesEndpoints)
app.include_router(RelationshipsEndpoints)
app.include_router(SearchEndpoints)

@app.get("/")
async def root():
    return {"message": "API is running"}
