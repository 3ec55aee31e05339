from fastapi import APIRouter
from skolara.api import version_prefix
from skolara.admin.routes import admin_router
from skolara.auth.routes import auth_router
from skolara.colleges.routes import colleges_admin_router, colleges_public_router
from skolara.common.routes import home_router
from skolara.media.routes import media_router


public_routers = APIRouter(prefix=version_prefix)

public_routers.include_router(auth_router, prefix="/auth", tags=["auth"])
public_routers.include_router(colleges_public_router, prefix="/colleges", tags=["colleges-public"])
public_routers.include_router(home_router, tags=["home"])

#--------------------------------------------------------------------------------------------------------

admin_routers = APIRouter(prefix=f"{version_prefix}/admin")

admin_routers.include_router(colleges_admin_router, prefix="/colleges", tags=["colleges-admin"])
admin_routers.include_router(media_router, prefix="/uploads", tags=["uploads-admin"])
admin_routers.include_router(admin_router, tags=["admin"])
