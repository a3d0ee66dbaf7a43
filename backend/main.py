from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum
import logging
from config import ENVIRONMENT

from routers.auth.auth import router as auth_router
from routers.users.users import router as users_router
from routers.products.products import router as products_router
from routers.applications.applications import router as applications_router
from routers.donors.donors import router as donors_router

IS_PRODUCTION = ENVIRONMENT == "prod"

logging.basicConfig(
    level=logging.INFO if IS_PRODUCTION else logging.DEBUG,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="PolloPollo API",
    description="Donation platform connecting people in need with local shops, paid for by donors in Obyte.",
    version="1.0.0",
    root_path="/Prod" if IS_PRODUCTION else "",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(products_router)
app.include_router(applications_router)
app.include_router(donors_router)


@app.get("/", include_in_schema=False)
def home():
    """Service name and where to find the API documentation"""
    return {"service": app.title, "version": app.version, "docs": app.docs_url, "redoc": app.redoc_url}


handler = Mangum(app)
