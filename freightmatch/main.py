# freightmatch/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from freightmatch.config import settings
from freightmatch.routers import commission, loads, matching, save_new_load, vehicles

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL.upper(),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Freight Match API",
    description="API for matching posted loads with compatible vehicles and tracking commission.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN] if settings.FRONTEND_ORIGIN else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(matching.router, prefix="/api/v1/matching", tags=["Matching"])
app.include_router(loads.router, prefix="/api/v1/loads", tags=["Loads"])
app.include_router(save_new_load.router, prefix="/api/v1/loads", tags=["Save New Load"])
app.include_router(vehicles.router, prefix="/api/v1/vehicles", tags=["Vehicles"])
app.include_router(commission.router, prefix="/api/v1/commission", tags=["Commission"])

@app.get("/", tags=["Root"])
async def read_root():
    logger.info("Root endpoint was accessed.")
    return {"message": "Welcome to the Freight Match API!"}

if __name__ == "__main__":
    logger.info(f"Starting Uvicorn server on http://localhost:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
