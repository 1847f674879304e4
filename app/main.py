import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import CORS_ORIGINS, STORAGE_BACKEND
from app.routers import storage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(
    title="Filevault API",
    description="Object storage for binary assets with swappable local and Supabase backends",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(storage.router)


@app.get("/")
async def root():
    return {"message": "Filevault API", "version": "0.1.0", "storageBackend": STORAGE_BACKEND}
