from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from preload_mock.routers import analysis, mocks

app = FastAPI(
    title="Preload Mock Server",
    description="API for preload export analysis, mock generation and bundle cleanup.",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(analysis.router)
app.include_router(mocks.router)


@app.get("/api-status")
async def root():
    return {"message": "Preload Mock Server is running. Visit /docs for API documentation."}
