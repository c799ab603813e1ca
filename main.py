from contextlib import asynccontextmanager
import logging
import os

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
import uvicorn

from database import init_db
from route_modules import combined_router
from service_modules.upload_helper import UPLOAD_ROOT

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("fitmaker_admin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("FitMaker admin started")
    yield


app = FastAPI(title="FitMaker Admin", lifespan=lifespan)

# Locally stored uploads (development) are served from here
os.makedirs(UPLOAD_ROOT, exist_ok=True)
app.mount("/static", StaticFiles(directory=os.path.dirname(UPLOAD_ROOT)), name="static")
app.include_router(combined_router)


@app.middleware("http")
async def add_no_cache_header(request, call_next):
    response = await call_next(request)
    # Admin data must always be fresh
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate, max-age=0, private"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return response


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 9007))
    uvicorn.run(app, host="0.0.0.0", port=port)
