import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import Base, engine, get_db, ensure_schema
from .cleanup import purge_expired_sessions
from .errors import AppError
from .settings import settings
from .routers import auth
from .routers import follow
from .routers import progress
from .routers import placement
from .routers import vocabulary

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.allowed_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(auth.router)
app.include_router(follow.router)
app.include_router(progress.router)
app.include_router(placement.router)
app.include_router(vocabulary.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
	if exc.status_code >= 500:
		logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
	return JSONResponse({"message": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
	fields = [f for f in fields if f]
	message = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request body"
	return JSONResponse({"message": message}, status_code=400)


@app.get("/info")
def root():
	return {"status": "ok"}


def _purge_once() -> None:
	gen = get_db()
	db = next(gen)
	try:
		removed = purge_expired_sessions(db)
		if removed:
			logger.info("Purged %d expired sessions", removed)
	except Exception:
		logger.exception("Session cleanup failed")
	finally:
		gen.close()


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(24 * 60 * 60)
		_purge_once()


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	try:
		ensure_schema()
	except Exception:
		logger.exception("Schema migration failed")
	_purge_once()
	# Start periodic cleanup loop
	asyncio.create_task(_cleanup_watcher())
