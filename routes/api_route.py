"""FastAPI routes exposing relay presence and detection history."""

from fastapi import APIRouter, HTTPException, Query, Request

from controllers.presence_controller import health, list_users, recent_detections, stats

router = APIRouter(prefix="/api", tags=["relay"])


@router.get("/health")
async def health_route(request: Request):
	try:
		return await health(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/users")
async def users_route(request: Request):
	try:
		return await list_users(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/detections")
async def detections_route(request: Request, limit: int = Query(100, ge=1, le=1000)):
	"""Return the most recent confirmed detections, newest first."""
	try:
		return await recent_detections(request, limit)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/stats")
async def stats_route(request: Request):
	try:
		return await stats(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
