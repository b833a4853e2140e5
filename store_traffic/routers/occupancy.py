"""Current in-memory store occupancy, as tracked by the traffic generator."""

from fastapi import APIRouter, HTTPException, Request

router = APIRouter()


@router.get("/occupancy", summary="Current customer count for all stores")
def get_all_occupancy(request: Request):
    occupancy = request.app.state.generator.occupancy
    return [
        {"store_id": store_id, "current_count": occupancy.get(store_id)}
        for store_id in request.app.state.generator.store_ids
    ]


@router.get("/occupancy/{store_id}", summary="Current customer count for one store")
def get_store_occupancy(store_id: int, request: Request):
    generator = request.app.state.generator
    if store_id not in generator.store_ids:
        raise HTTPException(status_code=404, detail=f"Store '{store_id}' not found")
    return {"store_id": store_id, "current_count": generator.occupancy.get(store_id)}
