# app/dispensing_engine/dependencies.py
from fastapi import Depends, HTTPException, Request, status

from app.dispensing_engine.dispatch_client import DispatchQueue
from app.dispensing_engine.fulfillment import PrescriptionFulfillmentWorkflow


def get_dispatcher(request: Request) -> DispatchQueue:
    """The robot dispatch queue started by the application lifespan."""
    dispatcher = getattr(request.app.state, "dispatch_queue", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dispatch queue is not running",
        )
    return dispatcher


def get_workflow(dispatcher: DispatchQueue = Depends(get_dispatcher)) -> PrescriptionFulfillmentWorkflow:
    return PrescriptionFulfillmentWorkflow(dispatcher)
