import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from hotel_booking import errors
from hotel_booking.admin import BookingRow, DashboardSummary, InventoryEditor, RoomForm
from hotel_booking.config import settings
from hotel_booking.models import (
    Booking,
    BookingStatusUpdateRequest,
    DatesRequest,
    GuestDetailsRequest,
    Room,
    RoomUpdate,
    SessionResponse,
    ViewChangeRequest,
)
from hotel_booking.router import AppState, back_to_rooms, change_view, select_room, start_over
from hotel_booking.sessions import SessionRegistry
from hotel_booking.stores import Stores, build_stores
from hotel_booking.telemetry import setup_telemetry
from hotel_booking.wizard import BookingWizard, WizardStep

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

stores = build_stores()
sessions = SessionRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await stores.close()


# Create FastAPI app
app = FastAPI(
    title="Hotel Booking API",
    description="Room browsing, booking wizard and inventory administration",
    version=settings.service_version,
    docs_url="/",
    redoc_url=None,
    lifespan=lifespan,
)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup OpenTelemetry
tracer, meter = setup_telemetry(app)

# Create custom metrics
booking_counter = meter.create_counter(
    name="hotel_bookings_total",
    description="Total number of bookings created",
    unit="1",
)

booking_failure_counter = meter.create_counter(
    name="hotel_booking_failures_total",
    description="Total number of booking submissions the backend rejected",
    unit="1",
)

room_mutation_counter = meter.create_counter(
    name="hotel_room_mutations_total",
    description="Total number of room create, update and delete operations",
    unit="1",
)


def get_stores() -> Stores:
    return stores


def get_sessions() -> SessionRegistry:
    return sessions


@app.exception_handler(errors.NotFound)
async def not_found_handler(request: Request, exc: errors.NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(errors.ValidationError)
async def validation_error_handler(request: Request, exc: errors.ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.messages})


@app.exception_handler(errors.InvalidStep)
async def invalid_step_handler(request: Request, exc: errors.InvalidStep):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(errors.SubmissionInProgress)
async def submission_in_progress_handler(request: Request, exc: errors.SubmissionInProgress):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(errors.RemoteFailure)
async def remote_failure_handler(request: Request, exc: errors.RemoteFailure):
    logger.error(f"Remote store failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "The booking backend is unavailable"})


def render_session(session_id: str, state: AppState) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        view=state.view.value,
        customer_view=state.customer_view.value,
        selected_room=state.selected_room,
        wizard=state.wizard.snapshot() if state.wizard else None,
    )


def require_wizard(state: AppState) -> BookingWizard:
    if state.wizard is None:
        raise errors.InvalidStep(state.customer_view.value, "edit a booking")
    return state.wizard


@app.get("/health")
async def health(stores: Stores = Depends(get_stores)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store_backend": settings.store_backend,
        "remote_connected": stores.client is not None,
    }


# Rooms

@app.get("/api/rooms", response_model=list[Room])
async def list_rooms(stores: Stores = Depends(get_stores)):
    """List all rooms, cheapest first."""
    with tracer.start_as_current_span("list_rooms") as span:
        rooms = await stores.directory.list_all()
        span.set_attribute("room_count", len(rooms))
        return rooms


@app.get("/api/rooms/available", response_model=list[Room])
async def list_available_rooms(
    check_in: date = Query(..., description="Check-in date (ISO format)"),
    check_out: date = Query(..., description="Check-out date (ISO format)"),
    guests: int = Query(1, ge=1, description="Number of guests"),
    stores: Stores = Depends(get_stores),
):
    """Rooms that can host the party for the whole stay."""
    with tracer.start_as_current_span("list_available_rooms") as span:
        span.set_attribute("guests", guests)
        rooms = await stores.directory.list_available(check_in, check_out, guests)
        logger.info(f"Availability search {check_in}..{check_out}, guests={guests}: {len(rooms)} rooms")
        return rooms


@app.get("/api/rooms/{room_id}", response_model=Room)
async def get_room(room_id: str, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("get_room") as span:
        span.set_attribute("room_id", room_id)
        return await stores.directory.get(room_id)


@app.get("/api/rooms/{room_id}/availability")
async def check_room_availability(
    room_id: str,
    check_in: date = Query(..., description="Check-in date (ISO format)"),
    check_out: date = Query(..., description="Check-out date (ISO format)"),
    stores: Stores = Depends(get_stores),
):
    with tracer.start_as_current_span("check_room_availability") as span:
        span.set_attribute("room_id", room_id)
        available = await stores.directory.is_available(room_id, check_in, check_out)
        return {"room_id": room_id, "check_in": check_in, "check_out": check_out, "available": available}


@app.get("/api/rooms/{room_id}/bookings", response_model=list[Booking])
async def list_room_bookings(room_id: str, stores: Stores = Depends(get_stores)):
    """Confirmed and pending bookings of a room, earliest check-in first."""
    with tracer.start_as_current_span("list_room_bookings") as span:
        span.set_attribute("room_id", room_id)
        return await stores.ledger.list_by_room(room_id)


# Sessions and the booking wizard

@app.post("/api/sessions", response_model=SessionResponse, status_code=201)
async def create_session(sessions: SessionRegistry = Depends(get_sessions)):
    session_id, state = sessions.create()
    return render_session(session_id, state)


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    return render_session(session_id, sessions.get(session_id))


@app.post("/api/sessions/{session_id}/view", response_model=SessionResponse)
async def set_view(
    session_id: str,
    request: ViewChangeRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    try:
        state = change_view(sessions.get(session_id), request.view)
    except ValueError as exc:
        raise errors.ValidationError(f"Unknown view '{request.view}'. Use customer or admin") from exc
    return render_session(session_id, sessions.save(session_id, state))


@app.post("/api/sessions/{session_id}/rooms/{room_id}", response_model=SessionResponse)
async def choose_room(
    session_id: str,
    room_id: str,
    stores: Stores = Depends(get_stores),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Start a booking for a room."""
    with tracer.start_as_current_span("choose_room") as span:
        span.set_attribute("room_id", room_id)
        room = await stores.directory.get(room_id)
        state = select_room(sessions.get(session_id), room, stores.ledger)
        return render_session(session_id, sessions.save(session_id, state))


@app.post("/api/sessions/{session_id}/back", response_model=SessionResponse)
async def go_back_to_rooms(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Abandon the booking in progress."""
    state = back_to_rooms(sessions.get(session_id))
    return render_session(session_id, sessions.save(session_id, state))


@app.post("/api/sessions/{session_id}/start-over", response_model=SessionResponse)
async def start_session_over(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    state = start_over(sessions.get(session_id))
    return render_session(session_id, sessions.save(session_id, state))


@app.put("/api/sessions/{session_id}/wizard/dates", response_model=SessionResponse)
async def set_wizard_dates(
    session_id: str,
    request: DatesRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    state = sessions.get(session_id)
    require_wizard(state).set_dates(request.check_in, request.check_out, request.guests)
    return render_session(session_id, state)


@app.put("/api/sessions/{session_id}/wizard/guest", response_model=SessionResponse)
async def set_wizard_guest(
    session_id: str,
    request: GuestDetailsRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    state = sessions.get(session_id)
    require_wizard(state).set_guest_details(request.guest_name, request.guest_email, request.guest_phone)
    return render_session(session_id, state)


@app.post("/api/sessions/{session_id}/wizard/next", response_model=SessionResponse)
async def advance_wizard(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """
    Advance the booking wizard.
    On the payment step this completes the booking; a backend failure is
    reported in the wizard's error and the step does not change.
    """
    state = sessions.get(session_id)
    wizard = require_wizard(state)

    with tracer.start_as_current_span("advance_wizard") as span:
        span.set_attribute("room_id", wizard.room.id)
        span.set_attribute("wizard.step", wizard.step.value)

        if wizard.step is not WizardStep.PAYMENT:
            wizard.advance()
            return render_session(session_id, state)

        booking = await wizard.submit()
        if booking is None:
            span.set_attribute("error", True)
            booking_failure_counter.add(1, {"room_id": wizard.room.id})
        else:
            span.set_attribute("booking_id", booking.id)
            booking_counter.add(1, {"room_id": booking.room_id, "status": booking.status.value})
        return render_session(session_id, state)


# Bookings

@app.get("/api/bookings", response_model=list[Booking])
async def list_bookings(
    email: Optional[str] = Query(None, description="Only bookings made with this guest email"),
    stores: Stores = Depends(get_stores),
):
    with tracer.start_as_current_span("list_bookings") as span:
        span.set_attribute("by_email", email is not None)
        if email:
            return await stores.ledger.list_by_email(email)
        return await stores.ledger.list_all()


@app.get("/api/bookings/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("get_booking") as span:
        span.set_attribute("booking_id", booking_id)
        return await stores.ledger.get(booking_id)


@app.patch("/api/bookings/{booking_id}", response_model=Booking)
async def update_booking(
    booking_id: str,
    request: BookingStatusUpdateRequest,
    stores: Stores = Depends(get_stores),
):
    """Change a booking's status, e.g. to cancel it."""
    with tracer.start_as_current_span("update_booking") as span:
        span.set_attribute("booking_id", booking_id)
        span.set_attribute("updated.status", request.status.value)
        return await stores.ledger.update_status(booking_id, request.status)


# Administration

@app.get("/api/admin/summary", response_model=DashboardSummary)
async def admin_summary(stores: Stores = Depends(get_stores)):
    return await InventoryEditor(stores.directory, stores.ledger).summary()


@app.get("/api/admin/bookings", response_model=list[BookingRow])
async def admin_bookings(stores: Stores = Depends(get_stores)):
    return await InventoryEditor(stores.directory, stores.ledger).bookings_table()


@app.post("/api/admin/rooms", response_model=Room, status_code=201)
async def admin_create_room(form: RoomForm, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("admin_create_room"):
        editor = InventoryEditor(stores.directory, stores.ledger)
        editor.start_new()
        room = await editor.save(form)
        room_mutation_counter.add(1, {"operation": "create"})
        return room


@app.put("/api/admin/rooms/{room_id}", response_model=Room)
async def admin_replace_room(room_id: str, form: RoomForm, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("admin_replace_room") as span:
        span.set_attribute("room_id", room_id)
        editor = InventoryEditor(stores.directory, stores.ledger)
        await editor.start_edit(room_id)
        room = await editor.save(form)
        room_mutation_counter.add(1, {"operation": "update"})
        return room


@app.patch("/api/admin/rooms/{room_id}", response_model=Room)
async def admin_update_room(room_id: str, changes: RoomUpdate, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("admin_update_room") as span:
        span.set_attribute("room_id", room_id)
        room = await stores.directory.update(room_id, changes)
        room_mutation_counter.add(1, {"operation": "update"})
        return room


@app.delete("/api/admin/rooms/{room_id}", status_code=204)
async def admin_delete_room(room_id: str, stores: Stores = Depends(get_stores)):
    with tracer.start_as_current_span("admin_delete_room") as span:
        span.set_attribute("room_id", room_id)
        await InventoryEditor(stores.directory, stores.ledger).delete(room_id)
        room_mutation_counter.add(1, {"operation": "delete"})
        return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
