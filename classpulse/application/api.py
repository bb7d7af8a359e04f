"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, settings
from .controller import ClassroomController
from .schemas import (
    AppendSnapshotRequest,
    AttendanceRequest,
    EndSessionRequest,
    LoginRequest,
    StartSessionRequest,
)
from ..domain.entities import Identity
from ..domain.errors import ClassroomError, InternalError, Unauthorized
from ..domain.services import (
    Aggregator,
    AttendanceRegister,
    ClassroomStore,
    EventLog,
    ReportScheduler,
    SessionRegistry,
    SnapshotRelay,
)
from ..infrastructure.dynamodb_datastore import DynamoDBDatastore
from ..infrastructure.jwt_auth_provider import JwtAuthProvider, default_dev_users
from ..infrastructure.smtp_notifier import SmtpNotifier

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)
PUBLIC_PATHS = frozenset({"/health", "/auth/login"})
router = APIRouter()


def build_controller(app_settings: Settings) -> ClassroomController:
    """Wire the core services and collaborators from settings."""
    datastore = None
    if app_settings.datastore_type == "dynamodb":
        datastore = DynamoDBDatastore(
            sessions_table=app_settings.sessions_table_name,
            snapshots_table=app_settings.snapshots_table_name,
            region_name=app_settings.aws_region,
        )

    store = ClassroomStore()
    registry = SessionRegistry(store, datastore=datastore)
    event_log = EventLog(store, datastore=datastore)
    aggregator = Aggregator(registry, event_log)
    notifier = SmtpNotifier(
        host=app_settings.smtp_host,
        user=app_settings.smtp_user,
        password=app_settings.smtp_pass,
        sender=app_settings.smtp_from,
        port=app_settings.smtp_port,
    )

    return ClassroomController(
        auth_provider=JwtAuthProvider(
            secret=app_settings.jwt_secret,
            algorithm=app_settings.jwt_algorithm,
            expires_in=timedelta(hours=app_settings.jwt_expires_hours),
            users=default_dev_users(app_settings.dev_pw),
        ),
        registry=registry,
        relay=SnapshotRelay(store, mailbox_size=app_settings.relay_mailbox_size),
        event_log=event_log,
        aggregator=aggregator,
        attendance=AttendanceRegister(store),
        scheduler=ReportScheduler(
            aggregator,
            notifier,
            hour=app_settings.report_hour_utc,
            minute=app_settings.report_minute_utc,
        ),
    )


def get_controller(request: Request) -> ClassroomController:
    return request.app.state.controller


def _verify_bearer(request: Request, scheme: str, token: str) -> Identity:
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized()
    return get_controller(request).auth_provider.verify(token)


def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Identity:
    """Verify the bearer token. Every failure looks the same to the caller."""
    if credentials is None:
        raise Unauthorized()
    return _verify_bearer(request, credentials.scheme, credentials.credentials)


async def classroom_error_handler(request: Request, exc: ClassroomError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(f"Internal error on {request.url.path}: {exc.__cause__ or exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": "Internal server error"},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The body is parsed before dependencies run, so protected routes check
    # the token here as well.
    if request.url.path not in PUBLIC_PATHS:
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        try:
            _verify_bearer(request, scheme, token.strip())
        except Unauthorized as e:
            return await classroom_error_handler(request, e)

    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "Malformed JSON body"
    else:
        fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in errors})
        message = f"Invalid fields: {', '.join(fields)}"
    return JSONResponse(status_code=422, content={"error": "validation_error", "message": message})


@router.get("/health")
async def health_check(controller: ClassroomController = Depends(get_controller)):
    """Health check endpoint."""
    return controller.get_health_status()


@router.post("/auth/login")
async def login(body: LoginRequest, controller: ClassroomController = Depends(get_controller)):
    """Exchange development credentials for a bearer token."""
    identity = controller.auth_provider.authenticate(body.email, body.password, body.role)
    return {"token": controller.auth_provider.issue_token(identity)}


@router.post("/sessions/start")
async def start_session(
    body: Optional[StartSessionRequest] = None,
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Open a session owned by the caller."""
    course_id = body.course_id if body else "course"
    session = await controller.open_session(course_id, caller)
    return {"sessionId": session.id}


@router.post("/sessions/end")
async def end_session(
    body: EndSessionRequest,
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Close a session. Closing twice is not an error."""
    await controller.close_session(body.session_id)
    return {"ok": True}


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    session = controller.get_session(session_id)
    return session.model_dump(mode="json", by_alias=True)


@router.post("/analytics/events")
async def append_event(
    body: AppendSnapshotRequest,
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Durably record a snapshot in the session's event log."""
    await controller.record_snapshot(
        session_id=body.session_id,
        student_id=body.student_id,
        attention=body.attention,
        state=body.state,
        timestamp=body.timestamp,
    )
    return {"ok": True}


@router.get("/analytics/summary")
async def get_summary(
    session_id: str = Query(..., alias="sessionId", description="Session to summarize"),
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Per-student mean attention and state histogram for a session."""
    summary = controller.summarize(session_id)
    return summary.model_dump(mode="json", by_alias=True)


@router.get("/analytics/alert")
async def get_alert(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Class advisory from the most recent live snapshot of each student."""
    return controller.class_alert(session_id).model_dump(mode="json", by_alias=True)


@router.post("/attendance/snapshot")
async def mark_attendance(
    body: AttendanceRequest,
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    await controller.mark_attendance(body.session_id, body.student_id, body.status, body.timestamp)
    return {"ok": True}


@router.get("/attendance")
async def get_attendance(
    session_id: str = Query(..., alias="sessionId"),
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    records = controller.attendance_records(session_id)
    return {
        "sessionId": session_id,
        "records": [record.model_dump(mode="json", by_alias=True) for record in records],
    }


@router.post("/reports/daily")
async def daily_report(
    caller: Identity = Depends(require_identity),
    controller: ClassroomController = Depends(get_controller),
):
    """Aggregate every session now. Teachers also get the report by mail."""
    report, mail = await controller.daily_report(caller)
    return {
        "report": [entry.model_dump(mode="json", by_alias=True) for entry in report],
        "mail": {"status": mail.value} if mail else None,
    }


@router.websocket("/live")
async def live_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for the live snapshot topic.

    Messages (JSON text frames):
    - ``{"type": "snapshot", studentId, attention, state, sessionId?, timestamp?}``
      is stamped and broadcast to every connected client, sender included.
    - ``{"type": "ping"}`` is answered with ``{"type": "pong"}``.

    Malformed snapshots are dropped without a reply.
    """
    await websocket.accept()
    await websocket.app.state.controller.handle_live_connection(websocket)


def create_app(app_settings: Settings = settings, controller: Optional[ClassroomController] = None) -> FastAPI:
    """Create the FastAPI app with its own controller and report job."""
    controller = controller or build_controller(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app_settings.report_enabled:
            controller.scheduler.start()
        try:
            yield
        finally:
            await controller.scheduler.stop()

    # Create FastAPI app instance
    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.controller = controller

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ClassroomError, classroom_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
