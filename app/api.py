from fastapi import FastAPI, UploadFile, File, Form, HTTPException, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
import logging
import os
from datetime import timedelta
from typing import List, Optional

from app.db import init_db
from app.jobs import enqueue_sweep, get_job_status
from app.schemas import SignInRequest, SignupRequest, SignupResponse, SubmissionResponse, SweepResponse
from app.services import Services, get_services
from vendorgate.errors import (
    AuthError,
    ConfigurationError,
    DocumentProcessingError,
    InvalidTransition,
    NoDocumentsSubmitted,
    SessionNotFound,
)
from vendorgate.gate import SignupData
from vendorgate.reporters import to_html
from vendorgate.types import AccountType, DocumentCategory, DocumentUpload

logger = logging.getLogger(__name__)

app = FastAPI(title="VendorGate Compliance API")

# --- CORS Setup ---
origins = [os.getenv("ALLOWED_ORIGINS", "*")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# -------------------

AUTH_STATUS = {
    "invalid-credential": 401,
    "user-disabled": 403,
    "network-request-failed": 503,
}


@app.on_event("startup")
async def startup_event():
    """Configure logging and initialize database on application startup"""
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_db()


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=AUTH_STATUS.get(exc.code, 400),
                        content={"code": exc.code, "message": exc.user_message})


@app.exception_handler(SessionNotFound)
async def session_not_found_handler(request: Request, exc: SessionNotFound):
    return JSONResponse(status_code=404, content={"detail": f"Unknown signup session: {exc}"})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(NoDocumentsSubmitted)
async def no_documents_handler(request: Request, exc: NoDocumentsSubmitted):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(DocumentProcessingError)
async def processing_error_handler(request: Request, exc: DocumentProcessingError):
    return JSONResponse(status_code=500, content={"detail": exc.user_message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return JSONResponse(status_code=500, content={"detail": f"configuration_error: {exc}"})


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/signup", summary="Start Signup", response_model=SignupResponse)
async def signup(payload: SignupRequest, services: Services = Depends(get_services)):
    data = SignupData(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        company_name=payload.company_name,
        account_type=AccountType(payload.account_type),
    )
    pending = services.gate.begin_signup(data, payload.password)
    return SignupResponse(session_id=pending.session_id, state=pending.state.value)


@app.post("/signup/{session_id}/documents", summary="Submit Compliance Documents",
          response_model=SubmissionResponse)
async def submit_documents(
    session_id: str,
    documents: List[UploadFile] = File(...),
    categories: Optional[List[str]] = Form(None),
    services: Services = Depends(get_services),
):
    categories = categories or []
    if len(categories) > len(documents):
        raise HTTPException(status_code=422, detail="more categories than documents")

    uploads = []
    for i, document in enumerate(documents):
        uploads.append(DocumentUpload(
            filename=os.path.basename(document.filename or f"document_{i}"),
            content=await document.read(),
            content_type=document.content_type,
            category=DocumentCategory.parse(categories[i]) if i < len(categories) and categories[i] else None,
        ))

    outcome = await services.gate.submit_documents(session_id, uploads)
    return SubmissionResponse(
        session_id=outcome.session_id,
        state=outcome.state.value,
        passed=outcome.passed,
        score=outcome.result.score,
        result=outcome.result.to_dict(),
        report=outcome.report.to_record(),
        user=outcome.user.to_record() if outcome.user else None,
    )


@app.post("/signup/{session_id}/retry", summary="Retry Rejected Signup", response_model=SignupResponse)
async def retry_signup(session_id: str, services: Services = Depends(get_services)):
    pending = services.gate.retry(session_id)
    return SignupResponse(session_id=pending.session_id, state=pending.state.value)


@app.post("/signin", summary="Sign In")
async def signin(payload: SignInRequest, services: Services = Depends(get_services)):
    try:
        profile = services.gate.sign_in(payload.email, payload.password)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return profile.to_record()


@app.get("/users/{user_id}", summary="Get User")
async def get_user(user_id: str, services: Services = Depends(get_services)):
    profile = services.directory.get(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"User {user_id} not found")
    return profile.to_record()


@app.get("/users/{user_id}/documents", summary="List Verified Documents")
async def user_documents(user_id: str, services: Services = Depends(get_services)):
    if services.directory.get(user_id) is None:
        raise HTTPException(status_code=404, detail=f"User {user_id} not found")
    documents = services.intake.list_verified(user_id)
    return {"items": [d.to_record() for d in documents], "total": len(documents)}


@app.get("/users/{user_id}/visible", summary="List Users Visible To A User")
async def visible_users(user_id: str, services: Services = Depends(get_services)):
    try:
        users = services.directory.visible_users(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"items": [u.to_record() for u in users], "total": len(users)}


def _list_accounts(services: Services, account_type: AccountType, admin_view: bool) -> dict:
    users = services.directory.list_by_type(account_type, admin_view=admin_view)
    return {"items": [u.to_record() for u in users], "total": len(users)}


@app.get("/vendors", summary="List Vendors")
async def list_vendors(
    admin_view: bool = Query(False, description="Hide records not approved by an admin"),
    services: Services = Depends(get_services),
):
    return _list_accounts(services, AccountType.VENDORS, admin_view)


@app.get("/clients", summary="List Clients")
async def list_clients(
    admin_view: bool = Query(False, description="Hide records not approved by an admin"),
    services: Services = Depends(get_services),
):
    return _list_accounts(services, AccountType.CLIENTS, admin_view)


def _latest_report(services: Services, user_id: str):
    report = services.reports.latest_for(user_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"No audit report for {user_id}")
    return report


@app.get("/reports/{user_id}/latest", summary="Latest Audit Report")
async def latest_report(user_id: str, services: Services = Depends(get_services)):
    return _latest_report(services, user_id).to_record()


@app.get("/reports/{user_id}/latest.html", summary="Latest Audit Report as HTML",
         response_class=HTMLResponse)
async def latest_report_html(user_id: str, services: Services = Depends(get_services)):
    return HTMLResponse(to_html(_latest_report(services, user_id)))


@app.post("/admin/sweep", summary="Expire Abandoned Signups", response_model=SweepResponse,
          response_model_exclude_none=True)
async def sweep(
    ttl_hours: Optional[int] = Query(None, ge=0, description="Override PENDING_TTL_HOURS"),
    services: Services = Depends(get_services),
):
    # Pending sessions live in this process, so they are always pruned here
    ttl = timedelta(hours=ttl_hours) if ttl_hours is not None else None
    response = SweepResponse(expired=services.gate.sweep_expired(ttl=ttl))

    # Check if async jobs are enabled
    if os.getenv("ASYNC_JOBS", "0") == "1":
        response.job_id = enqueue_sweep(ttl_hours)
        if response.job_id is None:
            logger.warning("Redis not available, storage sweep ran inline only")
    return response


@app.post("/admin/users/{user_id}/disable", summary="Disable User")
async def disable_user(user_id: str, services: Services = Depends(get_services)):
    try:
        services.gate.identities.disable(user_id)
        profile = services.directory.suspend(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return profile.to_record()


@app.get("/tasks/{job_id}", summary="Get Job Status")
async def get_task_status(job_id: str):
    """Get the status and result of a background job."""
    return get_job_status(job_id)
