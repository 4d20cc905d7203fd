from __future__ import annotations
import os
import logging
from typing import List
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI, File, HTTPException, Response, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import create_engine, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

import auth
from config import SETTINGS
from logging_config import setup_logging
from models import Application, Base, Company, Job, Profile, Stage, utcnow
from schemas import (
    ApplicationCreate,
    ApplicationOut,
    ApplicationUpdate,
    ExtractIn,
    JobBase,
    JobOut,
    JobScanIn,
    LoginIn,
    MetricsOut,
    ProfileOut,
    ProfileUpdate,
    ResumeUploadOut,
    ScanResult,
)
from parsers.jd_extract import extract_job_posting
from parsers.resume import UnsupportedResumeType, extract_resume_text, normalize_resume_text
from matching.analysis import analyze_match, generate_cover_letter_bullets

logger = logging.getLogger(__name__)

engine = None
Session = sessionmaker(autoflush=False, autocommit=False, future=True)

SESSION_AUTH = [Depends(auth.require_session)]
EXTENSION_AUTH = [Depends(auth.require_extension_or_session)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, bind the session factory and create tables."""
    global engine

    setup_logging(SETTINGS.log_level, SETTINGS.log_json)
    os.makedirs(SETTINGS.base_dir, exist_ok=True)

    db_url = SETTINGS.resolved_database_url()
    logger.info("Database: %s", db_url)
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, future=True, connect_args=connect_args)
    Session.configure(bind=engine)
    Base.metadata.create_all(engine)

    yield
    engine.dispose()
    logger.info("Application shutting down.")


app = FastAPI(title="JobTrail API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_or_create_profile(s) -> Profile:
    """Single-user system: the first profile row wins, created empty if absent."""
    profile = s.query(Profile).order_by(Profile.id).first()
    if not profile:
        profile = Profile()
        s.add(profile)
        s.flush()
    return profile


def find_company(s, name: str) -> Company | None:
    return s.query(Company).filter(Company.name == name).first()


def find_job_by_url(s, source_url: str) -> Job | None:
    return s.query(Job).filter(Job.source_url == source_url).first()


def get_or_create_company(s, name: str, logo_url: str | None = None, website: str | None = None) -> Company:
    company = find_company(s, name)
    if not company:
        company = Company(name=name, logo_url=logo_url, website=website)
        s.add(company)
        s.flush()
    elif logo_url and not company.logo_url:
        company.logo_url = logo_url
    return company


def apply_analysis(job: Job, company_name: str, resume_text: str) -> None:
    """Run match analysis plus bullet drafting and overwrite the job's results."""
    analysis = analyze_match(resume_text, job.title, job.description, job.requirements or None)
    bullets = generate_cover_letter_bullets(resume_text, job.title, job.description, company_name)

    job.match_score = analysis.overall_score
    job.matching_skills = analysis.matching_skills
    job.missing_skills = analysis.missing_skills
    job.extracted_skills = analysis.extracted_skills
    job.cover_letter_bullets = [b.model_dump(by_alias=True) for b in bullets]


def _get_job_or_404(s, job_id: int) -> Job:
    job = s.get(Job, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def _get_application_or_404(s, application_id: int) -> Application:
    application = s.get(Application, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


# -------------------------------------------------------------------
# Session
# -------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/auth/login")
def login(body: LoginIn, response: Response):
    if not body.passcode:
        raise HTTPException(status_code=400, detail="Passcode is required")
    if not auth.verify_passcode(body.passcode):
        logger.info("Rejected login attempt")
        raise HTTPException(status_code=401, detail="Invalid passcode")

    token = auth.create_session_token()
    auth.set_session_cookie(response, token)
    # Token is returned too so the extension can send it as a bearer header.
    return {"success": True, "token": token}


@app.post("/api/auth/logout")
def logout(response: Response):
    auth.clear_session_cookie(response)
    return {"success": True}


@app.get("/api/auth/session")
def session_status(request: Request):
    return {"authenticated": auth.is_authenticated(request)}


# -------------------------------------------------------------------
# Profile
# -------------------------------------------------------------------
@app.get("/api/profile", response_model=ProfileOut, dependencies=SESSION_AUTH)
def get_profile():
    with Session() as s:
        profile = get_or_create_profile(s)
        s.commit()
        return ProfileOut.model_validate(profile)


@app.put("/api/profile", response_model=ProfileOut, dependencies=SESSION_AUTH)
def update_profile(body: ProfileUpdate):
    with Session() as s:
        profile = get_or_create_profile(s)
        for field, value in body.model_dump(exclude_unset=True).items():
            if field == "resume_text" and value is not None:
                value = normalize_resume_text(value)
            setattr(profile, field, value)
        s.commit()
        s.refresh(profile)
        return ProfileOut.model_validate(profile)


@app.post("/api/profile/resume", response_model=ResumeUploadOut, dependencies=SESSION_AUTH)
def upload_resume(file: UploadFile | None = File(None)):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        text = extract_resume_text(file.file.read(), file.content_type, file.filename)
    except UnsupportedResumeType:
        raise HTTPException(status_code=400, detail="Unsupported file type. Please upload PDF, DOCX or TXT.")
    except Exception as e:
        logger.exception("Failed to parse resume %s", file.filename)
        raise HTTPException(status_code=500, detail=f"Failed to parse resume: {e}")

    with Session() as s:
        profile = get_or_create_profile(s)
        profile.resume_text = text
        profile.resume_file_name = file.filename
        s.commit()

    logger.info("Stored resume %s (%d chars)", file.filename, len(text))
    return ResumeUploadOut(text=text, file_name=file.filename)


# -------------------------------------------------------------------
# Jobs
# -------------------------------------------------------------------
@app.get("/api/jobs", response_model=List[JobOut], dependencies=SESSION_AUTH)
def list_jobs():
    with Session() as s:
        jobs = s.query(Job).order_by(Job.created_at.desc(), Job.id.desc()).all()
        return [JobOut.model_validate(j) for j in jobs]


@app.get("/api/jobs/{job_id}", response_model=JobOut, dependencies=SESSION_AUTH)
def get_job(job_id: int):
    with Session() as s:
        return JobOut.model_validate(_get_job_or_404(s, job_id))


@app.delete("/api/jobs/{job_id}", dependencies=SESSION_AUTH)
def delete_job(job_id: int):
    with Session() as s:
        s.delete(_get_job_or_404(s, job_id))
        s.commit()
    return {"success": True}


def _scan_owners(s, payload: JobScanIn):
    profile = get_or_create_profile(s)
    company = get_or_create_company(s, payload.company_name, payload.company_logo_url, payload.company_website)
    s.commit()
    return profile, company


def _already_scanned(job: Job) -> ScanResult:
    return ScanResult(job=JobOut.model_validate(job), is_new=False, analyzed=False, message="Job already scanned")


@app.post("/api/jobs/scan", response_model=ScanResult, dependencies=EXTENSION_AUTH)
def scan_job(payload: JobScanIn):
    """Ingest a job captured by the browser extension, analyzing it when a resume exists."""
    if payload.missing_required():
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: title, companyName, description, sourceUrl, sourceSite",
        )

    with Session() as s:
        try:
            profile, company = _scan_owners(s, payload)
        except IntegrityError:
            # Company was created by a concurrent scan.
            s.rollback()
            profile, company = _scan_owners(s, payload)

        existing = find_job_by_url(s, payload.source_url)
        if existing:
            return _already_scanned(existing)

        job = Job(
            title=payload.title,
            company_id=company.id,
            profile_id=profile.id,
            description=payload.description,
            requirements=payload.requirements,
            responsibilities=payload.responsibilities,
            location=payload.location,
            location_type=(payload.location_type.value if payload.location_type else "ONSITE"),
            salary_min=payload.salary_min,
            salary_max=payload.salary_max,
            salary_currency=payload.salary_currency,
            salary_period=payload.salary_period.value if payload.salary_period else None,
            employment_type=(payload.employment_type.value if payload.employment_type else "FULL_TIME"),
            experience_level=payload.experience_level.value if payload.experience_level else None,
            source_url=payload.source_url,
            source_site=payload.source_site,
        )
        s.add(job)
        try:
            s.commit()
        except IntegrityError:
            s.rollback()
            existing = s.query(Job).filter(Job.source_url == payload.source_url).one()
            return _already_scanned(existing)
        logger.info("Created job %d: %s @ %s", job.id, job.title, company.name)

        analyzed = False
        if profile.resume_text:
            try:
                apply_analysis(job, company.name, profile.resume_text)
                s.commit()
                analyzed = True
            except Exception:
                s.rollback()
                logger.exception("Analysis failed for job %d; returning it unanalyzed", job.id)

        s.refresh(job)
        return ScanResult(job=JobOut.model_validate(job), is_new=True, analyzed=analyzed)


@app.post("/api/jobs/extract", dependencies=EXTENSION_AUTH)
def extract_job(body: ExtractIn):
    if not body.page_content or not body.page_url:
        raise HTTPException(status_code=400, detail="Page content and URL are required")
    try:
        return extract_job_posting(body.page_content, body.page_url, body.page_title or "")
    except Exception:
        logger.exception("Extraction failed for %s", body.page_url)
        raise HTTPException(status_code=500, detail="Failed to extract job data")


@app.post("/api/jobs/{job_id}/analyze", response_model=JobOut, dependencies=SESSION_AUTH)
def analyze_job(job_id: int):
    with Session() as s:
        job = _get_job_or_404(s, job_id)
        profile = s.query(Profile).order_by(Profile.id).first()
        if not profile or not profile.resume_text:
            raise HTTPException(status_code=400, detail="No resume found. Please upload your resume first.")

        try:
            apply_analysis(job, job.company.name, profile.resume_text)
            s.commit()
        except Exception:
            s.rollback()
            logger.exception("Analysis failed for job %d", job_id)
            raise HTTPException(status_code=500, detail="Failed to analyze job")

        s.refresh(job)
        return JobOut.model_validate(job)


# -------------------------------------------------------------------
# Applications
# -------------------------------------------------------------------
@app.get("/api/applications", response_model=List[ApplicationOut], dependencies=SESSION_AUTH)
def list_applications():
    with Session() as s:
        applications = s.query(Application).order_by(Application.updated_at.desc(), Application.id.desc()).all()
        return [ApplicationOut.model_validate(a) for a in applications]


@app.post("/api/applications", response_model=ApplicationOut, dependencies=SESSION_AUTH)
def create_application(body: ApplicationCreate):
    """Track a job. Idempotent per job: an existing application is returned as-is."""
    if not body.job_id:
        raise HTTPException(status_code=400, detail="Job ID is required")

    with Session() as s:
        job = _get_job_or_404(s, body.job_id)
        if job.application:
            return ApplicationOut.model_validate(job.application)

        profile = get_or_create_profile(s)
        application = Application(
            job_id=job.id,
            profile_id=profile.id,
            stage=Stage.APPLIED.value,
            applied_date=utcnow(),
        )
        s.add(application)
        try:
            s.commit()
        except IntegrityError:
            # Lost a race with a concurrent create for the same job.
            s.rollback()
            application = s.query(Application).filter(Application.job_id == job.id).one()
        else:
            logger.info("Tracking job %d as application %d", job.id, application.id)
        return ApplicationOut.model_validate(application)


@app.put("/api/applications/{application_id}", response_model=ApplicationOut, dependencies=SESSION_AUTH)
def update_application(application_id: int, body: ApplicationUpdate):
    """Any stage can move to any other stage; there is no transition table."""
    with Session() as s:
        application = _get_application_or_404(s, application_id)
        changes = body.model_dump(exclude_unset=True)
        if changes.get("stage") is None:
            changes.pop("stage", None)
        for field, value in changes.items():
            if field == "stage":
                value = Stage(value).value
                if value != application.stage:
                    logger.info("Application %d: %s -> %s", application.id, application.stage, value)
            setattr(application, field, value)
        s.commit()
        s.refresh(application)
        return ApplicationOut.model_validate(application)


@app.delete("/api/applications/{application_id}", dependencies=SESSION_AUTH)
def delete_application(application_id: int):
    with Session() as s:
        s.delete(_get_application_or_404(s, application_id))
        s.commit()
    return {"success": True}


# -------------------------------------------------------------------
# Metrics
# -------------------------------------------------------------------
def period_start(period: str, now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    return now - timedelta(days=30)


@app.get("/api/metrics", response_model=MetricsOut, dependencies=SESSION_AUTH)
def metrics(period: str = "month"):
    start = period_start(period)

    def stage_count(s, stage: Stage) -> int:
        return (
            s.query(func.count(Application.id))
            .filter(Application.stage == stage.value, Application.created_at >= start)
            .scalar()
        )

    with Session() as s:
        total_jobs = s.query(func.count(Job.id)).filter(Job.created_at >= start).scalar()
        avg_score = (
            s.query(func.avg(Job.match_score))
            .filter(Job.match_score.isnot(None), Job.created_at >= start)
            .scalar()
        )
        recent = (
            s.query(Job)
            .filter(Job.created_at >= start)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .limit(5)
            .all()
        )
        return MetricsOut(
            total_jobs=total_jobs,
            applied_jobs=stage_count(s, Stage.APPLIED),
            interview_jobs=stage_count(s, Stage.INTERVIEW),
            offer_jobs=stage_count(s, Stage.OFFER),
            avg_match_score=float(avg_score or 0),
            recent_jobs=[JobBase.model_validate(j) for j in recent],
        )
