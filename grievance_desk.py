# Campus Grievance Desk
# FastAPI + MongoDB

import os
import uuid
import asyncio
import calendar
import logging
from pathlib import Path
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor

import uvicorn
from fastapi import FastAPI, HTTPException, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import OAuth2PasswordBearer
from fastapi.templating import Jinja2Templates
from starlette.requests import Request
from pydantic import BaseModel, ConfigDict, Field
from pymongo import MongoClient, ReturnDocument
from jose import JWTError, jwt
from passlib.context import CryptContext
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from dotenv import load_dotenv
# Try multiple .env locations: next to this file, one level up, then cwd
_script_dir = Path(__file__).resolve().parent
for _env_path in [_script_dir / ".env", _script_dir.parent / ".env", Path.cwd() / ".env"]:
    if _env_path.is_file():
        load_dotenv(_env_path, override=True)
        break
else:
    load_dotenv(override=True)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "grievance_desk")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
JWT_SECRET = os.getenv("JWT_SECRET", "")
if not JWT_SECRET or len(JWT_SECRET) < 32:
    raise RuntimeError(
        "FATAL: JWT_SECRET must be set in the environment and be at least 32 characters. "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
    )
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "8"))

# created_at filters need a following month that datetime can still represent
MIN_FILTER_YEAR = 1970
MAX_FILTER_YEAR = 9998

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Department(str, Enum):
    COMPUTER_SCIENCE = "Computer Science"
    ELECTRICAL = "Electrical"
    MECHANICAL = "Mechanical"
    CIVIL = "Civil"
    MATHEMATICS = "Mathematics"
    PHYSICS = "Physics"

class GrievanceStatus(str, Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    RESOLVED = "resolved"

class UserRole(str, Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"

# ---------------------------------------------------------------------------
# Pydantic Models
# ---------------------------------------------------------------------------
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.STUDENT
    department: Optional[Department] = None
    registration_number: Optional[str] = Field(None, max_length=50)
    program: Optional[str] = Field(None, max_length=100)

class UserLogin(BaseModel):
    email: str
    password: str

class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    department: Optional[str] = None
    registration_number: Optional[str] = None
    program: Optional[str] = None
    created_at: datetime

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class StudentSummary(BaseModel):
    id: str
    name: str
    email: str
    registration_number: Optional[str] = None
    program: Optional[str] = None
    department: Optional[str] = None

class FacultySummary(BaseModel):
    id: str
    name: str
    email: str
    department: Optional[str] = None

class AssignmentEvent(BaseModel):
    faculty_id: str
    previous_faculty_id: Optional[str] = None
    assigned_by: Optional[str] = None
    assigned_at: datetime

class GrievanceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    department: Optional[Department] = None

class GrievanceResponse(BaseModel):
    id: str
    title: str
    description: str
    department: str
    status: GrievanceStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    student: Optional[StudentSummary] = None
    assigned_to: Optional[FacultySummary] = None
    resolution: Optional[str] = None
    resolved_at: Optional[datetime] = None
    assignment_history: List[AssignmentEvent] = Field(default_factory=list)

class GrievanceAssignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    faculty_id: str = Field(..., alias="facultyId", min_length=1, max_length=100)

class GrievanceResolution(BaseModel):
    resolution: str = Field(..., min_length=1, max_length=5000)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class InvalidFilter(ValueError):
    pass

class GrievanceNotFound(LookupError):
    pass

class InvalidAssignee(ValueError):
    pass

class GrievanceClosed(ValueError):
    pass

# ---------------------------------------------------------------------------
# App & Globals
# ---------------------------------------------------------------------------
app = FastAPI(title="Campus Grievance Desk")
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": jsonable_encoder(exc.errors())})

db_client = None
db = None
executor = ThreadPoolExecutor(max_workers=10)
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_db()
    yield
    if db_client:
        db_client.close()

app.router.lifespan_context = lifespan

async def startup_db():
    global db_client, db
    db_client = MongoClient(MONGODB_URL, tz_aware=True)
    db = db_client[MONGODB_DB]
    loop = asyncio.get_event_loop()
    await loop.run_in_executor(executor, db.grievances.create_index, "created_at")
    await loop.run_in_executor(executor, db.grievances.create_index, "status")
    await loop.run_in_executor(executor, db.grievances.create_index, "department")
    await loop.run_in_executor(executor, db.grievances.create_index, "student")
    await loop.run_in_executor(executor, db.grievances.create_index, "assigned_to")
    await loop.run_in_executor(executor, db.users.create_index, "role")
    await loop.run_in_executor(executor, lambda: db.users.create_index([("email", 1)], unique=True))
    logger.info("Database initialized: %s", MONGODB_DB)

# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
async def get_db():
    return db

# ---------------------------------------------------------------------------
# Auth Helpers
# ---------------------------------------------------------------------------
def hash_password(password: str) -> str:
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password cannot exceed 72 bytes")
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRE_HOURS)
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)

_token_blacklist: set = set()
TOKEN_BLACKLIST_PRUNE_AT = 10000

def prune_token_blacklist():
    """Drop revoked tokens that no longer decode; they are rejected anyway."""
    for token in list(_token_blacklist):
        try:
            jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except JWTError:
            _token_blacklist.discard(token)

async def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db=Depends(get_db)):
    if token is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if token in _token_blacklist:
        raise HTTPException(status_code=401, detail="Token has been revoked")
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    loop = asyncio.get_event_loop()
    user = await loop.run_in_executor(executor, db.users.find_one, {"_id": user_id})
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user

def require_role(*roles):
    async def role_checker(user=Depends(get_current_user)):
        if user["role"] not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user
    return role_checker

def user_to_response(user: dict) -> UserResponse:
    return UserResponse(
        id=str(user["_id"]), name=user["name"], email=user["email"], role=user["role"],
        department=user.get("department"), registration_number=user.get("registration_number"),
        program=user.get("program"), created_at=user["created_at"])

def new_user_doc(data: UserCreate) -> dict:
    return {
        "_id": str(uuid.uuid4()), "name": data.name, "email": data.email.strip().lower(),
        "hashed_password": hash_password(data.password), "role": data.role.value,
        "department": data.department.value if data.department else None,
        "registration_number": data.registration_number if data.role == UserRole.STUDENT else None,
        "program": data.program if data.role == UserRole.STUDENT else None,
        "created_at": datetime.now(timezone.utc),
    }

# ---------------------------------------------------------------------------
# Input Sanitization Helpers
# ---------------------------------------------------------------------------
def sanitize_str(value: str) -> str:
    """Ensure a value is a plain string, not a dict/list that could be a NoSQL operator."""
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail="Invalid parameter type")
    return str(value)

# ---------------------------------------------------------------------------
# Query Builder
# ---------------------------------------------------------------------------
def _parse_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidFilter(f"Invalid {name}: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidFilter(f"Invalid {name}: {value!r}")

def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return the half-open UTC interval [start of month, start of next month)."""
    if not 1 <= month <= 12:
        raise InvalidFilter(f"Month must be between 1 and 12, got {month}")
    if not MIN_FILTER_YEAR <= year <= MAX_FILTER_YEAR:
        raise InvalidFilter(f"Year must be between {MIN_FILTER_YEAR} and {MAX_FILTER_YEAR}, got {year}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end

def build_grievance_query(department: Optional[str] = None, status: Optional[str] = None,
                          month=None, year=None) -> Dict[str, Any]:
    """Translate the dashboard facets into a MongoDB filter.

    Empty values are ignored and department/status are plain equality
    matches. A date range is only applied when both month and year are
    given; either one alone is not an error. Non-numeric or out-of-range
    months/years raise InvalidFilter.
    """
    query: Dict[str, Any] = {}
    department = getattr(department, "value", department)
    status = getattr(status, "value", status)
    if department:
        query["department"] = department
    if status:
        query["status"] = status
    has_month = month not in (None, "")
    has_year = year not in (None, "")
    if has_month and has_year:
        start, end = month_range(_parse_int(year, "year"), _parse_int(month, "month"))
        query["created_at"] = {"$gte": start, "$lt": end}
    return query

def filter_options(today: Optional[date] = None) -> Dict[str, list]:
    today = today or datetime.now(timezone.utc).date()
    return {
        "departments": [d.value for d in Department],
        "statuses": [s.value for s in GrievanceStatus],
        "months": [(m, calendar.month_name[m]) for m in range(1, 13)],
        "years": [today.year - i for i in range(5)],
    }

# ---------------------------------------------------------------------------
# Grievance Repository
# ---------------------------------------------------------------------------
STUDENT_FIELDS = {"name": 1, "email": 1, "registration_number": 1, "program": 1, "department": 1}
FACULTY_FIELDS = {"name": 1, "email": 1, "department": 1}

def _summaries(db, ids, fields: dict) -> Dict[str, dict]:
    ids = [i for i in ids if i]
    if not ids:
        return {}
    return {u["_id"]: u for u in db.users.find({"_id": {"$in": list(set(ids))}}, fields)}

def _student_summary(u: Optional[dict]) -> Optional[StudentSummary]:
    if not u:
        return None
    return StudentSummary(id=str(u["_id"]), name=u["name"], email=u["email"],
                          registration_number=u.get("registration_number"),
                          program=u.get("program"), department=u.get("department"))

def _faculty_summary(u: Optional[dict]) -> Optional[FacultySummary]:
    if not u:
        return None
    return FacultySummary(id=str(u["_id"]), name=u["name"], email=u["email"],
                          department=u.get("department"))

def populate_grievances(db, grievances: List[dict]) -> List[GrievanceResponse]:
    students = _summaries(db, [g.get("student") for g in grievances], STUDENT_FIELDS)
    faculty = _summaries(db, [g.get("assigned_to") for g in grievances], FACULTY_FIELDS)
    return [GrievanceResponse(
        id=str(g["_id"]), title=g["title"], description=g["description"],
        department=g["department"], status=g["status"], created_at=g["created_at"],
        updated_at=g.get("updated_at"),
        student=_student_summary(students.get(g.get("student"))),
        assigned_to=_faculty_summary(faculty.get(g.get("assigned_to"))),
        resolution=g.get("resolution"), resolved_at=g.get("resolved_at"),
        assignment_history=g.get("assignment_history", []),
    ) for g in grievances]

def list_grievances(db, query: Dict[str, Any]) -> List[GrievanceResponse]:
    return populate_grievances(db, list(db.grievances.find(query).sort("created_at", -1)))

def list_faculty(db) -> List[FacultySummary]:
    return [_faculty_summary(u) for u in
            db.users.find({"role": UserRole.FACULTY.value}, FACULTY_FIELDS).sort("name", 1)]

def assign_grievance(db, grievance_id: str, faculty_id: str,
                     assigned_by: Optional[str] = None) -> GrievanceResponse:
    grievance = db.grievances.find_one({"_id": grievance_id})
    faculty = db.users.find_one({"_id": faculty_id})
    if not grievance:
        raise GrievanceNotFound(grievance_id)
    if not faculty or faculty.get("role") != UserRole.FACULTY.value:
        raise InvalidAssignee(faculty_id)
    if grievance.get("status") == GrievanceStatus.RESOLVED.value:
        raise GrievanceClosed(grievance_id)
    now = datetime.now(timezone.utc)
    event = {"faculty_id": faculty_id, "previous_faculty_id": grievance.get("assigned_to"),
             "assigned_by": assigned_by, "assigned_at": now}
    # Never reopen a grievance resolved after the read above
    updated = db.grievances.find_one_and_update(
        {"_id": grievance_id, "status": {"$ne": GrievanceStatus.RESOLVED.value}},
        {"$set": {"assigned_to": faculty_id, "status": GrievanceStatus.ASSIGNED.value,
                  "updated_at": now},
         "$push": {"assignment_history": event}},
        return_document=ReturnDocument.AFTER)
    if updated is None:
        if db.grievances.find_one({"_id": grievance_id}, {"_id": 1}) is None:
            raise GrievanceNotFound(grievance_id)
        raise GrievanceClosed(grievance_id)
    return populate_grievances(db, [updated])[0]

def can_view_grievance(user: dict, grievance: dict) -> bool:
    if user["role"] == UserRole.ADMIN.value:
        return True
    uid = str(user["_id"])
    return grievance.get("student") == uid or grievance.get("assigned_to") == uid

# ---------------------------------------------------------------------------
# AUTH ENDPOINTS
# ---------------------------------------------------------------------------
@app.post("/api/auth/register", response_model=TokenResponse)
@limiter.limit("3/minute")
async def register(request: Request, user_data: UserCreate, db=Depends(get_db)):
    # Public registration is student-only; faculty/admins are created via the admin API
    if user_data.role != UserRole.STUDENT:
        raise HTTPException(status_code=403, detail="Public registration is for students only. Faculty/admin accounts must be created by an administrator.")
    loop = asyncio.get_event_loop()
    existing = await loop.run_in_executor(executor, db.users.find_one, {"email": user_data.email.strip().lower()})
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user_doc = new_user_doc(user_data)
    await loop.run_in_executor(executor, db.users.insert_one, user_doc)
    token = create_access_token({"sub": user_doc["_id"], "role": user_doc["role"]})
    return TokenResponse(access_token=token, user=user_to_response(user_doc))

@app.post("/api/auth/login", response_model=TokenResponse)
@limiter.limit("5/minute")
async def login(request: Request, form: UserLogin, db=Depends(get_db)):
    loop = asyncio.get_event_loop()
    user = await loop.run_in_executor(executor, db.users.find_one, {"email": sanitize_str(form.email).strip().lower()})
    if not user or not verify_password(form.password, user["hashed_password"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": user["_id"], "role": user["role"]})
    return TokenResponse(access_token=token, user=user_to_response(user))

@app.get("/api/auth/me", response_model=UserResponse)
async def get_me(user=Depends(get_current_user)):
    return user_to_response(user)

@app.post("/api/auth/logout")
async def logout(token: Optional[str] = Depends(oauth2_scheme)):
    if token:
        _token_blacklist.add(token)
        if len(_token_blacklist) > TOKEN_BLACKLIST_PRUNE_AT:
            prune_token_blacklist()
    return {"detail": "Logged out successfully"}

# ---------------------------------------------------------------------------
# ADMIN ENDPOINTS
# ---------------------------------------------------------------------------
@app.get("/api/admin/grievances", response_model=List[GrievanceResponse])
async def admin_list_grievances(
    department: Optional[str] = None, status: Optional[str] = None,
    month: Optional[str] = None, year: Optional[str] = None,
    user=Depends(require_role(UserRole.ADMIN.value)), db=Depends(get_db)):
    try:
        query = build_grievance_query(department, status, month, year)
    except InvalidFilter as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(executor, list_grievances, db, query)
    except Exception as e:
        logger.error("Error listing grievances: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

@app.put("/api/admin/grievances/{grievance_id}/assign", response_model=GrievanceResponse)
async def admin_assign_grievance(grievance_id: str, assignment: GrievanceAssignment,
                                 user=Depends(require_role(UserRole.ADMIN.value)),
                                 db=Depends(get_db)):
    grievance_id = sanitize_str(grievance_id)
    loop = asyncio.get_event_loop()
    try:
        result = await loop.run_in_executor(
            executor, assign_grievance, db, grievance_id, assignment.faculty_id, str(user["_id"]))
    except GrievanceNotFound:
        raise HTTPException(status_code=404, detail="Grievance not found")
    except InvalidAssignee:
        raise HTTPException(status_code=400, detail="Invalid faculty member")
    except GrievanceClosed:
        raise HTTPException(status_code=400, detail="Grievance is already resolved")
    except Exception as e:
        logger.error("Error assigning grievance %s: %s", grievance_id, e)
        raise HTTPException(status_code=500, detail="Server error")
    logger.info("Admin %s assigned grievance %s to %s", user["email"], grievance_id, assignment.faculty_id)
    return result

@app.get("/api/admin/faculty", response_model=List[FacultySummary])
async def admin_list_faculty(user=Depends(require_role(UserRole.ADMIN.value)), db=Depends(get_db)):
    try:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(executor, list_faculty, db)
    except Exception as e:
        logger.error("Error listing faculty: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

@app.get("/api/admin/users", response_model=List[UserResponse])
async def admin_list_users(role: Optional[str] = None,
                           user=Depends(require_role(UserRole.ADMIN.value)),
                           db=Depends(get_db)):
    query = {}
    if role and role in [r.value for r in UserRole]:
        query["role"] = role
    loop = asyncio.get_event_loop()
    users = await loop.run_in_executor(executor, lambda: list(db.users.find(query).sort("created_at", -1)))
    return [user_to_response(u) for u in users]

@app.post("/api/admin/users", response_model=UserResponse)
async def admin_create_user(user_data: UserCreate,
                            user=Depends(require_role(UserRole.ADMIN.value)),
                            db=Depends(get_db)):
    loop = asyncio.get_event_loop()
    existing = await loop.run_in_executor(executor, db.users.find_one, {"email": user_data.email.strip().lower()})
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user_doc = new_user_doc(user_data)
    await loop.run_in_executor(executor, db.users.insert_one, user_doc)
    logger.info("Admin %s created user %s (%s)", user["email"], user_doc["email"], user_data.role.value)
    return user_to_response(user_doc)

# ---------------------------------------------------------------------------
# STUDENT ENDPOINTS
# ---------------------------------------------------------------------------
@app.post("/api/grievances", response_model=GrievanceResponse)
async def create_grievance(data: GrievanceCreate,
                           user=Depends(require_role(UserRole.STUDENT.value)),
                           db=Depends(get_db)):
    department = data.department.value if data.department else user.get("department")
    if not department:
        raise HTTPException(status_code=400, detail="Department is required")
    now = datetime.now(timezone.utc)
    doc = {
        "_id": str(uuid.uuid4()), "title": data.title, "description": data.description,
        "department": department, "status": GrievanceStatus.OPEN.value,
        "student": str(user["_id"]), "assigned_to": None,
        "resolution": None, "resolved_at": None, "assignment_history": [],
        "created_at": now, "updated_at": now,
    }
    loop = asyncio.get_event_loop()
    try:
        await loop.run_in_executor(executor, db.grievances.insert_one, doc)
        return (await loop.run_in_executor(executor, populate_grievances, db, [doc]))[0]
    except Exception as e:
        logger.error("Error creating grievance: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

@app.get("/api/grievances", response_model=List[GrievanceResponse])
async def list_my_grievances(user=Depends(require_role(UserRole.STUDENT.value)), db=Depends(get_db)):
    try:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(executor, list_grievances, db, {"student": str(user["_id"])})
    except Exception as e:
        logger.error("Error listing student grievances: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

@app.get("/api/grievances/{grievance_id}", response_model=GrievanceResponse)
async def get_grievance(grievance_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    grievance_id = sanitize_str(grievance_id)
    loop = asyncio.get_event_loop()
    g = await loop.run_in_executor(executor, db.grievances.find_one, {"_id": grievance_id})
    if not g:
        raise HTTPException(status_code=404, detail="Grievance not found")
    if not can_view_grievance(user, g):
        raise HTTPException(status_code=403, detail="Access denied")
    return (await loop.run_in_executor(executor, populate_grievances, db, [g]))[0]

# ---------------------------------------------------------------------------
# FACULTY ENDPOINTS
# ---------------------------------------------------------------------------
@app.get("/api/faculty/grievances", response_model=List[GrievanceResponse])
async def faculty_list_grievances(status: Optional[GrievanceStatus] = None,
                                  user=Depends(require_role(UserRole.FACULTY.value)),
                                  db=Depends(get_db)):
    fq: Dict[str, Any] = {"assigned_to": str(user["_id"])}
    if status:
        fq["status"] = status.value
    try:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(executor, list_grievances, db, fq)
    except Exception as e:
        logger.error("Error listing faculty grievances: %s", e)
        raise HTTPException(status_code=500, detail="Server error")

@app.put("/api/faculty/grievances/{grievance_id}/resolve", response_model=GrievanceResponse)
async def faculty_resolve_grievance(grievance_id: str, body: GrievanceResolution,
                                    user=Depends(require_role(UserRole.FACULTY.value)),
                                    db=Depends(get_db)):
    grievance_id = sanitize_str(grievance_id)
    loop = asyncio.get_event_loop()
    g = await loop.run_in_executor(executor, db.grievances.find_one, {"_id": grievance_id})
    if not g:
        raise HTTPException(status_code=404, detail="Grievance not found")
    if g.get("assigned_to") != str(user["_id"]):
        raise HTTPException(status_code=403, detail="Grievance is not assigned to you")
    if g.get("status") != GrievanceStatus.ASSIGNED.value:
        raise HTTPException(status_code=400, detail="Only assigned grievances can be resolved")
    now = datetime.now(timezone.utc)
    def update():
        # Guard on status so a concurrent reassignment cannot be resolved by the old assignee
        return db.grievances.find_one_and_update(
            {"_id": grievance_id, "assigned_to": str(user["_id"]),
             "status": GrievanceStatus.ASSIGNED.value},
            {"$set": {"status": GrievanceStatus.RESOLVED.value, "resolution": body.resolution,
                      "resolved_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER)
    updated = await loop.run_in_executor(executor, update)
    if updated is None:
        raise HTTPException(status_code=409, detail="Grievance changed while resolving; reload and retry")
    logger.info("Faculty %s resolved grievance %s", user["email"], grievance_id)
    return (await loop.run_in_executor(executor, populate_grievances, db, [updated]))[0]

# ---------------------------------------------------------------------------
# HEALTH
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "healthy", "system": "Campus Grievance Desk",
            "timestamp": datetime.now(timezone.utc)}

# ---------------------------------------------------------------------------
# PAGE ROUTES (serve Jinja2 templates)
# ---------------------------------------------------------------------------
@app.get("/admin", response_class=HTMLResponse, include_in_schema=False)
async def admin_page(request: Request):
    return templates.TemplateResponse(request, "admin.html", {"options": filter_options()})

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
