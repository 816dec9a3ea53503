# Seed data: Users (students, one faculty member per department, admin)

from .config import new_id, now_utc, pwd_context

# ---------------------------------------------------------------------------
# Raw user definitions
# ---------------------------------------------------------------------------
USERS = [
    # ---- Students (4) ----
    {"key": "student1", "name": "Aarav Mehta", "email": "aarav.mehta@students.campus.edu",
     "password": "student123", "role": "student", "department": "Computer Science",
     "registration_number": "CS21B014", "program": "B.Tech"},

    {"key": "student2", "name": "Diya Nair", "email": "diya.nair@students.campus.edu",
     "password": "student123", "role": "student", "department": "Electrical",
     "registration_number": "EE22B031", "program": "B.Tech"},

    {"key": "student3", "name": "Kabir Singh", "email": "kabir.singh@students.campus.edu",
     "password": "student123", "role": "student", "department": "Mechanical",
     "registration_number": "ME20B007", "program": "B.Tech"},

    {"key": "student4", "name": "Meera Iyer", "email": "meera.iyer@students.campus.edu",
     "password": "student123", "role": "student", "department": "Mathematics",
     "registration_number": "MA23M002", "program": "M.Sc"},

    # ---- Faculty (6), one per department ----
    {"key": "faculty_cs", "name": "Dr. Ananya Rao", "email": "ananya.rao@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Computer Science"},

    {"key": "faculty_ee", "name": "Dr. Vikram Joshi", "email": "vikram.joshi@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Electrical"},

    {"key": "faculty_me", "name": "Dr. Farhan Qureshi", "email": "farhan.qureshi@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Mechanical"},

    {"key": "faculty_ce", "name": "Dr. Lakshmi Menon", "email": "lakshmi.menon@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Civil"},

    {"key": "faculty_ma", "name": "Dr. Rohan Das", "email": "rohan.das@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Mathematics"},

    {"key": "faculty_ph", "name": "Dr. Sneha Kulkarni", "email": "sneha.kulkarni@campus.edu",
     "password": "faculty123", "role": "faculty", "department": "Physics"},

    # ---- Admin (1) ----
    {"key": "admin", "name": "Grievance Cell Administrator", "email": "admin@campus.edu",
     "password": "admin123", "role": "admin", "department": None},
]

# ---------------------------------------------------------------------------
# Import function
# ---------------------------------------------------------------------------
async def import_users(db) -> dict[str, str]:
    """Insert seed users into MongoDB. Returns {key: _id} mapping."""
    print("\n  Importing seed users...")
    user_ids: dict[str, str] = {}
    for u in USERS:
        uid = new_id()
        is_student = u["role"] == "student"
        db.users.insert_one({
            "_id": uid,
            "name": u["name"],
            "email": u["email"],
            "hashed_password": pwd_context.hash(u["password"]),
            "role": u["role"],
            "department": u["department"],
            "registration_number": u.get("registration_number") if is_student else None,
            "program": u.get("program") if is_student else None,
            "created_at": now_utc(),
        })
        user_ids[u["key"]] = uid
        print(f"    {u['email']:36s}  ({u['role']})")
    db.users.create_index([("email", 1)], unique=True)
    db.users.create_index("role")
    print(f"  => {len(USERS)} users created")
    return user_ids
