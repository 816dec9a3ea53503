# Seed data: Grievances (entries spread over the last six months)
#
# Coverage matrix:
#   Statuses   : open (5), assigned (5), resolved (4)
#   Departments: all 6 represented
#   Special    : one reassignment with history, same-month entries in
#                different departments for the month/year filter

from datetime import timedelta

from .config import new_id, now_utc, months_back, resolution_delay

# ---------------------------------------------------------------------------
# Grievance records
# ---------------------------------------------------------------------------
GRIEVANCES = [
    # ======================================================================
    # RESOLVED (4)
    # ======================================================================
    {"title": "Lab machines missing compiler toolchain",
     "description": "Half of the machines in the second-floor programming lab do not have gcc or make installed, so we cannot finish the systems assignments during lab hours.",
     "department": "Computer Science", "status": "resolved", "student_key": "student1",
     "faculty_key": "faculty_cs", "months_ago": 5, "day": 4,
     "resolution": "Toolchain reinstalled on all 40 lab machines from the updated image. Lab assistants now verify the image every semester."},

    {"title": "Internal marks not uploaded for Signals course",
     "description": "The internal assessment marks for Signals and Systems have not been uploaded to the portal even though the semester ended three weeks ago.",
     "department": "Electrical", "status": "resolved", "student_key": "student2",
     "faculty_key": "faculty_ee", "months_ago": 4, "day": 12,
     "resolution": "Marks uploaded after the moderation committee signed off. Students were notified by email."},

    {"title": "Workshop safety goggles in short supply",
     "description": "During the fitting workshop only ten pairs of goggles were available for a batch of thirty students. Several students worked without eye protection.",
     "department": "Mechanical", "status": "resolved", "student_key": "student3",
     "faculty_key": "faculty_me", "months_ago": 3, "day": 8,
     "resolution": "Forty new pairs purchased. Workshop supervisors check the count before each session."},

    {"title": "Tutorial sheet answers contain errors",
     "description": "The posted solutions for Real Analysis tutorial sheet 4 have mistakes in questions 3 and 7, which caused confusion before the quiz.",
     "department": "Mathematics", "status": "resolved", "student_key": "student4",
     "faculty_key": "faculty_ma", "months_ago": 2, "day": 15,
     "resolution": "Corrected solutions posted and the quiz question based on problem 7 was re-graded for everyone."},

    # ======================================================================
    # ASSIGNED (5)
    # ======================================================================
    {"title": "Project allocation not published",
     "description": "Final year project guides were supposed to be allotted last month, but the list has still not been published and we cannot start our literature survey.",
     "department": "Computer Science", "status": "assigned", "student_key": "student1",
     "faculty_key": "faculty_cs", "months_ago": 1, "day": 6},

    {"title": "Power outages in the high-voltage lab",
     "description": "The high-voltage lab has tripped three times during experiments this month. We lose our readings every time and have to repeat the session.",
     "department": "Electrical", "status": "assigned", "student_key": "student2",
     "faculty_key": "faculty_ee", "months_ago": 1, "day": 9},

    {"title": "Surveying instruments not calibrated",
     "description": "The total stations issued for the surveying camp give readings that are off by several centimetres. Our traverse never closes.",
     "department": "Civil", "status": "assigned", "student_key": "student3",
     "faculty_key": "faculty_ce", "reassigned_from": "faculty_me", "months_ago": 1, "day": 20},

    {"title": "Optics lab experiment manual outdated",
     "description": "The lab manual still describes the old spectrometer model, so the procedure does not match the equipment on the bench.",
     "department": "Physics", "status": "assigned", "student_key": "student4",
     "faculty_key": "faculty_ph", "months_ago": 0, "day": 2},

    {"title": "Hostel Wi-Fi blocks the course repository",
     "description": "The campus firewall blocks the git hosting site used by the Compilers course, so we cannot clone the starter code from the hostel.",
     "department": "Computer Science", "status": "assigned", "student_key": "student1",
     "faculty_key": "faculty_cs", "months_ago": 0, "day": 3},

    # ======================================================================
    # OPEN (5)
    # ======================================================================
    {"title": "Elective registration closed early",
     "description": "The elective registration window closed two days before the announced date and many of us could not register for Numerical Methods.",
     "department": "Mathematics", "status": "open", "student_key": "student4",
     "months_ago": 1, "day": 22},

    {"title": "Thermodynamics lecture slides unavailable",
     "description": "The slides for the last four Thermodynamics lectures have not been shared on the course page.",
     "department": "Mechanical", "status": "open", "student_key": "student3",
     "months_ago": 0, "day": 1},

    {"title": "Concrete lab curing tank leaking",
     "description": "The curing tank in the concrete lab leaks overnight and our cube specimens dried out before the 28-day test.",
     "department": "Civil", "status": "open", "student_key": "student3",
     "months_ago": 0, "day": 4},

    {"title": "Physics practical slot clashes with lecture",
     "description": "The new timetable places the Modern Physics practical at the same time as the Electrical Machines lecture for second-year students.",
     "department": "Physics", "status": "open", "student_key": "student2",
     "months_ago": 0, "day": 5},

    {"title": "Scholarship verification pending",
     "description": "My merit scholarship documents were submitted in the first week but the department has not verified them yet, and the deadline is near.",
     "department": "Electrical", "status": "open", "student_key": "student2",
     "months_ago": 0, "day": 6},
]


# ---------------------------------------------------------------------------
# Import function
# ---------------------------------------------------------------------------
async def import_grievances(db, user_ids: dict[str, str]) -> list[dict]:
    """Insert all seed grievances. Returns list of inserted docs."""
    print("\n  Importing grievances...")
    now = now_utc()
    admin_id = user_ids.get("admin")
    inserted: list[dict] = []

    for i, g in enumerate(GRIEVANCES):
        status = g["status"]
        created = min(months_back(now, g["months_ago"], g["day"]), now - timedelta(hours=len(GRIEVANCES) - i))
        updated = created
        faculty_id = user_ids.get(g["faculty_key"]) if g.get("faculty_key") else None

        history = []
        if faculty_id:
            assigned_at = min(created + timedelta(hours=6), now)
            if g.get("reassigned_from"):
                first_id = user_ids.get(g["reassigned_from"])
                history.append({"faculty_id": first_id, "previous_faculty_id": None,
                                "assigned_by": admin_id, "assigned_at": assigned_at})
                assigned_at = min(assigned_at + timedelta(days=1), now)
                history.append({"faculty_id": faculty_id, "previous_faculty_id": first_id,
                                "assigned_by": admin_id, "assigned_at": assigned_at})
            else:
                history.append({"faculty_id": faculty_id, "previous_faculty_id": None,
                                "assigned_by": admin_id, "assigned_at": assigned_at})
            updated = assigned_at

        resolved_at = None
        if status == "resolved":
            resolved_at = min(updated + resolution_delay(g["department"]), now)
            updated = resolved_at

        doc = {
            "_id": new_id(),
            "title": g["title"],
            "description": g["description"],
            "department": g["department"],
            "status": status,
            "student": user_ids.get(g["student_key"]),
            "assigned_to": faculty_id,
            "resolution": g.get("resolution"),
            "resolved_at": resolved_at,
            "assignment_history": history,
            "created_at": created,
            "updated_at": updated,
        }
        db.grievances.insert_one(doc)
        inserted.append(doc)

        tag = {"resolved": "OK", "assigned": "ASN", "open": "NEW"}.get(status, "")
        print(f"    [{i+1:2d}/{len(GRIEVANCES)}] {tag:3s}  {created:%Y-%m-%d}  {g['title'][:52]}")

    # Indexes
    db.grievances.create_index("created_at")
    db.grievances.create_index("status")
    db.grievances.create_index("department")
    db.grievances.create_index("student")
    db.grievances.create_index("assigned_to")

    print(f"  => {len(GRIEVANCES)} grievances imported")
    return inserted
