"""
Seed department policies with the company defaults for every department that has none.
Existing policies are left unchanged. Run from the project root with .env loaded.

Usage:
  python scripts/seed_policy.py <master_admin_employee_id>
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from attendance_engine.db.session import SessionLocal, init_sqlite_schema
from attendance_engine.services.directory_service import get_active_employee
from attendance_engine.services.policy_service import initialize_default_policies, list_policies


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    editor_id = int(sys.argv[1])

    init_sqlite_schema()
    db = SessionLocal()
    try:
        editor = get_active_employee(db, editor_id)
        if editor is None:
            print(f"Employee {editor_id} not found or inactive")
            sys.exit(1)
        created = initialize_default_policies(db, editor)
        print(f"Created {len(created)} department policies")
        for policy in list_policies(db):
            print(
                f"{policy.department.value}: in={policy.required_check_in_time} out={policy.required_check_out_time} "
                f"off_site={policy.allows_off_site_work} overtime={policy.overtime_allowed} "
                f"CL={policy.max_monthly_casual_leaves} permission_h={policy.max_monthly_permission_hours}"
            )
    finally:
        db.close()


if __name__ == "__main__":
    main()
