# scripts/seed_categories.py
"""Insert the default category sets into an empty datastore.

Tables that already hold rows are left alone, so running this twice is safe.
"""
from scripts import ScriptUtils


def seed(session):
    from portal.models import BulletinCategory, BusinessCategory, CleanlinessReportType, ForumCategory
    from portal.services.fallback_data import (
        BULLETIN_CATEGORIES,
        BUSINESS_CATEGORIES,
        FORUM_CATEGORIES,
        REPORT_TYPES,
    )

    inserted = {}
    for model, rows in (
        (ForumCategory, FORUM_CATEGORIES),
        (BulletinCategory, BULLETIN_CATEGORIES),
        (BusinessCategory, BUSINESS_CATEGORIES),
        (CleanlinessReportType, REPORT_TYPES),
    ):
        if session.query(model).count():
            inserted[model.__tablename__] = 0
            continue
        for position, row in enumerate(rows, start=1):
            session.add(model(
                name=row['name'],
                display_name=row['display_name'],
                icon=row.get('icon'),
                color=row.get('color'),
                sort_order=row.get('sort_order', position),
            ))
        inserted[model.__tablename__] = len(rows)
    return inserted


def main():
    with ScriptUtils.app_context():
        from portal.services.datastore import datastore

        result = datastore.write(seed)
        if not result.available:
            print("No datastore configured (set DATABASE_URL); nothing seeded.")
            return 1
        for table, count in result.value.items():
            print(f"{table}: {count} row(s) inserted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
