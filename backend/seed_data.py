"""Seed database with demo crew and projects."""
from digital_pm.database import Base, SessionLocal, engine
from digital_pm.models import Project
from digital_pm.use_cases.directory import create_project_use_case, create_worker_use_case


WORKERS = [
    {
        'name': 'Carlos Rodriguez',
        'email': 'carlos@example.com',
        'phone': '(720) 555-0101',
        'skills': ['HVAC', 'General Labor'],
        'pin': '1001',
    },
    {
        'name': 'Juan Martinez',
        'email': 'juan@example.com',
        'phone': '(720) 555-0102',
        'skills': ['Electrical', 'Plumbing'],
        'pin': '1002',
    },
    {
        'name': 'David Chen',
        'email': 'david@example.com',
        'phone': '(720) 555-0103',
        'skills': ['Painting', 'Flooring'],
        'pin': '1003',
    },
]

PROJECTS = [
    {
        'number': '2011',
        'client_name': 'Jack Shippee',
        'client_address': '2690 Stuart St, Denver CO 80212',
        'tasks': [
            {
                'description': 'Full AC service: repair insulation lines, fill refrigerant, level units',
                'quantity': 1,
                'price': 475.0,
                'estimated_hours': 3,
                'materials': [
                    {'name': 'Refrigerant', 'quantity': 1, 'unit': 'can', 'estimated_cost': 60},
                    {'name': 'Insulation tape', 'quantity': 2, 'unit': 'roll', 'estimated_cost': 12},
                ],
            },
            {
                'description': 'Install smoke detectors in every bedroom and floor',
                'quantity': 6,
                'price': 40.0,
                'estimated_hours': 2,
                'type': 'electrical',
            },
            {
                'description': 'Plumbing - replace kitchen sink drain',
                'quantity': 1,
                'price': 320.0,
                'estimated_hours': 4,
            },
        ],
    },
    {
        'number': '2012',
        'client_name': 'Maria Lopez',
        'client_address': '1450 Vine St, Denver CO 80206',
        'tasks': [
            {
                'description': 'Paint living room walls and trim',
                'quantity': 1,
                'price': 850.0,
                'estimated_hours': 6,
            },
            {
                'description': 'Replace bathroom floor tile',
                'quantity': 45,
                'price': 12.5,
                'estimated_hours': 5,
            },
        ],
    },
]


def seed():
    """Seed database with demo data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        if db.query(Project).first():
            print("Database already seeded, skipping")
            return

        for worker_data in WORKERS:
            create_worker_use_case(db=db, **worker_data)
        for project_data in PROJECTS:
            create_project_use_case(db=db, **project_data)

        print("✅ Database seeded successfully!")
        print("\nDemo crew PINs:")
        for worker_data in WORKERS:
            print(f"  {worker_data['pin']} ({worker_data['name']})")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
