"""Seed the database with the studio's service catalogue and test users.

Run with: python -m scripts.seed
Creates the tables, the six bookable packages, an admin and a sample customer.
"""

import asyncio

from sqlalchemy import select

from reelbook.core.auth import hash_password
from reelbook.core.database import async_session_factory, engine
from reelbook.models import Base, Review, Service, User, UserRole

# Prices in rupees
SERVICES = [
    {
        "name": "wedding-basic",
        "display_name": "Wedding Basic",
        "description": "Essential wedding coverage with professional editing",
        "price": 25000,
        "duration_hours": 6,
        "features": ["Professional Photography", "HD Video Recording", "100 Edited Photos", "Basic Editing", "Online Gallery"],
    },
    {
        "name": "wedding-premium",
        "display_name": "Wedding Premium",
        "description": "Complete wedding package with drone shots",
        "price": 45000,
        "duration_hours": 8,
        "features": [
            "Professional Photography",
            "Full HD Video",
            "200 Edited Photos",
            "Drone Coverage",
            "Advanced Editing",
            "Premium Album",
        ],
    },
    {
        "name": "wedding-luxury",
        "display_name": "Wedding Luxury",
        "description": "Premium wedding cinematography with multiple cameras",
        "price": 75000,
        "duration_hours": 10,
        "features": [
            "Cinematic Photography",
            "4K Video Recording",
            "300+ Photos",
            "Multi-camera Setup",
            "Drone Coverage",
            "Same Day Editing",
            "Luxury Album",
        ],
    },
    {
        "name": "pre-wedding",
        "display_name": "Pre Wedding Shoot",
        "description": "Romantic pre-wedding photography & videography",
        "price": 20000,
        "duration_hours": 4,
        "features": ["Couple Photography", "HD Video", "150 Edited Photos", "Location Shoot", "Creative Editing"],
    },
    {
        "name": "engagement",
        "display_name": "Engagement Ceremony",
        "description": "Beautiful engagement ceremony coverage",
        "price": 30000,
        "duration_hours": 5,
        "features": ["Event Photography", "HD Video Recording", "200 Photos", "Family Portraits", "Highlight Reel"],
    },
    {
        "name": "birthday-party",
        "display_name": "Birthday Party",
        "description": "Fun and memorable birthday celebrations",
        "price": 15000,
        "duration_hours": 3,
        "features": ["Party Photography", "Video Recording", "100 Photos", "Fun Moments", "Quick Editing"],
    },
]

REVIEWS = [
    {
        "customer_name": "Priya Sharma",
        "rating": 5,
        "review_text": "The wedding photography was absolutely stunning. Highly recommended!",
        "is_featured": True,
    },
    {
        "customer_name": "Rahul Verma",
        "rating": 5,
        "review_text": "Captured every moment of our engagement beautifully.",
    },
]


async def seed():
    # Create tables (in dev; production schemas are managed separately)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        result = await db.execute(select(Service).where(Service.name == "wedding-basic"))
        if result.scalar_one_or_none():
            print("Database already seeded, skipping.")
            return

        db.add_all(Service(**data) for data in SERVICES)
        db.add_all(Review(is_approved=True, **data) for data in REVIEWS)

        db.add(
            User(
                name="Studio Admin",
                email="admin@reelbook.studio",
                hashed_password=hash_password("admin123"),
                role=UserRole.ADMIN,
            )
        )
        db.add(
            User(
                name="Sample Customer",
                email="customer@reelbook.studio",
                phone="+91 9876543210",
                hashed_password=hash_password("customer123"),
            )
        )

        await db.commit()

    print(f"Seeded {len(SERVICES)} services and {len(REVIEWS)} reviews")
    print("  2 test users:")
    print("    admin@reelbook.studio / admin123")
    print("    customer@reelbook.studio / customer123")


if __name__ == "__main__":
    asyncio.run(seed())
