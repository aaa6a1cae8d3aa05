"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 12 points of interest around central Rostov-on-Don
  - 6 hotels in the same area
"""

import asyncio

from sqlalchemy import text

from tourgeo.infrastructure.database import async_session_factory, engine
from tourgeo.infrastructure.repositories import HotelRepository, PointOfInterestRepository


POIS = [
    {"name": "Rostov Academic Drama Theatre", "category": "culture", "rating": 4.8, "lat": 47.2357, "lng": 39.7125,
     "address": "Teatralnaya Square, 1", "description": "Constructivist theatre shaped like a tractor."},
    {"name": "Gorky Park", "category": "nature", "rating": 4.6, "lat": 47.2400, "lng": 39.7200,
     "address": "Bolshaya Sadovaya St, 45", "description": "Central city park with fountains."},
    {"name": "Rostov Zoo", "category": "attraction", "rating": 4.5, "lat": 47.2450, "lng": 39.7250,
     "address": "Zoologicheskaya St, 3", "description": "One of the largest zoos in Russia."},
    {"name": "Cathedral of the Nativity", "category": "religious", "rating": 4.9, "lat": 47.2166, "lng": 39.7076,
     "address": "Stanislavskogo St, 58", "description": "Main Orthodox cathedral of the city."},
    {"name": "Don Embankment", "category": "nature", "rating": 4.7, "lat": 47.2178, "lng": 39.7122,
     "address": "Beregovaya St", "description": "Riverside promenade along the Don."},
    {"name": "Regional Museum of Local Lore", "category": "culture", "rating": 4.4, "lat": 47.2225, "lng": 39.7190,
     "address": "Bolshaya Sadovaya St, 79", "description": "History of the Don region."},
    {"name": "Central Market", "category": "shopping", "rating": 4.2, "lat": 47.2190, "lng": 39.7060,
     "address": "Budyonnovsky Ave, 12", "description": "Covered market next to the cathedral."},
    {"name": "Rostov Arena", "category": "sport", "rating": 4.7, "lat": 47.2095, "lng": 39.7378,
     "address": "Levoberezhnaya St, 2", "description": "Football stadium on the left bank."},
    {"name": "Pushkinskaya Boulevard", "category": "attraction", "rating": 4.6, "lat": 47.2260, "lng": 39.7240,
     "address": "Pushkinskaya St", "description": "Tree-lined pedestrian boulevard."},
    {"name": "Musical Theatre", "category": "entertainment", "rating": 4.7, "lat": 47.2248, "lng": 39.7288,
     "address": "Bolshaya Sadovaya St, 134", "description": "Opera and ballet in a piano-shaped building."},
    {"name": "Main Railway Station", "category": "transport", "rating": 4.0, "lat": 47.2168, "lng": 39.6946,
     "address": "Privokzalnaya Square, 1/2", "description": "Long-distance trains."},
    {"name": "Botanical Garden", "category": "nature", "rating": 4.5, "lat": 47.2375, "lng": 39.6530,
     "address": "Botanicheskiy Spusk, 7", "description": "University botanical garden."},
]

HOTELS = [
    {"name": "Don Plaza", "city": "Rostov-on-Don", "stars": 4, "rating": 4.5, "lat": 47.2206, "lng": 39.7150,
     "address": "Bolshaya Sadovaya St, 115"},
    {"name": "Hyatt Regency Rostov", "city": "Rostov-on-Don", "stars": 5, "rating": 4.8, "lat": 47.2298, "lng": 39.7261,
     "address": "Budyonnovsky Ave, 59"},
    {"name": "Radisson Blu Rostov", "city": "Rostov-on-Don", "stars": 5, "rating": 4.7, "lat": 47.2140, "lng": 39.7260,
     "address": "Beregovaya St, 29"},
    {"name": "Hotel Moscow", "city": "Rostov-on-Don", "stars": 3, "rating": 4.1, "lat": 47.2222, "lng": 39.7104,
     "address": "Bolshaya Sadovaya St, 62"},
    {"name": "Park Hostel", "city": "Rostov-on-Don", "stars": 1, "rating": 3.9, "lat": 47.2380, "lng": 39.7180,
     "address": "Mechnikova St, 4"},
    {"name": "Azov Riverside", "city": "Azov", "stars": 3, "rating": 4.3, "lat": 47.1072, "lng": 39.4231,
     "address": "Petrovsky Blvd, 2"},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM pois"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Points of interest ────────────────────────────────────────
        poi_repo = PointOfInterestRepository(session)
        for p in POIS:
            await poi_repo.create_poi(
                name=p["name"],
                latitude=p["lat"],
                longitude=p["lng"],
                category=p["category"],
                rating=p["rating"],
                description=p["description"],
                address=p["address"],
            )
        print(f"  Created {len(POIS)} points of interest")

        # ── Hotels ────────────────────────────────────────────────────
        hotel_repo = HotelRepository(session)
        for h in HOTELS:
            await hotel_repo.create_hotel(
                name=h["name"],
                latitude=h["lat"],
                longitude=h["lng"],
                city=h["city"],
                stars=h["stars"],
                rating=h["rating"],
                address=h["address"],
            )
        print(f"  Created {len(HOTELS)} hotels")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
