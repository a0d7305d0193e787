"""
Default Portfolios

The airline's standard business portfolios, seeded once per database.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Portfolio

logger = logging.getLogger("intellibid.services.seed")


DEFAULT_PORTFOLIOS = [
    {"name": "Group Services", "description": "Corporate services and group-wide initiatives"},
    {"name": "Operations, Safety & Security", "description": "Operational excellence and safety management"},
    {"name": "Customer Brand and Experience", "description": "Customer experience and brand management"},
    {"name": "Commercial", "description": "Commercial operations and business development"},
    {"name": "Web and Mobile", "description": "Digital platforms and mobile applications"},
    {"name": "Enterprise Technology", "description": "Enterprise technology solutions and infrastructure"},
    {"name": "Dnata & Dnata International", "description": "Aviation and travel services"},
    {"name": "Dnata Travel", "description": "Travel and tourism services"},
    {"name": "CyberSecurity", "description": "Information security and cyber defense"},
    {"name": "Data(EDH)", "description": "Enterprise data and analytics"},
]


async def seed_portfolios(db: AsyncSession) -> list[Portfolio]:
    """
    Create any default portfolio that does not exist yet.

    Returns:
        The portfolios created by this call
    """
    result = await db.execute(select(Portfolio.name))
    existing = set(result.scalars().all())

    created = [
        Portfolio(name=data["name"], description=data["description"])
        for data in DEFAULT_PORTFOLIOS
        if data["name"] not in existing
    ]
    if created:
        db.add_all(created)
        await db.commit()
        logger.info(f"Seeded {len(created)} portfolios")

    return created
