"""Startup data: a guaranteed admin account plus optional demo records."""

import json
import logging
from datetime import datetime, timezone

from decaping.core.config import Settings
from decaping.core.security import hash_password
from decaping.database.engine import Database
from decaping.models.enums import UserRole
from decaping.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

DEMO_SUPERVISOR = {
    "username": "supervisor",
    "password": "admin123",
    "name": "Ahmed Bouhmidi",
    "role": UserRole.SUPERVISOR.value,
}

DEMO_MACHINES = [
    {
        "name": "Bulldozer D11-1",
        "type": "d11",
        "decaping_method": "poussage",
        "specifications": {"power": "850 HP", "weight": "104.5 tonnes", "blade": "4.6 m³"},
        "current_state": "running",
    },
    {
        "name": "Excavatrice PH1",
        "type": "ph1",
        "decaping_method": "casement",
        "specifications": {"capacity": "15 m³", "weight": "120 tonnes", "reach": "18 m"},
        "current_state": "running",
    },
    {
        "name": "Transwine 777F",
        "type": "transwine",
        "decaping_method": "transport",
        "specifications": {"capacity": "90 tonnes", "power": "1,000 HP", "maxSpeed": "68 km/h"},
        "current_state": "stopped",
    },
]

DEMO_DOCUMENTS = [
    {
        "title": "Manuel des Procédures",
        "description": "Protocoles standards pour opérations de décapage",
        "file_type": "pdf",
        "file_size": 5.2,
        "last_updated": datetime(2025, 1, 12, tzinfo=timezone.utc),
        "download_url": "/documents/manuel-procedures.pdf",
        "category": "procedures",
    },
    {
        "title": "Guide HSE",
        "description": "Normes de sécurité et environnement",
        "file_type": "pdf",
        "file_size": 3.8,
        "last_updated": datetime(2025, 2, 5, tzinfo=timezone.utc),
        "download_url": "/documents/guide-hse.pdf",
        "category": "safety",
    },
    {
        "title": "Catalogue Machines",
        "description": "Fiches techniques et maintenance",
        "file_type": "pdf",
        "file_size": 7.1,
        "last_updated": datetime(2025, 1, 20, tzinfo=timezone.utc),
        "download_url": "/documents/catalogue-machines.pdf",
        "category": "equipment",
    },
]


def ensure_admin(store: EntityStore, settings: Settings) -> None:
    if store.users.count_admins() > 0:
        return
    username = settings.BOOTSTRAP_ADMIN_USERNAME
    existing = store.users.get_by_username(username)
    if existing is not None:
        # Name taken by a non-admin; promote rather than duplicate.
        store.users.update(existing.id, {"role": UserRole.ADMIN.value})
        logger.warning("Promoted existing user %s to admin", username)
        return
    store.users.create(
        {
            "username": username,
            "password": hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD, settings.BCRYPT_ROUNDS),
            "name": settings.BOOTSTRAP_ADMIN_NAME,
            "role": UserRole.ADMIN.value,
        }
    )
    logger.info("Created bootstrap admin %s", username)


def seed_demo_data(store: EntityStore, settings: Settings) -> None:
    if store.users.get_by_username(DEMO_SUPERVISOR["username"]) is None:
        password = hash_password(DEMO_SUPERVISOR["password"], settings.BCRYPT_ROUNDS)
        store.users.create({**DEMO_SUPERVISOR, "password": password})

    if store.machines.count() == 0:
        for machine in DEMO_MACHINES:
            store.machines.create(
                {**machine, "specifications": json.dumps(machine["specifications"]), "is_active": True}
            )

    if store.documents.count() == 0:
        for document in DEMO_DOCUMENTS:
            store.documents.create(document)

    logger.info("Demo data seeded")


def bootstrap(database: Database, settings: Settings) -> None:
    """Create tables, guarantee an admin, and seed demo data when enabled."""
    database.create_all()
    with database.session() as db:
        store = EntityStore(db, site_timezone=settings.SITE_TIMEZONE)
        ensure_admin(store, settings)
        if settings.SEED_DEMO_DATA:
            seed_demo_data(store, settings)
        store.commit()
