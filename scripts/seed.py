from locavoiture.backend.client import BackendClient
from locavoiture.core.config import settings, jwt_settings

from locavoiture.db.seed import seed_all
import asyncio

async def run_seed():
    with BackendClient.from_settings(settings, jwt_settings) as client:
        # admin + employés + véhicules
        await seed_all(client, seed_path=settings.SEED_PATH)

asyncio.run(run_seed())
