import asyncio


async def drain(rounds: int = 10, delay: float = 0.01) -> None:
    """Laisse tourner la boucle : les relectures d'écouteurs passent par un thread de travail."""
    for _ in range(rounds):
        await asyncio.sleep(delay)
