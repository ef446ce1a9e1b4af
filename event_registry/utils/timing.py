"""Async timing helpers."""

import asyncio


async def pause(ms: float) -> None:
    """Suspend the current task for ms milliseconds."""
    await asyncio.sleep(ms / 1000)
