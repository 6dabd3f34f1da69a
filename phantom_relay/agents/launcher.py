"""
Job Launcher.

Launches one PhantomBuster job per title. Launches are staggered (or run in
parallel), and each failed launch is retried with exponential backoff plus
jitter. A title that exhausts its retries is recorded as an error run; the
rest of the batch carries on.
"""

import asyncio
import logging
import random

from pydantic import BaseModel

from phantom_relay.config import settings
from phantom_relay.errors import LaunchError
from phantom_relay.store.batches import ERROR, Batch, Run
from phantom_relay.tools.phantombuster import PhantomBusterClient
from phantom_relay.tools.search_url import build_search_url

logger = logging.getLogger(__name__)

STAGGERED = "staggered"
PARALLEL = "parallel"


class LaunchPolicy(BaseModel):
    """Launch pacing and retry schedule. Delays in seconds."""

    mode: str = STAGGERED
    base_delay: float = 1.5
    attempts: int = 3
    backoff_factor: float = 2.0
    jitter: float = 0.75
    max_backoff: float = 30.0

    @classmethod
    def from_settings(cls) -> "LaunchPolicy":
        return cls(
            mode=settings.launch_mode,
            base_delay=settings.launch_base_delay_seconds,
            attempts=settings.launch_attempts,
            backoff_factor=settings.launch_backoff_factor,
            jitter=settings.launch_jitter_seconds,
            max_backoff=settings.launch_max_backoff_seconds,
        )


def backoff_delay(policy: LaunchPolicy, attempt: int, error: LaunchError) -> float:
    """
    Delay before retrying after the given failed attempt (1-based).

    Throttling/server-side failures back off one doubling further than
    ordinary client errors.
    """
    exponent = attempt + 1 if error.is_throttling else attempt
    delay = min(policy.base_delay * policy.backoff_factor**exponent, policy.max_backoff)
    return delay + random.uniform(0, policy.jitter)


def stagger_delay(policy: LaunchPolicy) -> float:
    """Pause between two consecutive launches in staggered mode."""
    return policy.base_delay + random.uniform(0, policy.jitter)


async def launch_run(
    client: PhantomBusterClient,
    batch: Batch,
    title: str,
    policy: LaunchPolicy,
) -> Run:
    """Launch the job for one title and record its run on the batch."""
    run = Run(title=title, url=build_search_url(title, batch.company))
    attempts = max(policy.attempts, 1)
    last_error: LaunchError | None = None

    for attempt in range(1, attempts + 1):
        try:
            container_id = await client.launch(run.url)
        except LaunchError as e:
            last_error = e
            logger.warning(f"[{batch.batch_id}] Launch '{title}' attempt {attempt}/{attempts} failed: {e.message}")
            if attempt < attempts:
                await asyncio.sleep(backoff_delay(policy, attempt, e))
            continue

        run.assign_container(container_id)
        logger.info(f"[{batch.batch_id}] Launched '{title}' as container {container_id}")
        break
    else:
        run.fail(ERROR, last_error.message if last_error else "Launch failed")
        logger.error(f"[{batch.batch_id}] Giving up on '{title}' after {attempts} attempts")

    batch.runs[title] = run
    return run


async def launch_batch(client: PhantomBusterClient, batch: Batch, policy: LaunchPolicy) -> Batch:
    """Launch every title of a batch, staggered or in parallel per the policy."""
    logger.info(f"[{batch.batch_id}] Launching {len(batch.titles)} jobs ({policy.mode})")

    if policy.mode == PARALLEL:
        async with asyncio.TaskGroup() as tg:
            for title in batch.titles:
                tg.create_task(launch_run(client, batch, title, policy))
        return batch

    for index, title in enumerate(batch.titles):
        if index > 0:
            await asyncio.sleep(stagger_delay(policy))
        await launch_run(client, batch, title, policy)
    return batch
