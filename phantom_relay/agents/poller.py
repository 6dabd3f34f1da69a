"""
Run Poller.

Asks PhantomBuster for the status of launched jobs and records terminal
states on their runs. Polling a batch is bounded by a wall-clock budget, so a
caller may have to read a batch more than once before every run is done.
"""

import asyncio
import logging

from phantom_relay.errors import WaitTimeoutError
from phantom_relay.store.batches import ABORTED, ERROR, FINISHED, Batch, Run
from phantom_relay.tools.phantombuster import PhantomBusterClient

logger = logging.getLogger(__name__)


async def poll_run(client: PhantomBusterClient, run: Run, batch_id: str = "-") -> Run:
    """Check one run once. Terminal runs are left untouched."""
    if run.is_terminal:
        return run

    if run.container_id is None:
        run.fail(ERROR, "Run has no PhantomBuster container id")
        return run

    report = await client.fetch_status(run.container_id)

    if report.status == FINISHED:
        run.finish(report.result)
        logger.info(f"[{batch_id}] Run '{run.title}' finished (container {run.container_id})")
    elif report.status in (ABORTED, ERROR):
        run.fail(report.status, report.error)
        logger.warning(f"[{batch_id}] Run '{run.title}' {report.status}: {report.error}")

    return run


async def poll_batch(
    client: PhantomBusterClient,
    batch: Batch,
    max_wait: float,
    interval: float,
) -> bool:
    """
    Poll every running run of a batch until all are terminal or time runs out.

    Each round checks all running runs concurrently and waits for all of them
    before deciding whether to sleep and go again. At least one round is made.

    Args:
        client: PhantomBuster client
        batch: Batch to poll
        max_wait: Wall-clock budget in seconds
        interval: Sleep between rounds in seconds

    Returns:
        True if every run is terminal
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    rounds = 0

    while True:
        pending = batch.running()
        if not pending:
            break

        rounds += 1
        async with asyncio.TaskGroup() as tg:
            for run in pending:
                tg.create_task(poll_run(client, run, batch.batch_id))

        if not batch.running():
            break

        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    still_running = len(batch.running())
    logger.info(f"[{batch.batch_id}] Polled {rounds} rounds, {still_running} runs still running")
    return batch.all_finished


async def wait_for_batch(
    client: PhantomBusterClient,
    batch: Batch,
    max_wait: float,
    interval: float,
) -> None:
    """Poll until every run is terminal. Raises WaitTimeoutError when the budget runs out."""
    if not await poll_batch(client, batch, max_wait, interval):
        raise WaitTimeoutError(
            f"PhantomBuster jobs did not finish within {max_wait:g}s. "
            f"Fetch GET /results/{batch.batch_id} to keep polling."
        )
