"""Search endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from phantom_relay.agents.launcher import LaunchPolicy, launch_batch
from phantom_relay.agents.poller import poll_batch, wait_for_batch
from phantom_relay.api.limiter import limiter
from phantom_relay.api.schemas import (
    BatchResultsResponse,
    BatchStartedResponse,
    ErrorResponse,
    RunResponse,
    SearchRequest,
    TitleResultsResponse,
)
from phantom_relay.config import DEFAULT_TITLES, settings
from phantom_relay.errors import ValidationError
from phantom_relay.store.batches import Batch, BatchStore, Run, get_store
from phantom_relay.tools.phantombuster import PhantomBusterClient, get_client
from phantom_relay.utils.results import merge_runs

logger = logging.getLogger(__name__)

router = APIRouter()


def validate_search(data: SearchRequest | None) -> tuple[str, list[str]]:
    """Trim and check the request. Empty/missing titles fall back to the defaults."""
    company = (data.company or "").strip() if data else ""
    if not company:
        raise ValidationError("Company name is required.")

    raw_titles = data.titles or []
    if not raw_titles:
        return company, list(DEFAULT_TITLES)

    titles: list[str] = []
    for raw in raw_titles:
        title = (raw or "").strip()
        if not title:
            raise ValidationError("Job titles must not be blank.")
        if title not in titles:
            titles.append(title)
    return company, titles


def _run_response(run: Run) -> RunResponse:
    return RunResponse(container_id=run.container_id, status=run.status, url=run.url, error=run.error)


def build_started(batch: Batch) -> BatchStartedResponse:
    return BatchStartedResponse(
        batch_id=batch.batch_id,
        company=batch.company,
        titles=batch.titles,
        runs={title: _run_response(batch.runs[title]) for title in batch.titles if title in batch.runs},
    )


def build_results(batch: Batch, max_results: int) -> BatchResultsResponse:
    """Merge the batch's current run results into a response."""
    runs = [batch.runs[title] for title in batch.titles if title in batch.runs]
    merged, per_title = merge_runs(runs, max_results)

    return BatchResultsResponse(
        batch_id=batch.batch_id,
        company=batch.company,
        titles=batch.titles,
        all_finished=batch.all_finished,
        merged_count=len(merged),
        merged=merged,
        per_title={
            run.title: TitleResultsResponse(
                container_id=run.container_id,
                status=run.status,
                url=run.url,
                error=run.error,
                count=len(per_title[run.title]),
                results=per_title[run.title],
            )
            for run in runs
        },
    )


@router.post(
    "/search-profiles",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(settings.search_rate_limit)
async def search_profiles(
    request: Request,
    data: SearchRequest | None = None,
    wait: bool = False,
    client: PhantomBusterClient = Depends(get_client),
    store: BatchStore = Depends(get_store),
):
    """
    Launch one LinkedIn people search per title at a company.

    Returns the batch and its launched runs immediately; poll
    GET /results/{batch_id} for profiles. With ?wait=true, blocks until every
    job is done (within MAX_WAIT_SECONDS) and returns the merged results.
    """
    company, titles = validate_search(data)

    batch = store.create_batch(company, titles)
    await launch_batch(client, batch, LaunchPolicy.from_settings())

    if wait:
        await wait_for_batch(client, batch, settings.max_wait_seconds, settings.poll_interval_seconds)
        return build_results(batch, settings.max_results).model_dump(by_alias=True)

    return build_started(batch).model_dump(by_alias=True)


@router.get(
    "/results/{batch_id}",
    response_model=BatchResultsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_results(
    batch_id: str,
    client: PhantomBusterClient = Depends(get_client),
    store: BatchStore = Depends(get_store),
):
    """Poll a batch's running jobs (bounded by MAX_WAIT_SECONDS) and return merged results."""
    batch = store.get_batch(batch_id)

    if batch.running():
        await poll_batch(client, batch, settings.max_wait_seconds, settings.poll_interval_seconds)

    response = build_results(batch, settings.max_results)
    logger.info(
        f"[{batch_id}] Returning {response.merged_count} merged profiles "
        f"(all finished: {response.all_finished})"
    )
    return response
