"""Gap screening pipeline: load, filter, enrich concurrently, persist."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence
from time import perf_counter

from opg_screener.config import Settings
from opg_screener.data.screener import load_screener_csv
from opg_screener.news.client import NewsLookup, NewsLookupError, SeekingAlphaNewsClient
from opg_screener.risk.sizing import size_position
from opg_screener.sink.store import SelectionStore
from opg_screener.strategy.candidates import filter_candidates
from opg_screener.types import (
    Candidate,
    EnrichmentBatch,
    NewsItem,
    RiskPolicy,
    RunResult,
    Selection,
)
from opg_screener.utils.logging import get_logger, log_trade_plan


async def enrich_candidates(
    candidates: Sequence[Candidate],
    policy: RiskPolicy,
    news: NewsLookup,
    *,
    max_concurrency: int = 0,
    lookup_timeout: float | None = None,
) -> EnrichmentBatch:
    """Size and fetch news for every candidate concurrently.

    One task is dispatched per candidate and the join waits on exactly that
    task set, so every candidate yields exactly one selection. Selections are
    returned in completion order. A failed or timed-out lookup degrades that
    candidate to an empty news list and is recorded in ``failed_symbols``.
    ``max_concurrency`` caps in-flight lookups; 0 means no cap.
    """
    logger = get_logger("opg_screener.pipeline")
    limiter: asyncio.Semaphore | None = (
        asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
    )
    batch = EnrichmentBatch()
    if not candidates:
        return batch

    tasks = [
        asyncio.create_task(
            _enrich_one(candidate, policy, news, limiter, lookup_timeout),
            name=f"enrich-{candidate.symbol}",
        )
        for candidate in candidates
    ]
    dispatched = len(tasks)

    for completed in asyncio.as_completed(tasks):
        selection, error = await completed
        batch.selections.append(selection)
        if error is not None:
            batch.failed_symbols.append(selection.symbol)
            logger.warning(
                "news_lookup_degraded",
                symbol=selection.symbol,
                error=error,
            )
        logger.info(
            "news_found",
            symbol=selection.symbol,
            articles=len(selection.news),
            completed=len(batch.selections),
            dispatched=dispatched,
        )

    if len(batch.selections) != dispatched:
        raise RuntimeError(
            f"enrichment_count_mismatch: {len(batch.selections)} != {dispatched}"
        )
    return batch


async def _enrich_one(
    candidate: Candidate,
    policy: RiskPolicy,
    news: NewsLookup,
    limiter: asyncio.Semaphore | None,
    lookup_timeout: float | None,
) -> tuple[Selection, str | None]:
    plan = size_position(candidate.gap_percent, candidate.opening_price, policy)
    log_trade_plan(
        get_logger("opg_screener.pipeline"),
        symbol=candidate.symbol,
        gap_percent=candidate.gap_percent,
        entry_price=plan.entry_price,
        stop_loss_price=plan.stop_loss_price,
        take_profit_price=plan.take_profit_price,
        shares=plan.shares,
    )

    items: list[NewsItem] = []
    error: str | None = None
    try:
        async with (limiter if limiter is not None else contextlib.nullcontext()):
            items = await asyncio.wait_for(news.fetch(candidate.symbol), timeout=lookup_timeout)
    except asyncio.TimeoutError:
        error = f"lookup_timeout_after_{lookup_timeout}s"
    except NewsLookupError as exc:
        error = str(exc) or type(exc).__name__

    return Selection(symbol=candidate.symbol, plan=plan, news=tuple(items)), error


def run_screen(settings: Settings, *, news: NewsLookup | None = None) -> RunResult:
    """Run one full screen and write the result file.

    Loader and delivery errors propagate to the caller.
    """
    logger = get_logger("opg_screener.pipeline")
    started = perf_counter()
    policy = settings.risk_policy()

    loaded = load_screener_csv(settings.input_path)
    candidates = filter_candidates(loaded.rows)
    logger.info(
        "screener_loaded",
        path=str(settings.input_path),
        rows=len(loaded.rows),
        dropped_rows=loaded.dropped_rows,
        candidates=len(candidates),
    )

    batch = asyncio.run(_enrich_with_client(candidates, policy, settings, news))

    store = SelectionStore(settings.output_path)
    output_path = store.write(batch.selections)

    result = RunResult(
        status="completed",
        loaded=len(loaded.rows),
        dropped_rows=loaded.dropped_rows,
        candidates=len(candidates),
        selections=batch.selections,
        news_failures=batch.failed_symbols,
        output_path=output_path,
        elapsed_ms=(perf_counter() - started) * 1000,
    )
    logger.info(
        "screen_completed",
        candidates=result.candidates,
        selections=len(result.selections),
        news_failures=len(result.news_failures),
        output_path=str(output_path),
        elapsed_ms=round(result.elapsed_ms, 2),
    )
    return result


async def _enrich_with_client(
    candidates: list[Candidate],
    policy: RiskPolicy,
    settings: Settings,
    news: NewsLookup | None,
) -> EnrichmentBatch:
    if news is not None:
        return await enrich_candidates(
            candidates,
            policy,
            news,
            max_concurrency=settings.max_concurrency,
        )
    async with SeekingAlphaNewsClient(settings) as client:
        return await enrich_candidates(
            candidates,
            policy,
            client,
            max_concurrency=settings.max_concurrency,
        )
