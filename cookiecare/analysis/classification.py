"""
Batched, concurrent classification of reconciled entities.

Entities are split into fixed-size batches; each batch is one LLM
call with its own retry budget, and all batches run concurrently.
The first batch to exhaust its retries fails the whole scan.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from typing import TypeVar

from cookiecare.agents import classification_agent
from cookiecare.config import get_settings
from cookiecare.models import scan
from cookiecare.utils import logger, retry

log = logger.create_logger("Classification")

BATCH_SIZE = 15

T = TypeVar("T")


def partition(items: Sequence[T], size: int = BATCH_SIZE) -> list[list[T]]:
    """Split *items* into consecutive batches of at most *size*."""
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def derive_compliance_status(
    category: scan.CookieCategory,
    states: Iterable[scan.ConsentState],
) -> scan.ComplianceStatus:
    """Compliance verdict for an entity.

    Necessary items are always compliant.  Anything else loaded
    before consent is a pre-consent violation; failing that,
    anything loaded after rejection is a post-rejection violation.
    """
    if category == "Necessary":
        return "Compliant"
    seen = set(states)
    if scan.PRE_CONSENT in seen:
        return "Pre-Consent Violation"
    if scan.POST_REJECTION in seen:
        return "Post-Rejection Violation"
    return "Compliant"


def normalize_category(value: str | None) -> scan.CookieCategory:
    """Map free-form model output onto a known category."""
    cleaned = (value or "").strip().lower()
    for category in scan.COOKIE_CATEGORIES:
        if category.lower() == cleaned:
            return category
    return "Unknown"


def build_batch_item(entity: scan.ReconciledEntity) -> classification_agent.BatchItem:
    """Compact description of *entity* for the classification prompt."""
    states = entity.ordered_states()
    data = entity.data
    if isinstance(data, scan.CookieObservation):
        return {
            "type": "cookie",
            "key": entity.key,
            "name": data.name,
            "provider": data.domain,
            "states": states,
        }
    return {
        "type": "tracker",
        "key": entity.key,
        "provider": data.provider,
        "states": states,
    }


def merge_batch_results(
    batch: Sequence[scan.ReconciledEntity],
    classified: Iterable[classification_agent.ClassifiedItem],
) -> list[scan.ClassificationResult]:
    """Key model output back onto the batch's entities.

    Returns exactly one result per entity, in batch order.  Output
    for keys outside the batch and repeated keys are ignored;
    entities the model skipped degrade to ``Unknown``.
    """
    by_key: dict[str, classification_agent.ClassifiedItem] = {}
    for item in classified:
        by_key.setdefault(item.key, item)

    results: list[scan.ClassificationResult] = []
    for entity in batch:
        item = by_key.get(entity.key)
        if item is None:
            log.warn("Entity missing from classification response", {"key": entity.key})
            results.append(scan.ClassificationResult.unknown(entity.key))
            continue

        category = normalize_category(item.category)
        if entity.kind == "cookie":
            purpose = item.purpose.strip() or scan.UNKNOWN_PURPOSE
        else:
            purpose = ""
        results.append(
            scan.ClassificationResult(
                key=entity.key,
                category=category,
                purpose=purpose,
                compliance_status=derive_compliance_status(category, entity.states),
            )
        )
    return results


async def classify_entities(
    entities: Sequence[scan.ReconciledEntity],
    *,
    agent: classification_agent.CookieClassificationAgent,
    batch_size: int | None = None,
    max_retries: int | None = None,
    base_delay_ms: int | None = None,
) -> list[scan.ClassificationResult]:
    """Classify every entity, one concurrent LLM call per batch.

    Args:
        entities: Reconciled cookies and trackers.
        agent: Classification agent to call.
        batch_size: Entities per call (default from settings).
        max_retries: Extra attempts per batch (default from settings).
        base_delay_ms: Backoff unit in ms (default from settings).

    Returns:
        One result per entity, in batch order.

    Raises:
        Exception: The error of the first batch that exhausted its
            retries; the remaining batches are cancelled.
    """
    if not entities:
        return []

    settings = get_settings()
    batch_size = batch_size or settings.batch_size
    max_retries = settings.batch_max_retries if max_retries is None else max_retries
    base_delay_ms = settings.retry_base_delay_ms if base_delay_ms is None else base_delay_ms

    batches = partition(entities, batch_size)
    log.info(
        f"Splitting analysis into {len(batches)} batch(es) of size ~{batch_size}",
        {"entities": len(entities)},
    )
    log.start_timer("classification")

    async def _run_batch(index: int, batch: list[scan.ReconciledEntity]) -> list[scan.ClassificationResult]:
        items = [build_batch_item(entity) for entity in batch]
        classified = await retry.with_retry(
            lambda: agent.classify_batch(items, batch_number=index + 1, batch_count=len(batches)),
            max_retries=max_retries,
            base_delay_ms=base_delay_ms,
            context=f"batch {index + 1}/{len(batches)}",
        )
        return merge_batch_results(batch, classified)

    tasks = [asyncio.ensure_future(_run_batch(i, batch)) for i, batch in enumerate(batches)]
    try:
        batch_results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    log.end_timer("classification", "All batches analyzed successfully")
    return [result for results in batch_results for result in results]
