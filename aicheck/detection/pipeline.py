"""
Pipeline orchestrator: public entry point for the /classify and /verify routes.

`PipelineOrchestrator.run` (classification):
  1. Validate the request (the only hard-fail path)
  2. Fingerprint cache lookup
  3. Stages: reasoning -> pattern_classification -> web_verification for text,
     reasoning with the media attached for binary uploads. Plain-text and
     markdown documents are decoded during validation and run as text.
  4. Evidence fusion, cache write, monitoring record

`PipelineOrchestrator.verify` (content verification):
  fragment_extraction -> web_search -> similarity -> source_credibility
  -> plagiarism -> fact_check -> scorer

Every stage is wrapped: a collaborator error or timeout marks that stage
failed and the run carries on with whatever evidence is left. Cancelling the
run marks the in-flight stage failed ("cancelled") and propagates.

All collaborators are injected; `None` means "not configured".
"""

import time
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union

from aicheck.config import Settings, settings as default_settings
from aicheck.core.errors import ProviderError, ProviderUnavailableError, StageError, StageTimeoutError
from aicheck.core.validator import validate_request
from aicheck.detection.cache import FingerprintCache
from aicheck.detection.fusion import WEB_SOURCE_ID, FusionPolicy, fuse
from aicheck.detection.hashing import cache_key, fingerprint
from aicheck.detection.heuristics import LocalHeuristicClassifier
from aicheck.integrations.gemini.parsing import parse_reasoning, reasoning_to_evidence
from aicheck.integrations.gemini.prompts import build_reasoning_prompt
from aicheck.integrations.huggingface import classification_to_evidence
from aicheck.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    BinaryBlob,
    ContentKind,
    ErrorInfo,
    EvidenceItem,
    Label,
    PipelineStage,
    StageStatus,
)
from aicheck.schemas.verification import SearchHit, VerificationReport
from aicheck.verification import analysis, scorer
from aicheck.verification.fragments import extract_key_fragments

logger = logging.getLogger(__name__)

StageFn = Callable[[], Awaitable[tuple[Any, Optional[dict]]]]

REASONING = "reasoning"
PATTERN_CLASSIFICATION = "pattern_classification"
WEB_VERIFICATION = "web_verification"

FRAGMENT_EXTRACTION = "fragment_extraction"
WEB_SEARCH = "web_search"
SIMILARITY = "similarity"
SOURCE_CREDIBILITY = "source_credibility"
PLAGIARISM = "plagiarism"
FACT_CHECK = "fact_check"
METADATA = "metadata"

WEB_TOP_HITS = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class PipelineOrchestrator:
    def __init__(
        self,
        settings: Settings = default_settings,
        cache: Optional[FingerprintCache] = None,
        verification_cache: Optional[FingerprintCache] = None,
        reasoning=None,
        classifier=None,
        search=None,
        heuristic: Optional[LocalHeuristicClassifier] = None,
        monitor=None,
        persistence=None,
    ):
        self.settings = settings
        self.cache = cache
        self.verification_cache = verification_cache
        self.reasoning = reasoning
        self.classifier = classifier
        self.search = search
        self.heuristic = heuristic
        self.monitor = monitor
        self.persistence = persistence
        self.policy = FusionPolicy(
            ai_threshold=settings.ai_label_threshold,
            suspicious_confidence=settings.suspicious_confidence,
            max_confidence=settings.max_confidence,
            no_evidence_confidence=settings.no_evidence_confidence,
            web_high_similarity=settings.web_high_similarity,
            web_low_similarity=settings.web_low_similarity,
        )
        self._inflight: dict[str, asyncio.Future] = {}

    # ------------------------------------------------------------------ #
    # Stage wrapper
    # ------------------------------------------------------------------ #

    @staticmethod
    def _fail(stage: PipelineStage, kind: str, message: str) -> None:
        stage.status = StageStatus.FAILED
        stage.finished_at = _now()
        stage.error = ErrorInfo(kind=kind, message=message)
        logger.warning(f"[PIPELINE] Stage {stage.name} failed ({kind}): {message}")

    async def _run_stage(self, stage: PipelineStage, fn: StageFn, timeout: Optional[float]) -> Any:
        """Run one stage; returns its value, or None when the stage failed."""
        stage.status = StageStatus.RUNNING
        stage.started_at = _now()
        try:
            value, summary = await asyncio.wait_for(fn(), timeout)
        except asyncio.CancelledError:
            self._fail(stage, "cancelled", "Run was cancelled")
            raise
        except asyncio.TimeoutError:
            self._fail(stage, "timeout", str(StageTimeoutError(stage.name, timeout or 0)))
            return None
        except ProviderUnavailableError as e:
            self._fail(stage, "unavailable", str(e))
            return None
        except ProviderError as e:
            self._fail(stage, "provider", str(e))
            return None
        except Exception as e:
            self._fail(stage, "internal", str(e))
            return None

        stage.status = StageStatus.COMPLETED
        stage.finished_at = _now()
        stage.result = summary
        return value

    async def _run_stages(self, plan: list[tuple[str, StageFn, Optional[float]]], parallel: bool) -> tuple[list[PipelineStage], list[Any]]:
        stages = [PipelineStage(index=i, name=name) for i, (name, _, _) in enumerate(plan)]

        if parallel:
            values = await asyncio.gather(
                *(self._run_stage(stage, fn, timeout) for stage, (_, fn, timeout) in zip(stages, plan))
            )
            return stages, list(values)

        values = []
        for stage, (_, fn, timeout) in zip(stages, plan):
            values.append(await self._run_stage(stage, fn, timeout))
        return stages, values

    # ------------------------------------------------------------------ #
    # In-flight de-duplication
    # ------------------------------------------------------------------ #

    async def _deduped(self, flight_key: str, work: Callable[[], Awaitable[Any]]) -> Any:
        if not self.settings.dedupe_inflight:
            return await work()

        while True:
            leader = self._inflight.get(flight_key)
            if leader is None:
                break
            logger.info(f"[PIPELINE] Joining in-flight run {flight_key}")
            try:
                return await asyncio.shield(leader)
            except asyncio.CancelledError:
                # The leader gave up; retry (and possibly lead) unless we were the one cancelled.
                if leader.cancelled():
                    continue
                raise

        future = asyncio.get_running_loop().create_future()
        self._inflight[flight_key] = future
        try:
            result = await work()
        except BaseException:
            future.cancel()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._inflight.pop(flight_key, None)

    # ------------------------------------------------------------------ #
    # Sinks
    # ------------------------------------------------------------------ #

    def _emit(self, kind: ContentKind, label: str, confidence: float, latency_ms: int, is_cached: bool, record=None, record_type: str = "classification") -> None:
        if self.monitor is not None:
            try:
                self.monitor.record(kind.value, label, confidence, latency_ms, is_cached=is_cached)
            except Exception as e:
                logger.error(f"[PIPELINE] Monitoring record failed: {e}")

        if record is not None and self.persistence is not None and self.settings.persist_results:
            try:
                self.persistence.save(record, record_type)
            except Exception as e:
                logger.error(f"[PIPELINE] Persistence failed: {e}")

    # ------------------------------------------------------------------ #
    # Classification
    # ------------------------------------------------------------------ #

    async def run(self, request: AnalysisRequest) -> AnalysisResult:
        """Classify one piece of content. Raises only ValidationError."""
        content = validate_request(request)
        started = time.perf_counter()
        key = cache_key(content, request.kind)

        use_cache = request.options.get("use_cache", True)
        if self.cache is not None and use_cache:
            entry = self.cache.get(key)
            if entry is not None:
                cached = entry.payload.model_copy(update={"is_cached": True, "latency_ms": _elapsed_ms(started)})
                self._emit(request.kind, cached.label.value, cached.confidence, cached.latency_ms, True)
                return cached

        return await self._deduped(
            f"classify:{key}",
            lambda: self._classify(content, request.kind, key, started),
        )

    def _classification_plan(self, content: Union[str, BinaryBlob], kind: ContentKind) -> list:
        s = self.settings
        if isinstance(content, BinaryBlob):
            return [(REASONING, lambda: self._reasoning_stage(kind, media=content), s.reasoning_timeout_sec)]

        return [
            (REASONING, lambda: self._reasoning_stage(kind, text=content), s.reasoning_timeout_sec),
            (PATTERN_CLASSIFICATION, lambda: self._pattern_stage(content), s.classifier_timeout_sec),
            (WEB_VERIFICATION, lambda: self._web_stage(content), s.search_timeout_sec),
        ]

    async def _classify(self, content: Union[str, BinaryBlob], kind: ContentKind, key: str, started: float) -> AnalysisResult:
        plan = self._classification_plan(content, kind)
        logger.info(f"[PIPELINE] Classifying {kind.value} ({len(plan)} stages, parallel={self.settings.parallel_stages})")

        stages, values = await self._run_stages(plan, self.settings.parallel_stages)

        evidence: list[EvidenceItem] = [v for v in values if isinstance(v, EvidenceItem)]
        failed = [s.name for s in stages if s.status == StageStatus.FAILED]
        outcome = fuse(evidence, failed_stages=failed, policy=self.policy)

        result = AnalysisResult(
            label=outcome.label,
            confidence=outcome.confidence,
            ai_probability_pct=outcome.ai_probability_pct,
            human_probability_pct=outcome.human_probability_pct,
            explanation=outcome.explanation,
            stages=stages,
            evidence=evidence,
            kind=kind,
            fingerprint=fingerprint(content),
            latency_ms=_elapsed_ms(started),
        )

        logger.info(
            f"[PIPELINE] {kind.value} -> {result.label.value} ({result.confidence:.2f}), "
            f"{len(evidence)} evidence, {len(failed)} failed stage(s), {result.latency_ms}ms"
        )

        if self.cache is not None:
            self.cache.set(key, result)
        self._emit(kind, result.label.value, result.confidence, result.latency_ms, False, record=result)
        return result

    async def _reasoning_stage(self, kind: ContentKind, text: str = None, media: BinaryBlob = None):
        if self.reasoning is None:
            raise ProviderUnavailableError(REASONING, "Reasoning service not configured")

        prompt = build_reasoning_prompt(kind, text)
        raw = await self.reasoning.reason(prompt, media=media)
        outcome = parse_reasoning(raw)
        item = reasoning_to_evidence(outcome)
        return item, {"format": outcome.kind, "label": item.label.value, "confidence": item.confidence}

    def _heuristic_evidence(self, text: str, reason: str):
        item = self.heuristic.classify(text)
        logger.info(f"[PIPELINE] Pattern classification via local heuristic ({reason})")
        return item, {"provider": item.source_id, "fallback_reason": reason, "label": item.label.value, "confidence": item.confidence}

    async def _pattern_stage(self, text: str):
        can_fall_back = self.settings.heuristic_fallback_enabled and self.heuristic is not None

        if self.classifier is None:
            if can_fall_back:
                return self._heuristic_evidence(text, "classifier not configured")
            raise ProviderUnavailableError(PATTERN_CLASSIFICATION, "Classifier not configured")

        # The stage timeout cancels this coroutine, so it never reaches the fallback.
        try:
            item = classification_to_evidence(await self.classifier.classify(text))
        except ProviderUnavailableError as e:
            if not can_fall_back:
                raise
            return self._heuristic_evidence(text, f"classifier unavailable: {e}")
        except Exception as e:
            if not can_fall_back:
                raise
            return self._heuristic_evidence(text, f"classifier error: {type(e).__name__}: {e}")

        return item, {"provider": getattr(self.classifier, "name", "classifier"), "label": item.label.value, "confidence": item.confidence}

    async def _web_stage(self, text: str):
        if self.search is None:
            raise ProviderUnavailableError(WEB_VERIFICATION, "Search service not configured")

        fragments = extract_key_fragments(text, limit=1)
        query = fragments[0] if fragments else " ".join(text.split()[:12])

        response = await self.search.search(query, count=self.settings.search_results_per_query)
        hits = response.items[:WEB_TOP_HITS]
        scores = [analysis.hit_relevance(query, hit) for hit in hits]
        similarity = round(sum(scores) / len(scores), 4) if scores else 0.0

        summary = {"query": query, "hits": len(hits), "similarity": similarity}
        if self.settings.web_evidence_weight <= 0:
            summary["disabled"] = True
            return None, summary

        if similarity > self.settings.web_high_similarity:
            rationale = f"Web search found closely matching published content (similarity {similarity:.2f})."
        elif similarity < self.settings.web_low_similarity:
            rationale = f"Web search found little matching published content (similarity {similarity:.2f})."
        else:
            rationale = f"Web search found partially matching content (similarity {similarity:.2f})."

        item = EvidenceItem(
            source_id=WEB_SOURCE_ID,
            label=Label.UNKNOWN,
            confidence=self.settings.web_evidence_confidence,
            weight=self.settings.web_evidence_weight,
            rationale=rationale,
            signal=similarity,
        )
        return item, summary

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    async def verify(self, content: Union[str, BinaryBlob], kind: ContentKind = ContentKind.TEXT) -> VerificationReport:
        """Verify originality and credibility. Raises only ValidationError."""
        content = validate_request(AnalysisRequest(content=content, kind=kind))
        started = time.perf_counter()
        key = cache_key(content, kind)

        if self.verification_cache is not None:
            entry = self.verification_cache.get(key)
            if entry is not None:
                cached = entry.payload.model_copy(update={"is_cached": True})
                self._emit(kind, cached.status.value, cached.overall_score / 100, _elapsed_ms(started), True)
                return cached

        return await self._deduped(
            f"verify:{key}",
            lambda: self._verify(content, kind, key, started),
        )

    async def _verify(self, content: Union[str, BinaryBlob], kind: ContentKind, key: str, started: float) -> VerificationReport:
        if isinstance(content, BinaryBlob):
            report = await self._verify_binary(content, kind)
        else:
            report = await self._verify_text(content)

        report = report.model_copy(update={"kind": kind, "fingerprint": fingerprint(content)})

        if self.verification_cache is not None:
            self.verification_cache.set(key, report)
        self._emit(
            kind, report.status.value, report.overall_score / 100, _elapsed_ms(started), False,
            record=report, record_type="verification",
        )
        return report

    async def _verify_binary(self, blob: BinaryBlob, kind: ContentKind) -> VerificationReport:
        async def metadata_stage():
            return None, {"filename": blob.filename, "size": blob.size, "mime_type": blob.mime_type}

        stages, _ = await self._run_stages([(METADATA, metadata_stage, None)], parallel=False)
        report = scorer.score_factors(scorer.neutral_factors())
        recommendations = [f"Check the {kind.value} with specialised forensic tools"] + report.recommendations
        return report.model_copy(update={"stages": stages, "recommendations": recommendations})

    async def _search_fragments(self, fragments: list[str]) -> list[SearchHit]:
        timeout = self.settings.search_timeout_sec
        count = self.settings.search_results_per_query

        responses = await asyncio.gather(
            *(asyncio.wait_for(self.search.search(f, count=count), timeout) for f in fragments),
            return_exceptions=True,
        )

        hits: list[SearchHit] = []
        failures = 0
        for fragment, response in zip(fragments, responses):
            if isinstance(response, BaseException):
                failures += 1
                logger.warning(f"[VERIFY] Search for '{fragment[:40]}' failed: {type(response).__name__}: {response}")
                continue
            hits.extend(response.items)

        if fragments and failures == len(fragments):
            raise StageError(WEB_SEARCH, f"All {failures} searches failed")
        return hits

    async def _verify_text(self, text: str) -> VerificationReport:
        stage_values: dict[str, Any] = {}

        async def fragment_stage():
            fragments = extract_key_fragments(text, limit=self.settings.max_search_fragments)
            return fragments, {"fragments": fragments}

        async def search_stage():
            if self.search is None:
                raise ProviderUnavailableError(WEB_SEARCH, "Search service not configured")
            fragments = stage_values.get(FRAGMENT_EXTRACTION)
            if fragments is None:
                raise StageError(WEB_SEARCH, "No fragments to search")
            hits = await self._search_fragments(fragments)
            return hits, {"queries": len(fragments), "hits": len(hits)}

        def needs_hits(name: str, compute: Callable[[list[SearchHit]], tuple[Any, dict]]) -> StageFn:
            async def stage():
                hits = stage_values.get(WEB_SEARCH)
                if hits is None:
                    raise StageError(name, "Web search unavailable")
                return compute(hits)
            return stage

        def similarity(hits):
            result = analysis.analyze_similarity(text, hits, self.settings.similar_source_threshold)
            return result, {"average": round(result.average, 4), "max": round(result.maximum, 4), "risk": result.risk.value}

        def credibility(hits):
            result = analysis.verify_sources(hits)
            return result, {"total": result.total, "credible": result.credible, "score": round(result.credibility_score, 2)}

        def plagiarism(hits):
            result = analysis.check_plagiarism(text, hits, self.settings.plagiarism_match_threshold)
            return result, {"score": round(result.score, 2), "matches": len(result.matches), "risk": result.risk.value}

        def facts(hits):
            result = analysis.fact_check(text, hits, self.settings.max_claims)
            return result, {"score": round(result.score, 2), "claims": len(result.claims), "contradictory": result.contradictory}

        plan = [
            (FRAGMENT_EXTRACTION, fragment_stage, None),
            (WEB_SEARCH, search_stage, None),
            (SIMILARITY, needs_hits(SIMILARITY, similarity), None),
            (SOURCE_CREDIBILITY, needs_hits(SOURCE_CREDIBILITY, credibility), None),
            (PLAGIARISM, needs_hits(PLAGIARISM, plagiarism), None),
            (FACT_CHECK, needs_hits(FACT_CHECK, facts), None),
        ]

        stages = [PipelineStage(index=i, name=name) for i, (name, _, _) in enumerate(plan)]
        for stage, (name, fn, timeout) in zip(stages, plan):
            value = await self._run_stage(stage, fn, timeout)
            if stage.status == StageStatus.COMPLETED:
                stage_values[name] = value

        sim = stage_values.get(SIMILARITY)
        cred = stage_values.get(SOURCE_CREDIBILITY)
        plag = stage_values.get(PLAGIARISM)
        fact = stage_values.get(FACT_CHECK)

        factors = scorer.build_factors(
            avg_similarity=sim.average if sim is not None else None,
            credibility_score=cred.credibility_score if cred is not None else None,
            plagiarism_score=plag.score if plag is not None else None,
            fact_check_score=fact.score if fact is not None else None,
        )
        report = scorer.score_factors(
            factors,
            plagiarism_tier=plag.risk if plag is not None else None,
            contradictory_claims=fact.contradictory if fact is not None else 0,
        )
        return report.model_copy(update={
            "stages": stages,
            "similar_sources": sim.similar_sources if sim is not None else [],
            "potential_matches": plag.matches if plag is not None else [],
            "claims": fact.claims if fact is not None else [],
        })


async def run_classification(request: AnalysisRequest, orchestrator: PipelineOrchestrator = None) -> AnalysisResult:
    if orchestrator is None:
        from aicheck.core.dependencies import get_orchestrator
        orchestrator = get_orchestrator()
    return await orchestrator.run(request)


async def run_verification(content: Union[str, BinaryBlob], kind: ContentKind = ContentKind.TEXT, orchestrator: PipelineOrchestrator = None) -> VerificationReport:
    if orchestrator is None:
        from aicheck.core.dependencies import get_orchestrator
        orchestrator = get_orchestrator()
    return await orchestrator.verify(content, kind)
