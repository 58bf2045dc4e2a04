"""Four-step analysis-and-synthesis pipeline.

Steps run in a fixed order: Structure Discovery, Pattern Extraction, API
Surface Analysis and Documentation Synthesis. The first three read only the
original contexts; the last one joins their findings into the final markdown.
A backend failure in steps 1-3 aborts the run with :class:`GenerationFailed`.
A failure (or empty answer) in step 4 is recovered with the deterministic
fallback document and a fixed low confidence.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from .errors import BackendError, GenerationFailed
from .failsafe import FALLBACK_CONFIDENCE, FALLBACK_MODEL_ID, build_fallback_snippet
from .llm.backend import Backend
from .logging import get_logger
from .metadata import collect_data_sources
from .models import (
    DATA_SOURCE_FALLBACK,
    AnalysisStep,
    RegistryContext,
    RepositoryContext,
    SynthesisResult,
)
from .prompting.builder import StepPrompt, StepPromptBuilder
from .prompting.constants import (
    API_SURFACE_ANALYSIS,
    DOCUMENTATION_SYNTHESIS,
    MAX_OUTPUT_TOKENS,
    PATTERN_EXTRACTION,
    STEP_GOALS,
    STRUCTURE_DISCOVERY,
    SYSTEM_PROMPT,
    TEMPERATURE,
)
from .scoring import ConfidenceScorer, JitterScorer

SYNTHESIS_CONFIDENCE = 0.95


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class _StepDraft:
    """Backend findings for one of steps 1-3, not yet scored."""

    step: str
    findings: str
    baseline: float


class SynthesisPipeline:
    """Runs the four analysis steps against one generative backend."""

    def __init__(
        self,
        backend: Backend,
        *,
        scorer: ConfidenceScorer | None = None,
        prompt_builder: StepPromptBuilder | None = None,
        request_timeout: float | None = 90.0,
        parallel_steps: bool = False,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self.backend = backend
        self.scorer = scorer or JitterScorer()
        self.prompt_builder = prompt_builder or StepPromptBuilder()
        self.request_timeout = request_timeout
        self.parallel_steps = parallel_steps
        self._clock = clock or _utc_timestamp
        self.logger = get_logger("pipeline")

    async def run(
        self,
        package_name: str,
        *,
        repository: Optional[RepositoryContext] = None,
        registry: Optional[RegistryContext] = None,
        identifier: str = "",
        url: str | None = None,
    ) -> SynthesisResult:
        """Produce a :class:`SynthesisResult` from whichever contexts are present."""
        self.logger.info("Running 4-step analysis for %s", package_name)
        analysis_steps = [
            lambda: self._structure_discovery(package_name, repository),
            lambda: self._pattern_extraction(package_name, repository),
            lambda: self._api_surface_analysis(package_name, repository, registry),
        ]
        if self.parallel_steps:
            drafts = await _gather_all(analysis_steps)
        else:
            drafts = [await run_step() for run_step in analysis_steps]
        # Scored in step order after the join, never in completion order.
        steps = [self._score(draft) for draft in drafts]

        synthesis_prompt = self.prompt_builder.documentation_synthesis(
            package_name, steps, registry, identifier or package_name, url
        )
        self.logger.info("Step 4: synthesizing final documentation for %s", package_name)
        try:
            markdown = await self._complete(synthesis_prompt)
        except (BackendError, asyncio.TimeoutError) as exc:
            self.logger.warning(
                "Documentation synthesis failed for %s; using fallback: %s",
                package_name,
                str(exc) or exc.__class__.__name__,
            )
            markdown = ""

        if not markdown.strip():
            return self._fallback_result(package_name, steps, registry, url)

        steps.append(
            AnalysisStep(
                name=DOCUMENTATION_SYNTHESIS,
                goal=STEP_GOALS[DOCUMENTATION_SYNTHESIS],
                findings=markdown,
                confidence=SYNTHESIS_CONFIDENCE,
            )
        )
        overall = sum(step.confidence for step in steps) / len(steps)
        self.logger.info("Generated snippet for %s with confidence %.2f", package_name, overall)
        return SynthesisResult(
            steps=steps,
            final_markdown=markdown,
            overall_confidence=overall,
            model_id=self.backend.model_id,
            generated_at=self._clock(),
            data_sources=collect_data_sources(repository, registry),
        )

    # ------------------------------------------------------------------
    # Steps 1-3

    async def _structure_discovery(
        self, package_name: str, repository: Optional[RepositoryContext]
    ) -> _StepDraft:
        prompt = self.prompt_builder.structure_discovery(package_name, repository)
        has_structure = repository is not None and repository.structure is not None
        return await self._analysis_step(prompt, 0.9 if has_structure else 0.3)

    async def _pattern_extraction(
        self, package_name: str, repository: Optional[RepositoryContext]
    ) -> _StepDraft:
        prompt = self.prompt_builder.pattern_extraction(package_name, repository)
        has_excerpts = repository is not None and bool(repository.examples or repository.tests)
        return await self._analysis_step(prompt, 0.8 if has_excerpts else 0.4)

    async def _api_surface_analysis(
        self,
        package_name: str,
        repository: Optional[RepositoryContext],
        registry: Optional[RegistryContext],
    ) -> _StepDraft:
        prompt = self.prompt_builder.api_surface_analysis(package_name, repository, registry)
        has_types = registry is not None and registry.has_type_definitions
        return await self._analysis_step(prompt, 0.9 if has_types else 0.6)

    async def _analysis_step(self, prompt: StepPrompt, baseline: float) -> _StepDraft:
        self.logger.debug("Running step %s", prompt.step)
        try:
            findings = await self._complete(prompt)
        except (BackendError, asyncio.TimeoutError) as exc:
            raise GenerationFailed(prompt.step, exc) from exc
        return _StepDraft(step=prompt.step, findings=findings, baseline=baseline)

    def _score(self, draft: _StepDraft) -> AnalysisStep:
        return AnalysisStep(
            name=draft.step,
            goal=STEP_GOALS[draft.step],
            findings=draft.findings,
            confidence=self.scorer.score(draft.step, draft.baseline),
        )

    # ------------------------------------------------------------------
    # Helpers

    async def _complete(self, prompt: StepPrompt) -> str:
        text = await asyncio.wait_for(
            asyncio.to_thread(
                self.backend.complete,
                prompt.prompt,
                system=SYSTEM_PROMPT,
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
            ),
            timeout=self.request_timeout,
        )
        return text or ""

    def _fallback_result(
        self,
        package_name: str,
        steps: List[AnalysisStep],
        registry: Optional[RegistryContext],
        url: str | None,
    ) -> SynthesisResult:
        markdown = build_fallback_snippet(package_name, registry, repository_url=url)
        steps.append(
            AnalysisStep(
                name=DOCUMENTATION_SYNTHESIS,
                goal=STEP_GOALS[DOCUMENTATION_SYNTHESIS],
                findings=markdown,
                confidence=FALLBACK_CONFIDENCE,
            )
        )
        return SynthesisResult(
            steps=steps,
            final_markdown=markdown,
            overall_confidence=FALLBACK_CONFIDENCE,
            model_id=FALLBACK_MODEL_ID,
            generated_at=self._clock(),
            data_sources=[DATA_SOURCE_FALLBACK],
            fallback=True,
        )


async def _gather_all(
    factories: Sequence[Callable[[], Awaitable[_StepDraft]]],
) -> List[_StepDraft]:
    """Run independent steps concurrently; results keep the factories' order."""
    tasks = [asyncio.ensure_future(factory()) for factory in factories]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


__all__ = [
    "API_SURFACE_ANALYSIS",
    "DOCUMENTATION_SYNTHESIS",
    "PATTERN_EXTRACTION",
    "STRUCTURE_DISCOVERY",
    "SYNTHESIS_CONFIDENCE",
    "SynthesisPipeline",
]
