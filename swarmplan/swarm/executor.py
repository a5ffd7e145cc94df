"""Swarm executor: speculate, plan, fan out to agents, synthesize, log."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable, Sequence

from swarmplan.agents import DEFAULT_ROSTER, AgentProfile, AgentRoster
from swarmplan.config import SwarmConfig
from swarmplan.llm.backend import Generation, LiteLLMBackend, ModelBackend
from swarmplan.swarm.memory import MemoryRecord, write_swarm_memory
from swarmplan.swarm.models import ModelAvailabilityCache
from swarmplan.swarm.pool import WorkerFailure, run_with_limit
from swarmplan.swarm.prompts import (
    build_agent_prompt,
    build_log_prompt,
    build_plan_prompt,
    build_speculation_prompt,
    build_synthesis_prompt,
    extract_json,
    raw_outputs_fallback,
    truncate,
)
from swarmplan.swarm.types import (
    AgentOutcome,
    AgentSummary,
    AllAgentsFailedError,
    MemoryInfo,
    SwarmRunResult,
    SwarmTimeoutError,
    SwarmTranscript,
)

logger = logging.getLogger(__name__)

MemoryWriter = Callable[..., MemoryRecord]

LOG_PLACEHOLDER = "Log generation skipped due to errors."


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class Deadline:
    """Whole-run time budget; ``None`` seconds means unlimited."""

    def __init__(self, seconds: float | None, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._end = None if seconds is None else clock() + seconds

    def remaining(self) -> float | None:
        """Seconds left, or None when unlimited.

        Raises:
            SwarmTimeoutError: once the budget is spent.
        """
        if self._end is None:
            return None
        left = self._end - self._clock()
        if left <= 0:
            raise SwarmTimeoutError("Swarm run exceeded its deadline")
        return left


class SwarmExecutor:
    """Runs one prompt through the five-stage swarm pipeline.

    Usage:
        executor = SwarmExecutor(config=SwarmConfig(), backend=LiteLLMBackend(config))
        result = await executor.run("Design a caching layer", agents=["Yennefer", "Triss"])

    ``run`` never raises ``Exception``: failures become fields of the
    result. Cancelling the task that awaits ``run`` cancels every stage.
    """

    def __init__(
        self,
        config: SwarmConfig | None = None,
        backend: ModelBackend | None = None,
        roster: AgentRoster = DEFAULT_ROSTER,
        memory_writer: MemoryWriter | None = None,
    ) -> None:
        self.config = config or SwarmConfig()
        self.backend = backend or LiteLLMBackend(self.config)
        self.roster = roster
        self._memory_writer = memory_writer or functools.partial(
            write_swarm_memory, memory_dir=self.config.memory_dir
        )
        self._models = ModelAvailabilityCache(self.backend, ttl=self.config.model_cache_ttl)

    async def run(
        self,
        prompt: str,
        *,
        title: str | None = None,
        agents: Sequence[str] | None = None,
        include_transcript: bool = False,
        save_memory: bool = True,
        logger: logging.Logger | None = None,
    ) -> SwarmRunResult:
        log = logger if logger is not None else logging.getLogger(__name__)
        try:
            return await self._run(
                prompt,
                title=title,
                requested=agents,
                include_transcript=include_transcript,
                save_memory=save_memory,
                log=log,
            )
        except Exception as e:
            log.error("Swarm execution fatal error: %s", _describe(e))
            return SwarmRunResult(error=_describe(e), is_error=True)

    async def _run(
        self,
        prompt: str,
        *,
        title: str | None,
        requested: Sequence[str] | None,
        include_transcript: bool,
        save_memory: bool,
        log: logging.Logger,
    ) -> SwarmRunResult:
        cfg = self.config
        deadline = Deadline(cfg.run_timeout)
        selected, unknown = self._resolve_agents(requested)
        if unknown:
            log.warning("Ignoring unknown swarm agents: %s", ", ".join(unknown))

        # Stage 1: Speculation
        log.info("Swarm speculation (%s)", cfg.fast_model)
        speculation = await self._soft_stage(
            "speculation",
            cfg.fast_model,
            build_speculation_prompt(prompt),
            temperature=0.2,
            max_tokens=600,
            deadline=deadline,
            log=log,
        )

        # Stage 2: Planning
        log.info("Swarm planning (%s)", cfg.default_model)
        plan = await self._soft_stage(
            "planning",
            cfg.default_model,
            build_plan_prompt(prompt, speculation),
            temperature=0.2,
            max_tokens=900,
            deadline=deadline,
            log=log,
        )

        # Stage 3: Agents, bounded fan-out
        deadline.remaining()
        log.info("Swarm dispatching %d agent(s), concurrency %d", len(selected), cfg.max_concurrent)
        outcomes = await self._dispatch_agents(selected, prompt, speculation, plan, deadline)
        successful = [o for o in outcomes if not o.failed]
        if not successful:
            raise AllAgentsFailedError("All swarm agents failed to generate responses.")
        if len(successful) < len(outcomes):
            log.warning(
                "Some swarm agents failed: %d/%d successful", len(successful), len(outcomes)
            )

        # Stage 4: Synthesis
        deadline.remaining()
        try:
            synthesis = (
                await self._generate(
                    cfg.default_model,
                    build_synthesis_prompt(
                        prompt, speculation, plan, successful, cfg.synthesis_preview_chars
                    ),
                    temperature=0.25,
                    max_tokens=1800,
                    deadline=deadline,
                )
            ).response
        except SwarmTimeoutError:
            raise
        except Exception as e:
            log.error("Swarm synthesis failed: %s", _describe(e))
            synthesis = raw_outputs_fallback(successful)

        # Stage 5: Logging
        deadline.remaining()
        try:
            summary = (
                await self._generate(
                    cfg.fast_model,
                    build_log_prompt(prompt, synthesis),
                    temperature=0.2,
                    max_tokens=400,
                    deadline=deadline,
                )
            ).response
        except SwarmTimeoutError:
            raise
        except Exception as e:
            log.warning("Swarm log generation failed: %s", _describe(e))
            summary = LOG_PLACEHOLDER

        memory: MemoryInfo | None = None
        if save_memory:
            memory = await self._save_memory(
                title=title,
                prompt=prompt,
                steps={"speculation": speculation, "plan": plan},
                outcomes=outcomes,
                summary=summary,
                final_answer=synthesis,
                log=log,
            )

        result = SwarmRunResult(
            title=title or None,
            summary=summary,
            final=synthesis,
            agents=[self._summarize(o) for o in outcomes],
            warnings=[f"Unknown agents: {', '.join(unknown)}"] if unknown else [],
            memory=memory,
        )
        if include_transcript:
            result.transcript = SwarmTranscript(
                speculation=speculation,
                plan=plan,
                plan_json=extract_json(plan),
                agents=outcomes,
                synthesis=synthesis,
                log=summary,
            )
        return result

    def _resolve_agents(
        self, requested: Sequence[str] | None
    ) -> tuple[list[AgentProfile], list[str]]:
        """Filter the roster by name (roster order); collect unknown names."""
        if not requested:
            return list(self.roster), []
        wanted = set(requested)
        selected = [agent for agent in self.roster if agent.name in wanted]
        unknown = [name for name in requested if name not in self.roster]
        return selected, unknown

    async def _generate(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        deadline: Deadline,
    ) -> Generation:
        return await asyncio.wait_for(
            self.backend.generate(model, prompt, temperature=temperature, max_tokens=max_tokens),
            timeout=deadline.remaining(),
        )

    async def _soft_stage(
        self,
        stage: str,
        model: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        deadline: Deadline,
        log: logging.Logger,
    ) -> str:
        """Run a stage whose failure degrades to a placeholder text."""
        deadline.remaining()
        try:
            generation = await self._generate(
                model, prompt, temperature=temperature, max_tokens=max_tokens, deadline=deadline
            )
        except SwarmTimeoutError:
            raise
        except Exception as e:
            log.error("Swarm %s failed: %s", stage, _describe(e))
            return f"{stage.capitalize()} failed: {_describe(e)}"
        return generation.response

    async def _dispatch_agents(
        self,
        agents: list[AgentProfile],
        prompt: str,
        speculation: str,
        plan: str,
        deadline: Deadline,
    ) -> list[AgentOutcome]:
        async def call_agent(agent: AgentProfile, _index: int) -> AgentOutcome:
            resolved = await asyncio.wait_for(
                self._models.resolve(agent.model, self.config.default_model),
                timeout=deadline.remaining(),
            )
            generation = await self._generate(
                resolved.model,
                build_agent_prompt(agent, prompt, speculation, plan),
                temperature=0.3,
                max_tokens=1400,
                deadline=deadline,
            )
            return AgentOutcome(
                name=agent.name,
                model=resolved.model,
                fallback_used=resolved.fallback_used,
                response=generation.response,
            )

        results = await run_with_limit(agents, max(1, self.config.max_concurrent), call_agent)

        outcomes: list[AgentOutcome] = []
        for agent, result in zip(agents, results, strict=True):
            if isinstance(result, WorkerFailure):
                logger.debug("Agent %s failed: %s", agent.name, result.error)
                outcomes.append(
                    AgentOutcome(name=agent.name, model="unknown", failed=True, error=result.error)
                )
            else:
                outcomes.append(result)
        return outcomes

    def _summarize(self, outcome: AgentOutcome) -> AgentSummary:
        if outcome.failed:
            preview = outcome.error or "Failed"
        else:
            preview = truncate(outcome.response, self.config.summary_preview_chars) or "Failed"
        return AgentSummary(
            name=outcome.name,
            model=outcome.model,
            fallback_used=outcome.fallback_used,
            preview=preview,
            success=not outcome.failed,
        )

    async def _save_memory(
        self,
        *,
        title: str | None,
        prompt: str,
        steps: dict[str, str],
        outcomes: list[AgentOutcome],
        summary: str,
        final_answer: str,
        log: logging.Logger,
    ) -> MemoryInfo:
        """Archive the run on a worker thread, under its own timeout."""
        write = functools.partial(
            self._memory_writer,
            title=title,
            prompt=prompt,
            steps=steps,
            agents=outcomes,
            summary=summary,
            final_answer=final_answer,
        )
        try:
            record = await asyncio.wait_for(
                asyncio.to_thread(write), timeout=self.config.memory_timeout
            )
        except Exception as e:
            log.warning("Failed to write swarm memory: %s", _describe(e))
            return MemoryInfo(error=_describe(e))
        return MemoryInfo(
            archive_path=record.archive_path,
            log_path=record.log_path,
            compacted=record.compacted,
        )


async def run_swarm(
    prompt: str,
    *,
    title: str | None = None,
    agents: Sequence[str] | None = None,
    include_transcript: bool = False,
    save_memory: bool = True,
    logger: logging.Logger | None = None,
    config: SwarmConfig | None = None,
    backend: ModelBackend | None = None,
    roster: AgentRoster = DEFAULT_ROSTER,
    memory_writer: MemoryWriter | None = None,
) -> SwarmRunResult:
    """Run one prompt through the swarm with a fresh executor."""
    executor = SwarmExecutor(
        config=config,
        backend=backend,
        roster=roster,
        memory_writer=memory_writer,
    )
    return await executor.run(
        prompt,
        title=title,
        agents=agents,
        include_transcript=include_transcript,
        save_memory=save_memory,
        logger=logger,
    )
