"""
Stage composition for the analysis layer.

A Pipeline runs its stages in order over one PipelineContext. Stages read
earlier results from the context by key and store their own under a key.
Stage timings are kept on the context so reports can expose them.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from soundcraft.common.logging import get_logger
from soundcraft.core.errors import TaskExecutionError
from soundcraft.modules.analysis.tasks import AudioContext, BaseTask

logger = get_logger(__name__)

StageCallback = Callable[[str, "PipelineContext"], None]


@dataclass
class PipelineContext:
    """
    State carried from stage to stage for a single clip.

    Attributes:
        audio_context: Buffer, config and progress hook the tasks run against
        results: Stage outputs keyed by stage name
        source: Label used in logs (file name, upload id)
        stage_times: Seconds spent in each stage that ran
        total_time: Seconds for the whole run, set when the pipeline finishes
    """
    audio_context: AudioContext
    results: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None
    stage_times: Dict[str, float] = field(default_factory=dict)
    total_time: float = 0.0

    @property
    def label(self) -> str:
        return self.source or self.audio_context.file_path or repr(self.audio_context.buffer)

    def get_result(self, key: str, default: Any = None) -> Any:
        return self.results.get(key, default)

    def set_result(self, key: str, value: Any) -> None:
        self.results[key] = value

    def require(self, key: str) -> Any:
        """Result of an earlier stage; a missing one is a wiring error."""
        if key not in self.results:
            raise TaskExecutionError(
                f"Stage result '{key}' is not available",
                data={"source": self.label, "available": sorted(self.results)},
            )
        return self.results[key]


class PipelineStage(ABC):
    """One step of a pipeline. Subclasses implement process()."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def process(self, context: PipelineContext) -> PipelineContext:
        """Do the work and return the context (usually the same object)."""

    def should_skip(self, context: PipelineContext) -> bool:
        return False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class TaskStage(PipelineStage):
    """
    Stage wrapping a single analysis task.

    The task's TaskResult is stored under ``result_key``. Tasks report
    failure through the result rather than raising; an unsuccessful
    result is turned into TaskExecutionError here so the pipeline stops.
    """

    def __init__(self, result_key: str):
        self.result_key = result_key

    @property
    def name(self) -> str:
        return self.result_key

    @abstractmethod
    def build_task(self, context: PipelineContext) -> BaseTask:
        """Task to run for this context."""

    def process(self, context: PipelineContext) -> PipelineContext:
        task = self.build_task(context)
        result = task.execute_timed(context.audio_context)
        if not result.success:
            raise TaskExecutionError(
                f"{task.name} failed: {result.error}",
                data={"task": task.name, "stage": self.name, "source": context.label},
            )
        context.set_result(self.result_key, result)
        return context


class Pipeline:
    """
    Ordered list of stages.

        pipeline = Pipeline([PitchStage(), LoudnessStage()])
        context = pipeline.run(PipelineContext(audio_context=ctx))

    Progress is reported through the audio context after every stage that
    runs, as the fraction of stages completed. ``on_stage_complete`` is
    called with the stage name and the context.
    """

    def __init__(
        self,
        stages: List[PipelineStage],
        name: Optional[str] = None,
        on_stage_complete: Optional[StageCallback] = None,
    ):
        self.stages = list(stages)
        self.name = name or self.__class__.__name__
        self.on_stage_complete = on_stage_complete

    def _run_stage(self, stage: PipelineStage, context: PipelineContext) -> PipelineContext:
        started = time.perf_counter()
        context = stage.process(context)
        context.stage_times[stage.name] = time.perf_counter() - started
        return context

    def run(self, context: PipelineContext) -> PipelineContext:
        total = len(self.stages)
        started = time.perf_counter()
        logger.debug(f"{self.name}: {total} stages for {context.label}")

        for done, stage in enumerate(self.stages, start=1):
            if stage.should_skip(context):
                logger.debug(f"{self.name}: skipped {stage.name}")
                continue

            context = self._run_stage(stage, context)
            context.audio_context.report_progress(stage.name, done / total)
            if self.on_stage_complete is not None:
                self.on_stage_complete(stage.name, context)

        context.total_time = time.perf_counter() - started
        logger.info(
            f"{self.name} finished in {context.total_time:.3f}s",
            data={"source": context.label, "stage_times": context.stage_times},
        )
        return context

    def __repr__(self) -> str:
        return f"{self.name}({' -> '.join(s.name for s in self.stages)})"
