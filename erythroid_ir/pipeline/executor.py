"""In-memory stage executor."""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .logger import PipelineLogger


@dataclass
class StageSpec:
    """A registered stage: callable plus dependencies."""

    stage_id: str
    func: Callable[..., Any]
    depends_on: List[str] = field(default_factory=list)
    name: str = ""


class InMemoryExecutor:
    """Run registered Python stage functions in dependency order.

    Each stage is called with the keyword arguments given to ``run`` plus
    ``stage_results``, the results of the stages already completed.

    Parameters
    ----------
    logger : PipelineLogger, optional
        Receives stage start/complete/error events

    Example
    -------
    >>> executor = InMemoryExecutor()
    >>> executor.register_stage("filter", filter_stage)
    >>> executor.register_stage("test", test_stage, depends_on=["filter"])
    >>> results = executor.run(dataset=dataset)
    """

    def __init__(self, logger: Optional[PipelineLogger] = None):
        self.logger = logger
        self.stages: Dict[str, StageSpec] = {}
        self.completed_stages: List[str] = []
        self.durations: Dict[str, float] = {}

    def register_stage(
        self,
        stage_id: str,
        func: Callable[..., Any],
        depends_on: Optional[List[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        """Register a stage function.

        Raises
        ------
        ValueError
            If the stage id is already registered
        """
        if stage_id in self.stages:
            raise ValueError(f"Stage '{stage_id}' is already registered")
        self.stages[stage_id] = StageSpec(
            stage_id=stage_id,
            func=func,
            depends_on=list(depends_on or []),
            name=name or stage_id,
        )

    def execution_order(self) -> List[str]:
        """Topological order of the registered stages (registration order on ties).

        Raises
        ------
        ValueError
            If a dependency is unknown or the dependencies form a cycle
        """
        for stage in self.stages.values():
            unknown = [d for d in stage.depends_on if d not in self.stages]
            if unknown:
                raise ValueError(f"Stage '{stage.stage_id}' depends on unknown stages: {unknown}")

        in_degree = {sid: len(stage.depends_on) for sid, stage in self.stages.items()}
        queue = deque(sid for sid, degree in in_degree.items() if degree == 0)
        order = []

        while queue:
            stage_id = queue.popleft()
            order.append(stage_id)
            for other_id, other in self.stages.items():
                if stage_id in other.depends_on:
                    in_degree[other_id] -= 1
                    if in_degree[other_id] == 0:
                        queue.append(other_id)

        if len(order) != len(self.stages):
            raise ValueError("Circular dependency detected")
        return order

    def run(self, **kwargs) -> Dict[str, Any]:
        """Execute all registered stages.

        Returns
        -------
        Dict[str, Any]
            Map of stage_id to stage result

        Raises
        ------
        Exception
            Whatever a stage raises; the error is logged and re-raised
        """
        results: Dict[str, Any] = {}
        self.completed_stages = []
        self.durations = {}

        for stage_id in self.execution_order():
            stage = self.stages[stage_id]
            if self.logger:
                self.logger.log_stage_start(stage_id, stage.name)

            start_time = time.time()
            try:
                results[stage_id] = stage.func(**kwargs, stage_results=results)
            except Exception as e:
                if self.logger:
                    self.logger.log_stage_error(stage_id, str(e))
                raise

            self.durations[stage_id] = time.time() - start_time
            self.completed_stages.append(stage_id)
            if self.logger:
                self.logger.log_stage_complete(stage_id, self.durations[stage_id])

        return results
