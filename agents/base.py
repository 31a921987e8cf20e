"""
Stage plumbing for the scoring, blending and clustering agents.

An Agent turns one input into one output; `execute()` wraps `run()` so a
failing stage comes back as a result instead of an exception. The
Orchestrator threads a batch through a chain of agents and keeps every
stage's result under the agent's name.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class AgentResult:
    agent_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    elapsed: float = 0.0

    def __repr__(self):
        status = "OK" if self.success else "FAILED"
        return f"[{status}] {self.agent_name} ({self.elapsed:.3f}s)"


class Agent(ABC):
    """Subclasses implement `run(data)`; callers use `execute(data)`."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    def run(self, data: Any) -> Any:
        raise NotImplementedError

    def execute(self, data: Any) -> AgentResult:
        start = time.perf_counter()
        try:
            output = self.run(data)
        except Exception as e:
            self.logger.exception(f"[{self.name}] Failed: {e}")
            return AgentResult(
                agent_name=self.name,
                success=False,
                error=str(e),
                elapsed=time.perf_counter() - start,
            )
        elapsed = time.perf_counter() - start
        self.logger.info(f"[{self.name}] Completed in {elapsed:.3f}s")
        return AgentResult(agent_name=self.name, success=True, data=output, elapsed=elapsed)

    def __repr__(self):
        return f"<Agent: {self.name}>"


@dataclass
class ChainResult:
    """Stage results of one Orchestrator run, in execution order."""
    stages: "OrderedDict[str, AgentResult]" = field(default_factory=OrderedDict)

    @property
    def failed(self) -> Optional[AgentResult]:
        for result in self.stages.values():
            if not result.success:
                return result
        return None

    @property
    def success(self) -> bool:
        return bool(self.stages) and self.failed is None

    @property
    def error(self) -> Optional[str]:
        failed = self.failed
        return failed.error if failed else None

    @property
    def data(self) -> Any:
        """Output of the last stage that ran successfully."""
        for result in reversed(list(self.stages.values())):
            if result.success:
                return result.data
        return None

    def output(self, name: str) -> Any:
        return self.stages[name].data


class Orchestrator:
    """Feeds each agent's output to the next and stops at the first failure."""

    def __init__(self, agents: List[Agent]):
        names = [a.name for a in agents]
        if len(set(names)) != len(names):
            raise ValueError(f"agent names must be unique within a chain: {names}")
        self.agents = agents
        self.logger = logging.getLogger("orchestrator")

    def execute(self, input_data: Any) -> ChainResult:
        chain = ChainResult()
        data = input_data
        for agent in self.agents:
            result = agent.execute(data)
            chain.stages[agent.name] = result
            if not result.success:
                self.logger.error(f"Chain stopped at '{agent.name}': {result.error}")
                break
            data = result.data

        self.logger.info(
            "Chain: " + ", ".join(repr(r) for r in chain.stages.values())
        )
        return chain
