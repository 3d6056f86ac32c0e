"""
Race harness for single-winner checks.

Fires a fixed number of parallel actors at the service, each issuing one
mutating request, and waits for all of them.  Verdicts are taken from the
authoritative state re-read from the service afterwards, not from the
actors' response codes: a non-atomic backend can answer 201 to more than
one caller for the same id.

Key Concepts Demonstrated:
- Worker threads released together through a barrier
- Bounded join: a hung actor fails the test instead of hanging it
- Accepted/rejected classification of each actor's response
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

import requests

from todo_client.constants import STATUS_CREATED, STATUS_OK
from todo_client.models import Todo

logger = logging.getLogger(__name__)

Action = Callable[[int], requests.Response]


class HarnessTimeoutError(TimeoutError):
    """Raised when concurrent workers do not all finish within the join timeout."""


class ActorOutcome(str, Enum):
    """Result of one concurrent attempt."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ActorResult:
    """What a single actor observed."""

    index: int
    outcome: ActorOutcome
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class RaceResult:
    """Outcomes of every actor in one race, ordered by actor index."""

    results: tuple[ActorResult, ...]

    @property
    def accepted(self) -> list[ActorResult]:
        return [r for r in self.results if r.outcome is ActorOutcome.ACCEPTED]

    @property
    def rejected(self) -> list[ActorResult]:
        return [r for r in self.results if r.outcome is ActorOutcome.REJECTED]

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def status_codes(self) -> list[int | None]:
        return [r.status_code for r in self.results]


class RaceHarness:
    """
    Launch N concurrent actors and wait for all of them.

    Args:
        actor_count: Number of parallel actors.
        join_timeout: Seconds to wait for every actor before failing.
        accepted_statuses: Response codes counted as an accepted outcome.
    """

    def __init__(
        self,
        actor_count: int = 5,
        join_timeout: float = 30.0,
        accepted_statuses: Iterable[int] = (STATUS_OK, STATUS_CREATED),
    ):
        if actor_count < 1:
            raise ValueError("actor_count must be at least 1")
        self.actor_count = actor_count
        self.join_timeout = join_timeout
        self.accepted_statuses = frozenset(accepted_statuses)

    def run(self, action: Action) -> RaceResult:
        """
        Run ``action(index)`` once in each of ``actor_count`` threads.

        Network errors count as a rejected outcome for that actor.  Any
        other exception raised by an actor is re-raised here.

        Raises:
            HarnessTimeoutError: If an actor is still running after
                ``join_timeout`` seconds.
        """
        barrier = threading.Barrier(self.actor_count)

        def _actor(index: int) -> ActorResult:
            barrier.wait(timeout=self.join_timeout)
            try:
                response = action(index)
            except requests.RequestException as exc:
                logger.warning("Actor %d request failed: %s", index, exc)
                return ActorResult(index, ActorOutcome.REJECTED, error=str(exc))

            outcome = (
                ActorOutcome.ACCEPTED
                if response.status_code in self.accepted_statuses
                else ActorOutcome.REJECTED
            )
            logger.info("Actor %d finished with %s (%s)", index, response.status_code, outcome.value)
            return ActorResult(index, outcome, status_code=response.status_code)

        executor = ThreadPoolExecutor(max_workers=self.actor_count, thread_name_prefix="race-actor")
        try:
            futures = [executor.submit(_actor, index) for index in range(self.actor_count)]
            done, not_done = wait(futures, timeout=self.join_timeout)
            if not_done:
                raise HarnessTimeoutError(
                    f"{len(not_done)} of {self.actor_count} actors did not finish "
                    f"within {self.join_timeout}s"
                )
            results = tuple(future.result() for future in futures)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        race = RaceResult(results)
        logger.info(
            "Race finished: %d accepted, %d rejected, statuses=%s",
            race.accepted_count,
            len(race.rejected),
            race.status_codes,
        )
        return race

    # -------------------------------------------------------------------------
    # Todo scenarios
    # -------------------------------------------------------------------------

    def create_with_shared_id(self, client, conflict_id: int) -> RaceResult:
        """Every actor POSTs ``conflict_id`` with its own text."""
        logger.info("Racing %d creates on shared ID %s", self.actor_count, conflict_id)

        def _create(index: int) -> requests.Response:
            todo = Todo(id=conflict_id, text=f"Duplicate ID Todo {index}", completed=False)
            return client.create_todo(todo)

        return self.run(_create)

    def create_with_distinct_ids(self, client, todos: Sequence[Todo]) -> RaceResult:
        """One actor per todo; ``todos`` must hold ``actor_count`` items."""
        if len(todos) != self.actor_count:
            raise ValueError(f"Expected {self.actor_count} todos, got {len(todos)}")
        logger.info("Racing %d creates on distinct IDs", self.actor_count)
        return self.run(lambda index: client.create_todo(todos[index]))


def distinct_todos(count: int) -> list[Todo]:
    """Build ``count`` todos with unique ids and per-actor text."""
    return [Todo.custom(f"Thread-{index}-Todo", False) for index in range(count)]


def count_entities(client, conflict_id: int) -> int:
    """Count stored todos carrying ``conflict_id``."""
    return sum(1 for todo in client.fetch_all_todos() if todo.id == conflict_id)


def assert_single_winner(client, conflict_id: int) -> None:
    """Fail unless exactly one stored todo carries ``conflict_id``."""
    stored = count_entities(client, conflict_id)
    assert stored == 1, f"Expected exactly 1 todo with ID {conflict_id}, found {stored}"


def assert_all_created(client, expected: Sequence[Todo]) -> None:
    """Fail unless every expected todo is stored with the text its actor sent."""
    stored = {todo.id: todo for todo in client.fetch_all_todos()}
    missing = [todo.id for todo in expected if todo.id not in stored]
    assert not missing, f"Todos missing after concurrent create: {missing}"

    for todo in expected:
        assert stored[todo.id].text == todo.text, (
            f"Todo {todo.id} text {stored[todo.id].text!r} does not match {todo.text!r}"
        )
