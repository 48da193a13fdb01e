"""
In-process command/event bus

Each command goes to the one handler registered for the type of its body;
the events a handler returns are later published to the projections that
subscribed to their event type. Everything runs on the caller's thread, so
ballot operations are serialized.
"""

import time
from collections import defaultdict
from collections.abc import Callable, Iterable

from pydantic import BaseModel

from delegable_ballot.kernel.errors import BallotError
from delegable_ballot.kernel.logging import get_logger, log_operation
from delegable_ballot.kernel.messages import Command, Event
from delegable_ballot.kernel.metrics import (
    command_duration_seconds,
    commands_processed_total,
    commands_rejected_total,
)

logger = get_logger(__name__)

CommandHandler = Callable[[Command], list[Event]]
Subscriber = Callable[[Event], None]


class InProcessBus:
    def __init__(self) -> None:
        self._handlers: dict[type[BaseModel], CommandHandler] = {}
        self._subscribers: defaultdict[str, list[Subscriber]] = defaultdict(list)

    def register_command_handler(
        self, body_type: type[BaseModel], handler: CommandHandler
    ) -> None:
        """
        Raises:
            ValueError: If body_type already has a handler
        """
        if body_type in self._handlers:
            raise ValueError(f"{body_type.__name__} already has a handler")
        self._handlers[body_type] = handler

    def subscribe(self, event_type: str, subscriber: Subscriber) -> None:
        """Deliver events of event_type to subscriber, after earlier subscribers"""
        self._subscribers[event_type].append(subscriber)

    def dispatch(self, command: Command) -> list[Event]:
        """
        Run the handler for command and return the events it decided on

        Raises:
            LookupError: No handler for the command's body type
            BallotError: The voting rule the handler found violated
        """
        handler = self._handlers.get(type(command.body))
        if handler is None:
            raise LookupError(f"No handler registered for {command.command_type}")

        started = time.perf_counter()
        status = "success"
        try:
            with log_operation(
                logger,
                "dispatch",
                command_type=command.command_type,
                command_id=command.command_id,
                actor_id=command.actor_id,
            ):
                return handler(command)
        except BallotError as e:
            status = "rejected"
            commands_rejected_total.labels(error_kind=type(e).__name__).inc()
            raise
        except Exception:
            status = "failure"
            raise
        finally:
            command_duration_seconds.labels(command_type=command.command_type).observe(
                time.perf_counter() - started
            )
            commands_processed_total.labels(
                command_type=command.command_type, status=status
            ).inc()

    def publish(self, events: Iterable[Event]) -> None:
        """
        Deliver events in order

        A failing subscriber stops delivery; the error is logged and
        propagates.
        """
        for event in events:
            for subscriber in self._subscribers.get(event.event_type, ()):
                try:
                    subscriber(event)
                except Exception:
                    logger.error(
                        "Projection failed to apply event",
                        event_type=event.event_type,
                        version=event.version,
                        exc_info=True,
                    )
                    raise
